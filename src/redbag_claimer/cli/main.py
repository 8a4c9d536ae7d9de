"""Command line entry point."""

import asyncio
from typing import Annotated

import httpx
import typer
import uvicorn
from rich import box
from rich.console import Console
from rich.table import Table
from structlog import get_logger

from redbag_claimer import __version__
from redbag_claimer.accounts.pool import AccountPool
from redbag_claimer.api.routes.webhook import extract_code, format_claim_reply
from redbag_claimer.claims.factory import build_orchestrator
from redbag_claimer.claims.models import ClaimOutcome
from redbag_claimer.config.settings import Settings, get_settings
from redbag_claimer.core.logging import setup_logging
from redbag_claimer.exceptions import ConfigurationError


app = typer.Typer(
    name="redbag-claimer",
    help="Claim red bag codes with a pool of accounts.",
    no_args_is_help=True,
)

console = Console()
logger = get_logger(__name__)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"redbag-claimer {__version__}")
        raise typer.Exit()


def _load_settings(log_level: str | None) -> Settings:
    """Load settings and configure logging, exiting on bad configuration."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[bold red]FATAL:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e

    setup_logging(log_level or settings.server.log_level, settings.server.json_logs)
    logger.debug("settings_loaded", settings=settings.model_dump_safe())
    return settings


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Red bag claimer."""


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address")] = None,
    port: Annotated[int | None, typer.Option(help="Bind port")] = None,
    log_level: Annotated[str | None, typer.Option(help="Log level")] = None,
) -> None:
    """Run the WhatsApp webhook server."""
    from redbag_claimer.api.app import create_app

    settings = _load_settings(log_level)
    try:
        # Fail fast before binding the port
        settings.require_base_url()
        AccountPool.from_configs(settings.account_configs(), settings.claim.country_code)
    except ConfigurationError as e:
        console.print(f"[bold red]FATAL:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e

    uvicorn.run(
        create_app(settings),
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_config=None,
    )


async def _claim_once(settings: Settings, code: str) -> ClaimOutcome:
    async with httpx.AsyncClient() as client:
        orchestrator = build_orchestrator(settings, client)
        return await orchestrator.claim_code(code)


@app.command()
def claim(
    code: Annotated[str, typer.Argument(help="Six-character red bag code")],
    log_level: Annotated[str | None, typer.Option(help="Log level")] = None,
) -> None:
    """Claim a single code from the terminal."""
    settings = _load_settings(log_level)

    bag_key = extract_code(code)
    if bag_key is None:
        console.print(f"[red]Not a valid red bag code:[/red] {code!r}")
        raise typer.Exit(code=2)

    try:
        outcome = asyncio.run(_claim_once(settings, bag_key))
    except ConfigurationError as e:
        console.print(f"[bold red]FATAL:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e

    style = "green" if outcome.succeeded else "red"
    console.print(f"[{style}]{format_claim_reply(bag_key, outcome)}[/{style}]")
    if not outcome.succeeded:
        raise typer.Exit(code=1)


@app.command()
def accounts(
    log_level: Annotated[str | None, typer.Option(help="Log level")] = "WARNING",
) -> None:
    """List the configured account pool in trial order."""
    settings = _load_settings(log_level)
    try:
        pool = AccountPool.from_configs(
            settings.account_configs(), settings.claim.country_code
        )
    except ConfigurationError as e:
        console.print(f"[bold red]FATAL:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e

    table = Table(
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        title="Account Pool",
        title_style="bold white",
    )
    table.add_column("Cred", style="cyan", justify="right")
    table.add_column("Handle", style="white")
    for ref in pool.refs:
        table.add_row(str(ref.id), ref.handle)
    console.print(table)


if __name__ == "__main__":
    app()
