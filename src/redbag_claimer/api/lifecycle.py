"""Application lifecycle management helpers."""

from collections.abc import Awaitable, Callable

import httpx
from fastapi import FastAPI
from structlog import get_logger
from typing_extensions import TypedDict

from redbag_claimer.claims.factory import build_orchestrator
from redbag_claimer.config.settings import Settings


logger = get_logger(__name__)


class LifecycleComponent(TypedDict):
    name: str
    startup: Callable[[FastAPI, Settings], Awaitable[None]] | None
    shutdown: Callable[[FastAPI], Awaitable[None]] | None


async def initialize_claim_engine_startup(app: FastAPI, settings: Settings) -> None:
    """Create the shared HTTP client and the claim orchestrator.

    Raises:
        ConfigurationError: If the account pool or base URL is unusable
    """
    client = httpx.AsyncClient()
    try:
        app.state.orchestrator = build_orchestrator(settings, client)
    except BaseException:
        await client.aclose()
        raise
    app.state.http_client = client


async def initial_login_startup(app: FastAPI, settings: Settings) -> None:
    """Log every account in before accepting webhooks.

    Individual failures are logged and retried lazily on the first claim.
    """
    orchestrator = app.state.orchestrator
    logged_in = await orchestrator.login_all()
    failed = [str(ref) for ref, ok in logged_in.items() if not ok]
    if failed:
        logger.warning(
            "initial_login_incomplete",
            failed=failed,
            message="Will retry on first relevant message or 401 error",
        )


async def shutdown_claim_engine(app: FastAPI) -> None:
    """Close the shared HTTP client."""
    client: httpx.AsyncClient | None = getattr(app.state, "http_client", None)
    if client is not None:
        await client.aclose()
        app.state.http_client = None
        logger.info("http_client_closed")


LIFECYCLE_COMPONENTS: list[LifecycleComponent] = [
    {
        "name": "Claim Engine",
        "startup": initialize_claim_engine_startup,
        "shutdown": shutdown_claim_engine,
    },
    {
        "name": "Initial Login",
        "startup": initial_login_startup,
        "shutdown": None,  # One-time batch, no cleanup needed
    },
]


async def execute_startup_sequence(
    components: list[LifecycleComponent],
    app: FastAPI,
    settings: Settings,
) -> None:
    """Execute all startup components in order.

    Startup errors propagate: a misconfigured pool must stop the server.
    """
    for component in components:
        if component["startup"] is None:
            continue
        logger.debug(f"starting_{component['name'].lower().replace(' ', '_')}")
        await component["startup"](app, settings)


async def execute_shutdown_sequence(
    components: list[LifecycleComponent],
    app: FastAPI,
) -> None:
    """Execute all shutdown components in reverse order."""
    for component in reversed(components):
        if component["shutdown"] is None:
            continue
        component_name = component["name"].lower().replace(" ", "_")
        try:
            logger.debug(f"stopping_{component_name}")
            await component["shutdown"](app)
        except (OSError, RuntimeError) as e:
            logger.error(
                f"{component_name}_shutdown_failed",
                error=str(e),
                component=component["name"],
            )
