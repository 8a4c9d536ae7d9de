"""Wiring of the claim engine from settings."""

import time
from collections.abc import Callable

import httpx
from structlog import get_logger

from redbag_claimer.accounts.pool import AccountPool
from redbag_claimer.accounts.session_store import SessionStore
from redbag_claimer.auth.authenticator import Authenticator
from redbag_claimer.claims.orchestrator import ClaimOrchestrator
from redbag_claimer.config.settings import Settings


logger = get_logger(__name__)


def build_orchestrator(
    settings: Settings,
    client: httpx.AsyncClient,
    clock: Callable[[], float] = time.monotonic,
) -> ClaimOrchestrator:
    """Build the pool, session store, authenticator and orchestrator.

    Args:
        settings: Loaded settings
        client: Shared HTTP client (owned by the caller)
        clock: Time source for login cooldowns

    Returns:
        Orchestrator ready to claim codes

    Raises:
        ConfigurationError: If the base URL is missing or the pool is empty
    """
    base_url = settings.require_base_url()
    claim = settings.claim

    pool = AccountPool.from_configs(settings.account_configs(), claim.country_code)
    store = SessionStore(pool.refs, clock=clock)
    authenticator = Authenticator(
        client,
        base_url,
        timeout=claim.login_timeout,
        max_retries=claim.max_login_retries,
        retry_delay=claim.login_retry_delay,
        retry_transient_only=claim.retry_transient_only,
    )

    logger.info(
        "claim_engine_built",
        accounts=len(pool),
        max_login_retries=claim.max_login_retries,
        retry_transient_only=claim.retry_transient_only,
    )
    return ClaimOrchestrator(
        pool,
        store,
        authenticator,
        client,
        base_url,
        lang=claim.lang,
        timeout=claim.claim_timeout,
        cooldown_window=claim.cooldown_seconds,
    )
