"""Status endpoints for account pool monitoring.

Provides visibility into per-account session state without exposing
secrets or session keys.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field
from structlog import get_logger

from redbag_claimer.api.routes.helpers import get_orchestrator_from_request
from redbag_claimer.claims.orchestrator import ClaimOrchestrator


logger = get_logger(__name__)

router = APIRouter(tags=["status"])


class AccountStatusResponse(BaseModel):
    """Status response for a single account."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="1-based account position")
    handle: str = Field(description="Normalized login handle")
    logged_in: bool = Field(
        serialization_alias="loggedIn",
        validation_alias="loggedIn",
        description="Whether a session token is cached",
    )
    auth_pending: bool = Field(
        serialization_alias="authPending",
        validation_alias="authPending",
        description="Whether a login is in flight",
    )
    last_attempt_failed: bool = Field(
        serialization_alias="lastAttemptFailed",
        validation_alias="lastAttemptFailed",
        description="Whether the most recent login failed",
    )
    in_cooldown: bool = Field(
        serialization_alias="inCooldown",
        validation_alias="inCooldown",
        description="Whether claims currently skip this account",
    )


class PoolStatusResponse(BaseModel):
    """Aggregate status response for the account pool."""

    model_config = ConfigDict(populate_by_name=True)

    total_accounts: int = Field(
        serialization_alias="totalAccounts", validation_alias="totalAccounts"
    )
    logged_in_accounts: int = Field(
        serialization_alias="loggedInAccounts", validation_alias="loggedInAccounts"
    )
    cooldown_accounts: int = Field(
        serialization_alias="cooldownAccounts", validation_alias="cooldownAccounts"
    )
    accounts: list[AccountStatusResponse] = Field(description="Per-account details")


class HealthResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(description="ok if any account is logged in, else degraded")
    logged_in_accounts: int = Field(
        serialization_alias="loggedInAccounts", validation_alias="loggedInAccounts"
    )
    timestamp: str = Field(description="Current server timestamp")


def _pool_status(orchestrator: ClaimOrchestrator) -> dict[str, Any]:
    return orchestrator.pool.get_status(
        orchestrator.store, orchestrator.cooldown_window
    )


@router.get("/status", response_model=PoolStatusResponse, response_model_by_alias=True)
async def get_pool_status(request: Request) -> PoolStatusResponse:
    """Get per-account session state."""
    orchestrator = get_orchestrator_from_request(request)
    return PoolStatusResponse.model_validate(_pool_status(orchestrator))


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
async def health(request: Request) -> HealthResponse:
    """Health check with login awareness."""
    orchestrator = get_orchestrator_from_request(request)
    logged_in = _pool_status(orchestrator)["loggedInAccounts"]
    return HealthResponse(
        status="ok" if logged_in else "degraded",
        logged_in_accounts=logged_in,
        timestamp=datetime.now(UTC).isoformat(),
    )
