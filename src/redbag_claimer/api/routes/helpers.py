"""Helpers shared by route handlers."""

from fastapi import HTTPException, Request
from starlette import status

from redbag_claimer.claims.orchestrator import ClaimOrchestrator


def get_orchestrator_from_request(request: Request) -> ClaimOrchestrator:
    """Get the claim orchestrator from app state.

    Raises:
        HTTPException: If the claim engine is not initialized
    """
    orchestrator: ClaimOrchestrator | None = getattr(
        request.app.state, "orchestrator", None
    )
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Claim engine not initialized",
        )
    return orchestrator
