"""Claim orchestration across the account pool."""

from redbag_claimer.claims.models import ClaimOutcome
from redbag_claimer.claims.orchestrator import ClaimOrchestrator


__all__ = ["ClaimOrchestrator", "ClaimOutcome"]
