"""Claim result model."""

from dataclasses import dataclass
from typing import Any

from redbag_claimer.accounts.models import AccountRef


@dataclass(frozen=True)
class ClaimOutcome:
    """Result of a claim attempt, per account or aggregated over the pool."""

    succeeded: bool
    message: str
    claimed_by: AccountRef | None = None

    @classmethod
    def success(cls, message: str, claimed_by: AccountRef) -> "ClaimOutcome":
        return cls(succeeded=True, message=message, claimed_by=claimed_by)

    @classmethod
    def failure(cls, message: str) -> "ClaimOutcome":
        return cls(succeeded=False, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and JSON responses."""
        return {
            "success": self.succeeded,
            "message": self.message,
            "claimedByCredId": self.claimed_by.id if self.claimed_by else None,
        }
