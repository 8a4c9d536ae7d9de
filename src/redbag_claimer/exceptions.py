"""Consolidated exception hierarchy for the red bag claimer.

All exceptions use proper exception chaining with the `from` keyword.
Error kinds use StrEnum so outcomes and logs carry a stable identifier.
"""

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Failure classes distinguished by the claim engine."""

    CONFIGURATION = "configuration_error"
    AUTH = "auth_error"
    CLAIM_REJECTED = "claim_rejected"
    AUTH_EXPIRED = "auth_expired"
    TRANSPORT = "transport_error"


# ============================================================================
# Base Exceptions
# ============================================================================


class ClaimerError(Exception):
    """Base exception for all claimer errors.

    Carries the failure kind and optional structured details for logging.
    """

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ClaimerError):
    """Raised when configuration loading or validation fails.

    Only ever fatal at startup; never raised while claiming.
    """

    kind = ErrorKind.CONFIGURATION


# ============================================================================
# Login Errors
# ============================================================================


class AuthError(ClaimerError):
    """Login for an account failed."""

    kind = ErrorKind.AUTH


class LoginRejectedError(AuthError):
    """Login endpoint answered but refused or returned a malformed body."""

    pass


class LoginTransportError(AuthError):
    """Login call failed at the network level (connect, timeout, HTTP error)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# ============================================================================
# Claim Errors
# ============================================================================


class ClaimError(ClaimerError):
    """Base exception for claim call failures."""

    pass


class ClaimRejectedError(ClaimError):
    """Claim call succeeded at the transport level but was denied."""

    kind = ErrorKind.CLAIM_REJECTED

    def __init__(self, message: str, *, remote_code: str | None = None) -> None:
        super().__init__(message)
        self.remote_code = remote_code


class AuthExpiredError(ClaimError):
    """Claim call returned 401; the cached session key is no longer accepted."""

    kind = ErrorKind.AUTH_EXPIRED


class TransportError(ClaimError):
    """Network failure, timeout or non-auth error status on the claim call."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "ErrorKind",
    "ClaimerError",
    "ConfigurationError",
    "AuthError",
    "LoginRejectedError",
    "LoginTransportError",
    "ClaimError",
    "ClaimRejectedError",
    "AuthExpiredError",
    "TransportError",
]
