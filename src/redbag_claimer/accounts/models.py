"""Account and session data models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Credentials:
    """Session credentials issued by the login endpoint."""

    member_id: str
    session_key: str

    @classmethod
    def from_mem_info(cls, data: dict[str, Any]) -> "Credentials":
        """Create from the ``memInfo`` block of a login response.

        Raises:
            KeyError: If ``memberID`` or ``skey`` is missing or empty
        """
        member_id = data.get("memberID")
        session_key = data.get("skey")
        if not member_id or not session_key:
            raise KeyError("memInfo is missing memberID or skey")
        return cls(member_id=str(member_id), session_key=str(session_key))

    def __repr__(self) -> str:
        return f"Credentials(member_id={self.member_id!r}, session_key='***')"


@dataclass(frozen=True)
class AccountRef:
    """Stable reference to a pool account: 1-based declaration index and handle."""

    id: int
    handle: str

    def __str__(self) -> str:
        return f"Cred {self.id} ({self.handle})"


@dataclass(frozen=True)
class Session:
    """Snapshot of one account's session state.

    The session store hands out copies; mutating a snapshot never touches
    the stored state.
    """

    token: Credentials | None = None
    auth_pending: bool = False
    last_attempt_at: float = 0.0
    last_attempt_failed: bool = False

    @property
    def has_token(self) -> bool:
        return self.token is not None
