"""In-memory session store for pool accounts.

Holds, per account, the current credentials and the login cooldown state.
Every mutation is a single read-modify-write under one lock with no await
inside, so concurrent claim flows sharing the store never observe a
half-applied update.
"""

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import replace

from structlog import get_logger

from redbag_claimer.accounts.models import AccountRef, Credentials, Session
from redbag_claimer.constants import LOGIN_COOLDOWN_SECONDS


logger = get_logger(__name__)


class SessionStore:
    """Per-account session state with atomic mutations.

    Features:
    - At most one in-flight login per account (``begin_auth``)
    - Failed-login cooldown tracking
    - Snapshot reads that never block on network activity
    """

    def __init__(
        self,
        accounts: Iterable[AccountRef] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the store.

        Args:
            accounts: Accounts to register with an empty session
            clock: Monotonic time source in seconds
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[int, Session] = {}
        for account in accounts:
            self.register(account)

    def register(self, account: AccountRef) -> None:
        """Register an account with an empty session (no-op if known)."""
        with self._lock:
            self._sessions.setdefault(account.id, Session())

    def _require(self, account: AccountRef) -> Session:
        try:
            return self._sessions[account.id]
        except KeyError:
            raise KeyError(f"Unknown account: {account}") from None

    def get(self, account: AccountRef) -> Session:
        """Get a snapshot of the account's session."""
        with self._lock:
            return self._require(account)

    def begin_auth(self, account: AccountRef) -> bool:
        """Claim the right to log in for this account.

        Returns:
            True if the caller may proceed, False if a login is already in flight
        """
        with self._lock:
            session = self._require(account)
            if session.auth_pending:
                logger.debug("login_already_pending", account=account.id)
                return False
            self._sessions[account.id] = replace(session, auth_pending=True)
            return True

    def complete_auth(
        self, account: AccountRef, result: Credentials | BaseException
    ) -> None:
        """Record the result of a login started with ``begin_auth``.

        Args:
            account: Account that logged in
            result: Issued credentials, or the exception the login raised
        """
        with self._lock:
            session = self._require(account)
            now = self._clock()
            if isinstance(result, Credentials):
                self._sessions[account.id] = replace(
                    session,
                    token=result,
                    auth_pending=False,
                    last_attempt_at=now,
                    last_attempt_failed=False,
                )
            else:
                self._sessions[account.id] = replace(
                    session,
                    token=None,
                    auth_pending=False,
                    last_attempt_at=now,
                    last_attempt_failed=True,
                )

    def invalidate(self, account: AccountRef) -> None:
        """Drop the cached token (e.g. after the remote rejected it)."""
        with self._lock:
            session = self._require(account)
            self._sessions[account.id] = replace(session, token=None)
        logger.debug("session_invalidated", account=account.id)

    def is_in_cooldown(
        self, account: AccountRef, window: float = LOGIN_COOLDOWN_SECONDS
    ) -> bool:
        """Check whether a recent failed login should keep the account idle.

        Args:
            account: Account to check
            window: Cooldown length in seconds

        Returns:
            True iff the last login failed less than ``window`` seconds ago
        """
        with self._lock:
            session = self._require(account)
            if not session.last_attempt_failed:
                return False
            return self._clock() - session.last_attempt_at < window
