"""Ordered account pool.

The pool is built once at startup from configuration; its declaration order
is the fixed trial order for every claim.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from structlog import get_logger

from redbag_claimer.accounts.identity import AccountIdentity
from redbag_claimer.accounts.models import AccountRef
from redbag_claimer.constants import DEFAULT_COUNTRY_CODE, LOGIN_COOLDOWN_SECONDS
from redbag_claimer.exceptions import ConfigurationError


if TYPE_CHECKING:
    from redbag_claimer.accounts.session_store import SessionStore
    from redbag_claimer.config.settings import AccountConfig


logger = get_logger(__name__)


@dataclass(frozen=True)
class PoolEntry:
    """One account in the pool."""

    ref: AccountRef
    identity: AccountIdentity


class AccountPool:
    """Non-empty, ordered sequence of accounts."""

    def __init__(self, entries: Iterable[PoolEntry]) -> None:
        """Initialize the pool.

        Args:
            entries: Accounts in trial order

        Raises:
            ConfigurationError: If no accounts were given or ids repeat
        """
        self._entries: tuple[PoolEntry, ...] = tuple(entries)
        if not self._entries:
            raise ConfigurationError(
                "No valid account credentials configured. "
                "Set CREDENTIALS_JSON to a JSON array of {username, password} objects."
            )

        ids = [entry.ref.id for entry in self._entries]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Duplicate account ids in pool: {ids}")

    @classmethod
    def from_configs(
        cls,
        configs: Iterable["AccountConfig"],
        country_code: str = DEFAULT_COUNTRY_CODE,
    ) -> "AccountPool":
        """Build the pool from parsed account configuration.

        Args:
            configs: Account configs in declaration order
            country_code: Default country code for handle normalization

        Returns:
            Pool with one entry per config

        Raises:
            ConfigurationError: If the pool would be empty or a handle is unusable
        """
        entries = []
        for config in configs:
            identity = AccountIdentity.from_config(
                config.username, config.password, country_code
            )
            if not identity.handle:
                raise ConfigurationError(
                    f"Account {config.id} has no digits in its username"
                )
            entries.append(
                PoolEntry(
                    ref=AccountRef(id=config.id, handle=identity.handle),
                    identity=identity,
                )
            )

        pool = cls(entries)
        logger.info(
            "account_pool_loaded",
            count=len(pool),
            accounts=[str(ref) for ref in pool.refs],
        )
        return pool

    def __iter__(self) -> Iterator[PoolEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def refs(self) -> list[AccountRef]:
        """Account references in trial order."""
        return [entry.ref for entry in self._entries]

    def get_status(
        self,
        store: "SessionStore",
        cooldown_window: float = LOGIN_COOLDOWN_SECONDS,
    ) -> dict[str, Any]:
        """Get pool status for monitoring.

        Args:
            store: Session store holding the accounts' sessions
            cooldown_window: Cooldown length used to flag idle accounts

        Returns:
            Status dictionary with counts and per-account details
        """
        accounts = []
        for entry in self._entries:
            session = store.get(entry.ref)
            accounts.append(
                {
                    "id": entry.ref.id,
                    "handle": entry.ref.handle,
                    "loggedIn": session.has_token,
                    "authPending": session.auth_pending,
                    "lastAttemptFailed": session.last_attempt_failed,
                    "inCooldown": store.is_in_cooldown(entry.ref, cooldown_window),
                }
            )

        return {
            "totalAccounts": len(accounts),
            "loggedInAccounts": sum(1 for a in accounts if a["loggedIn"]),
            "cooldownAccounts": sum(1 for a in accounts if a["inCooldown"]),
            "accounts": accounts,
        }
