"""Account identities, pool and session state."""

from redbag_claimer.accounts.identity import (
    AccountIdentity,
    hash_secret,
    normalize_handle,
)
from redbag_claimer.accounts.models import AccountRef, Credentials, Session
from redbag_claimer.accounts.pool import AccountPool, PoolEntry
from redbag_claimer.accounts.session_store import SessionStore


__all__ = [
    "AccountIdentity",
    "AccountPool",
    "AccountRef",
    "Credentials",
    "PoolEntry",
    "Session",
    "SessionStore",
    "hash_secret",
    "normalize_handle",
]
