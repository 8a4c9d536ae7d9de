"""Tests for the ordered account pool."""

import pytest

from redbag_claimer.accounts.models import AccountRef, Credentials
from redbag_claimer.accounts.pool import AccountPool
from redbag_claimer.accounts.session_store import SessionStore
from redbag_claimer.config.settings import AccountConfig
from redbag_claimer.exceptions import ConfigurationError, LoginRejectedError


def configs() -> list[AccountConfig]:
    return [
        AccountConfig(id=1, username="3001234567", password="a"),
        AccountConfig(id=3, username="+573007654321", password="b"),
    ]


@pytest.mark.unit
class TestAccountPool:
    def test_keeps_declaration_order(self) -> None:
        pool = AccountPool.from_configs(configs())
        assert pool.refs == [
            AccountRef(id=1, handle="+573001234567"),
            AccountRef(id=3, handle="+573007654321"),
        ]
        assert [entry.identity.secret for entry in pool] == ["a", "b"]

    def test_empty_pool_is_fatal(self) -> None:
        with pytest.raises(ConfigurationError):
            AccountPool.from_configs([])

    def test_handle_without_digits_is_fatal(self) -> None:
        with pytest.raises(ConfigurationError):
            AccountPool.from_configs([AccountConfig(id=1, username="abc", password="x")])

    def test_duplicate_ids_rejected(self) -> None:
        duplicated = [
            AccountConfig(id=1, username="3001234567", password="a"),
            AccountConfig(id=1, username="3007654321", password="b"),
        ]
        with pytest.raises(ConfigurationError):
            AccountPool.from_configs(duplicated)

    def test_status_reports_session_state(self) -> None:
        pool = AccountPool.from_configs(configs())
        store = SessionStore(pool.refs, clock=lambda: 100.0)
        first, second = pool.refs

        store.begin_auth(first)
        store.complete_auth(first, Credentials(member_id="m", session_key="s"))
        store.begin_auth(second)
        store.complete_auth(second, LoginRejectedError("nope"))

        status = pool.get_status(store, cooldown_window=60)

        assert status["totalAccounts"] == 2
        assert status["loggedInAccounts"] == 1
        assert status["cooldownAccounts"] == 1
        assert status["accounts"][0] == {
            "id": 1,
            "handle": "+573001234567",
            "loggedIn": True,
            "authPending": False,
            "lastAttemptFailed": False,
            "inCooldown": False,
        }
        assert status["accounts"][1]["inCooldown"] is True
        assert "skey" not in status["accounts"][0]
