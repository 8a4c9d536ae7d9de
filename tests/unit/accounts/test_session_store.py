"""Tests for the in-memory session store."""

import asyncio
import threading

import pytest

from redbag_claimer.accounts.models import AccountRef, Credentials
from redbag_claimer.accounts.session_store import SessionStore
from redbag_claimer.exceptions import LoginRejectedError


ACCOUNT = AccountRef(id=1, handle="+573001234567")
OTHER = AccountRef(id=2, handle="+573007654321")
CREDS = Credentials(member_id="m-1", session_key="s-1")


class StepClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def store(clock: StepClock) -> SessionStore:
    return SessionStore([ACCOUNT, OTHER], clock=clock)


@pytest.mark.unit
class TestSessionLifecycle:
    def test_new_session_is_empty(self, store: SessionStore) -> None:
        session = store.get(ACCOUNT)
        assert session.token is None
        assert session.auth_pending is False
        assert session.last_attempt_failed is False

    def test_unknown_account_raises(self, store: SessionStore) -> None:
        with pytest.raises(KeyError):
            store.get(AccountRef(id=99, handle="+570000000000"))

    def test_successful_auth_sets_token(self, store: SessionStore) -> None:
        assert store.begin_auth(ACCOUNT) is True
        store.complete_auth(ACCOUNT, CREDS)

        session = store.get(ACCOUNT)
        assert session.token == CREDS
        assert session.auth_pending is False
        assert session.last_attempt_failed is False

    def test_failed_auth_clears_token_and_records_failure(
        self, store: SessionStore, clock: StepClock
    ) -> None:
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, CREDS)

        clock.now = 700.0
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, LoginRejectedError("bad password"))

        session = store.get(ACCOUNT)
        assert session.token is None
        assert session.auth_pending is False
        assert session.last_attempt_failed is True
        assert session.last_attempt_at == 700.0

    def test_success_after_failure_clears_failure_flag(self, store: SessionStore) -> None:
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, LoginRejectedError("nope"))
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, CREDS)

        assert store.get(ACCOUNT).last_attempt_failed is False
        assert store.is_in_cooldown(ACCOUNT) is False

    def test_invalidate_clears_token_only(self, store: SessionStore) -> None:
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, CREDS)
        before = store.get(ACCOUNT)

        store.invalidate(ACCOUNT)

        after = store.get(ACCOUNT)
        assert after.token is None
        assert after.last_attempt_at == before.last_attempt_at
        assert after.last_attempt_failed == before.last_attempt_failed

    def test_snapshot_is_detached(self, store: SessionStore) -> None:
        snapshot = store.get(ACCOUNT)
        store.begin_auth(ACCOUNT)
        assert snapshot.auth_pending is False
        assert store.get(ACCOUNT).auth_pending is True

    def test_accounts_are_independent(self, store: SessionStore) -> None:
        store.begin_auth(ACCOUNT)
        assert store.begin_auth(OTHER) is True
        store.complete_auth(ACCOUNT, LoginRejectedError("nope"))
        assert store.is_in_cooldown(OTHER) is False


@pytest.mark.unit
class TestBeginAuthMutualExclusion:
    def test_second_begin_auth_is_refused_while_pending(self, store: SessionStore) -> None:
        assert store.begin_auth(ACCOUNT) is True
        assert store.begin_auth(ACCOUNT) is False

    def test_begin_auth_allowed_again_after_completion(self, store: SessionStore) -> None:
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, LoginRejectedError("nope"))
        assert store.begin_auth(ACCOUNT) is True

    def test_exactly_one_thread_wins(self, store: SessionStore) -> None:
        barrier = threading.Barrier(16)
        results: list[bool] = []
        results_lock = threading.Lock()

        def contender() -> None:
            barrier.wait()
            won = store.begin_auth(ACCOUNT)
            with results_lock:
                results.append(won)

        threads = [threading.Thread(target=contender) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1

    async def test_exactly_one_task_wins(self, store: SessionStore) -> None:
        async def contender() -> bool:
            await asyncio.sleep(0)
            return store.begin_auth(ACCOUNT)

        results = await asyncio.gather(*(contender() for _ in range(20)))
        assert results.count(True) == 1


@pytest.mark.unit
class TestCooldown:
    def test_no_cooldown_without_failure(self, store: SessionStore) -> None:
        assert store.is_in_cooldown(ACCOUNT) is False

    def test_cooldown_until_window_elapses(
        self, store: SessionStore, clock: StepClock
    ) -> None:
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, LoginRejectedError("nope"))

        assert store.is_in_cooldown(ACCOUNT, window=60) is True
        clock.now += 59.999
        assert store.is_in_cooldown(ACCOUNT, window=60) is True
        clock.now = 500.0 + 60
        assert store.is_in_cooldown(ACCOUNT, window=60) is False

    def test_custom_window(self, store: SessionStore, clock: StepClock) -> None:
        store.begin_auth(ACCOUNT)
        store.complete_auth(ACCOUNT, LoginRejectedError("nope"))
        clock.now += 10
        assert store.is_in_cooldown(ACCOUNT, window=5) is False
        assert store.is_in_cooldown(ACCOUNT, window=30) is True
