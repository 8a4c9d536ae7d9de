"""Shared fixtures: a scripted reward API behind httpx.MockTransport."""

import json
from collections import defaultdict, deque
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from redbag_claimer.accounts.pool import AccountPool
from redbag_claimer.accounts.session_store import SessionStore
from redbag_claimer.auth.authenticator import Authenticator
from redbag_claimer.claims.orchestrator import ClaimOrchestrator
from redbag_claimer.config.settings import AccountConfig


BASE_URL = "https://rewards.test/api"

Scripted = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRewardApi:
    """Scripted login and claim endpoints.

    Logins succeed by default and issue fresh credentials each time.
    Claims are rejected by default. Per-handle queues override either.
    """

    def __init__(self) -> None:
        self.login_calls: list[dict[str, Any]] = []
        self.claim_calls: list[dict[str, Any]] = []
        self.claim_headers: list[httpx.Headers] = []
        self.login_timeouts: list[dict[str, float | None]] = []
        self.claim_timeouts: list[dict[str, float | None]] = []
        self.login_script: dict[str, deque[Scripted]] = defaultdict(deque)
        self.claim_script: dict[str, deque[Scripted]] = defaultdict(deque)
        self._member_handles: dict[str, str] = {}
        self._login_counts: dict[str, int] = defaultdict(int)

    def script_login(self, handle: str, *responses: Scripted) -> None:
        self.login_script[handle].extend(responses)

    def script_claim(self, handle: str, *responses: Scripted) -> None:
        self.claim_script[handle].extend(responses)

    def issued_credentials(self, handle: str, n: int) -> tuple[str, str]:
        """memberID/skey pair issued by the n-th successful default login."""
        return f"member-{handle}-{n}", f"skey-{handle}-{n}"

    def claim_calls_for(self, handle: str) -> list[dict[str, Any]]:
        return [
            call
            for call in self.claim_calls
            if self._member_handles.get(call["memberID"]) == handle
        ]

    def _play(self, scripted: Scripted, request: httpx.Request) -> httpx.Response:
        if isinstance(scripted, Exception):
            raise scripted
        if isinstance(scripted, httpx.Response):
            return scripted
        return scripted(request)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        path = request.url.path

        if path.endswith("/userlogin/"):
            self.login_calls.append(body)
            self.login_timeouts.append(request.extensions["timeout"])
            handle = body["userName"]
            queue = self.login_script[handle]
            if queue:
                return self._play(queue.popleft(), request)
            self._login_counts[handle] += 1
            member_id, skey = self.issued_credentials(handle, self._login_counts[handle])
            self._member_handles[member_id] = handle
            return httpx.Response(
                200, json={"code": "0", "memInfo": {"memberID": member_id, "skey": skey}}
            )

        if path.endswith("/getRedBag/"):
            self.claim_calls.append(body)
            self.claim_headers.append(request.headers)
            self.claim_timeouts.append(request.extensions["timeout"])
            handle = self._member_handles.get(body["memberID"], "")
            queue = self.claim_script[handle]
            if queue:
                return self._play(queue.popleft(), request)
            return httpx.Response(200, json={"code": "1", "msg": "Bag already claimed"})

        return httpx.Response(404)


def make_configs(*usernames: str) -> list[AccountConfig]:
    return [
        AccountConfig(id=index + 1, username=name, password=f"pw-{index + 1}")
        for index, name in enumerate(usernames)
    ]


@pytest.fixture
def fake_api() -> FakeRewardApi:
    return FakeRewardApi()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def http_client(fake_api: FakeRewardApi) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler)) as client:
        yield client


@pytest.fixture
def make_orchestrator(
    http_client: httpx.AsyncClient, clock: FakeClock
) -> Callable[..., ClaimOrchestrator]:
    """Build an orchestrator over the fake API for the given usernames."""

    def _make(*usernames: str, max_retries: int = 1) -> ClaimOrchestrator:
        pool = AccountPool.from_configs(make_configs(*usernames))
        store = SessionStore(pool.refs, clock=clock)
        authenticator = Authenticator(
            http_client, BASE_URL, max_retries=max_retries, retry_delay=0
        )
        return ClaimOrchestrator(pool, store, authenticator, http_client, BASE_URL)

    return _make
