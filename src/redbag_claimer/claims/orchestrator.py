"""Claim orchestration across the account pool.

A code is tried against accounts one at a time in pool order, stopping at
the first success. Each account logs in lazily, and a claim rejected with
401 gets exactly one re-login and retry.
"""

import asyncio

import httpx
from structlog import get_logger

from redbag_claimer.accounts.models import AccountRef, Credentials
from redbag_claimer.accounts.pool import AccountPool, PoolEntry
from redbag_claimer.accounts.session_store import SessionStore
from redbag_claimer.auth.authenticator import Authenticator
from redbag_claimer.claims.models import ClaimOutcome
from redbag_claimer.constants import (
    CLAIM_ATTEMPTS_PER_ACCOUNT,
    CLAIM_PATH,
    CLAIM_TIMEOUT_SECONDS,
    DEFAULT_CLAIM_MESSAGE,
    DEFAULT_LANG,
    LOGIN_COOLDOWN_SECONDS,
    NO_CREDENTIALS_MESSAGE,
)
from redbag_claimer.core.http import (
    describe_transport_error,
    is_remote_success,
    read_json_object,
    remote_error_message,
)
from redbag_claimer.exceptions import (
    AuthError,
    AuthExpiredError,
    ClaimRejectedError,
    TransportError,
)


logger = get_logger(__name__)


class ClaimOrchestrator:
    """Redeems codes using the first account that can claim them.

    Features:
    - Fixed trial order with early exit on success
    - Cooldown skipping without network calls
    - Lazy login, at most one in flight per account
    - Single bounded re-login and retry on session expiry
    """

    def __init__(
        self,
        pool: AccountPool,
        store: SessionStore,
        authenticator: Authenticator,
        client: httpx.AsyncClient,
        base_url: str,
        *,
        lang: str = DEFAULT_LANG,
        timeout: float = CLAIM_TIMEOUT_SECONDS,
        cooldown_window: float = LOGIN_COOLDOWN_SECONDS,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            pool: Accounts in trial order
            store: Session state shared by all claim flows
            authenticator: Performs logins
            client: Shared HTTP client
            base_url: API base URL without trailing slash
            lang: Language sent with each claim
            timeout: Claim call timeout in seconds
            cooldown_window: Seconds to skip an account after a failed login
        """
        self.pool = pool
        self.store = store
        self.authenticator = authenticator
        self._client = client
        self.claim_url = f"{base_url.rstrip('/')}{CLAIM_PATH}"
        self.lang = lang
        self.timeout = timeout
        self.cooldown_window = cooldown_window

        for ref in pool.refs:
            store.register(ref)

    async def login(self, entry: PoolEntry) -> Credentials | None:
        """Log an account in and record the result in the session store.

        Args:
            entry: Account to log in

        Returns:
            New credentials, or None if another login for the account is in flight

        Raises:
            AuthError: If the login failed (the account enters cooldown)
        """
        if not self.store.begin_auth(entry.ref):
            logger.info("login_skipped_pending", account=entry.ref.id)
            return None

        logger.info("login_started", account=entry.ref.id, handle=entry.ref.handle)
        try:
            credentials = await self.authenticator.authenticate(entry.identity)
        except BaseException as e:
            # Releases auth_pending even on cancellation
            self.store.complete_auth(entry.ref, e)
            raise

        self.store.complete_auth(entry.ref, credentials)
        logger.info("login_completed", account=entry.ref.id)
        return credentials

    async def login_all(self) -> dict[AccountRef, bool]:
        """Log every account in concurrently, ignoring individual failures.

        Returns:
            Whether each account holds a token afterwards, in pool order
        """
        logger.info("initial_login_started", accounts=len(self.pool))
        entries = list(self.pool)
        results = await asyncio.gather(
            *(self.login(entry) for entry in entries), return_exceptions=True
        )

        for entry, result in zip(entries, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "initial_login_failed",
                    account=entry.ref.id,
                    error=str(result),
                )

        logged_in = {
            entry.ref: self.store.get(entry.ref).has_token for entry in entries
        }
        succeeded = sum(logged_in.values())
        logger.info(
            "initial_login_completed",
            logged_in=succeeded,
            failed=len(logged_in) - succeeded,
        )
        return logged_in

    async def claim_code(self, code: str) -> ClaimOutcome:
        """Claim a code with the first account that succeeds.

        Never raises: exhaustion of the pool yields a failure outcome.

        Args:
            code: Redemption code extracted by the transport layer

        Returns:
            Success attributed to the claiming account, or the last failure
        """
        logger.info("claim_started", code=code, accounts=len(self.pool))
        last_message = NO_CREDENTIALS_MESSAGE

        for entry in self.pool:
            if self.store.is_in_cooldown(entry.ref, self.cooldown_window):
                logger.info(
                    "account_skipped_cooldown", code=code, account=entry.ref.id
                )
                continue

            try:
                outcome = await self.try_claim(code, entry)
            except Exception as e:
                logger.exception(
                    "claim_attempt_crashed", code=code, account=entry.ref.id
                )
                outcome = ClaimOutcome.failure(f"Unexpected error for {entry.ref}: {e}")

            if outcome.succeeded:
                logger.info(
                    "claim_succeeded",
                    code=code,
                    account=entry.ref.id,
                    message=outcome.message,
                )
                return outcome

            logger.info(
                "claim_attempt_failed",
                code=code,
                account=entry.ref.id,
                message=outcome.message,
            )
            last_message = outcome.message

        logger.warning("claim_exhausted", code=code, message=last_message)
        return ClaimOutcome.failure(last_message)

    async def try_claim(self, code: str, entry: PoolEntry) -> ClaimOutcome:
        """Attempt a claim with one account.

        Args:
            code: Redemption code
            entry: Account to claim with

        Returns:
            Outcome of the attempt (never raises for remote failures)
        """
        ref = entry.ref
        credentials = self.store.get(ref).token

        if credentials is None:
            logger.info("login_before_claim", code=code, account=ref.id)
            try:
                credentials = await self.login(entry)
            except AuthError as e:
                return ClaimOutcome.failure(
                    f"Login required but failed for {ref}: {e.message}"
                )
            if credentials is None:
                return ClaimOutcome.failure(f"Login already in progress for {ref}.")

        for attempt in range(1, CLAIM_ATTEMPTS_PER_ACCOUNT + 1):
            try:
                message = await self._send_claim(code, credentials, ref)
            except AuthExpiredError:
                logger.warning(
                    "claim_auth_expired", code=code, account=ref.id, attempt=attempt
                )
                self.store.invalidate(ref)
                if attempt == CLAIM_ATTEMPTS_PER_ACCOUNT:
                    return ClaimOutcome.failure(
                        f"Session for {ref} was rejected again after re-login."
                    )

                try:
                    credentials = await self.login(entry)
                except AuthError as e:
                    return ClaimOutcome.failure(
                        f"Re-login failed for {ref} after token expiration: {e.message}"
                    )
                if credentials is None:
                    return ClaimOutcome.failure(
                        f"Re-login failed for {ref} after token expiration: "
                        "login already in progress."
                    )
                logger.info("claim_retry_after_relogin", code=code, account=ref.id)
                continue
            except ClaimRejectedError as e:
                return ClaimOutcome.failure(f"Failed for {ref.handle}: {e.message}")
            except TransportError as e:
                return ClaimOutcome.failure(f"Error for {ref}: {e.message}")

            return ClaimOutcome.success(message, ref)

        return ClaimOutcome.failure(f"Claim attempts exhausted for {ref}.")

    async def _send_claim(
        self, code: str, credentials: Credentials, ref: AccountRef
    ) -> str:
        """Send one claim request.

        Returns:
            Remote success message

        Raises:
            AuthExpiredError: Remote answered 401
            ClaimRejectedError: Remote answered with a non-zero body code
            TransportError: Network failure, timeout or other error status
        """
        payload = {
            "bagKey": code,
            "lang": self.lang,
            "memberID": credentials.member_id,
            "skey": credentials.session_key,
        }
        headers = {"Authorization": f"Bearer {credentials.session_key}"}

        logger.debug("claim_request", code=code, account=ref.id)
        try:
            response = await self._client.post(
                self.claim_url, json=payload, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            detail = describe_transport_error(e)
            logger.error("claim_transport_error", code=code, account=ref.id, error=detail)
            raise TransportError(detail) from e

        logger.debug(
            "claim_response", code=code, account=ref.id, status=response.status_code
        )

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthExpiredError(f"Session key rejected for {ref}")

        data = read_json_object(response)

        if response.is_error:
            detail = remote_error_message(data) if data else f"HTTP {response.status_code}"
            logger.error(
                "claim_http_error",
                code=code,
                account=ref.id,
                status=response.status_code,
                error=detail,
            )
            raise TransportError(detail, status_code=response.status_code)

        if data is None or not is_remote_success(data):
            raise ClaimRejectedError(
                remote_error_message(data),
                remote_code=str(data.get("code")) if data else None,
            )

        return str(data.get("msg") or DEFAULT_CLAIM_MESSAGE)
