"""Login exchange for pool accounts.

Performs the network login for one account with a bounded retry policy.
The authenticator never touches shared session state; callers record the
result through the session store.
"""

from typing import Any

import httpx
from structlog import get_logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from redbag_claimer.accounts.identity import AccountIdentity
from redbag_claimer.accounts.models import Credentials
from redbag_claimer.constants import (
    LOGIN_PATH,
    LOGIN_RETRY_DELAY_SECONDS,
    LOGIN_TIMEOUT_SECONDS,
    MAX_LOGIN_RETRIES,
)
from redbag_claimer.core.http import (
    describe_transport_error,
    is_remote_success,
    read_json_object,
    remote_error_message,
)
from redbag_claimer.exceptions import (
    AuthError,
    LoginRejectedError,
    LoginTransportError,
)


logger = get_logger(__name__)


class Authenticator:
    """Logs accounts in against the reward API.

    Features:
    - Handle normalization and secret hashing via ``AccountIdentity``
    - Single bounded-timeout login call per attempt
    - Fixed-delay retries, either on every failure or on transient ones only
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        *,
        timeout: float = LOGIN_TIMEOUT_SECONDS,
        max_retries: int = MAX_LOGIN_RETRIES,
        retry_delay: float = LOGIN_RETRY_DELAY_SECONDS,
        retry_transient_only: bool = False,
    ) -> None:
        """Initialize the authenticator.

        Args:
            client: Shared HTTP client
            base_url: API base URL without trailing slash
            timeout: Per-attempt login timeout in seconds
            max_retries: Total attempts per authentication (at least 1)
            retry_delay: Fixed delay between attempts in seconds
            retry_transient_only: Only retry network/timeout/5xx failures
        """
        self._client = client
        self.login_url = f"{base_url.rstrip('/')}{LOGIN_PATH}"
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.retry_transient_only = retry_transient_only

    async def authenticate(self, identity: AccountIdentity) -> Credentials:
        """Log in and return fresh credentials.

        Args:
            identity: Account to log in

        Returns:
            Credentials issued by the login endpoint

        Raises:
            AuthError: If every attempt failed (carries the last message)
        """
        if not identity.handle:
            raise LoginRejectedError("Invalid phone number provided.")

        retry_on = LoginTransportError if self.retry_transient_only else AuthError
        attempts = 0

        def before_sleep_log(retry_state: Any) -> None:
            """Log retry attempts before sleeping."""
            logger.warning(
                "login_retry",
                handle=identity.handle,
                attempt=retry_state.attempt_number,
                max_attempts=self.max_retries,
                error=str(retry_state.outcome.exception())
                if retry_state.outcome
                else None,
            )

        try:
            async for attempt in AsyncRetrying(
                wait=wait_fixed(self.retry_delay),
                stop=stop_after_attempt(self.max_retries),
                retry=retry_if_exception_type(retry_on),
                before_sleep=before_sleep_log,
                reraise=True,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    return await self._login_once(identity, attempts)

        except AuthError as e:
            logger.error(
                "login_failed",
                handle=identity.handle,
                attempts=attempts,
                error=e.message,
            )
            raise AuthError(
                f"Failed after {attempts} attempts: {e.message}",
                details={"attempts": attempts, "cause": e.kind},
            ) from e

        # AsyncRetrying always returns or raises above
        raise AuthError("Login retry loop ended without a result")

    async def _login_once(self, identity: AccountIdentity, attempt: int) -> Credentials:
        """Perform a single login call.

        Raises:
            LoginTransportError: Network failure, timeout or 5xx status
            LoginRejectedError: Refusal or malformed success body
        """
        logger.debug(
            "login_attempt",
            handle=identity.handle,
            attempt=attempt,
            max_attempts=self.max_retries,
        )
        payload = {"userName": identity.handle, "pwd": identity.hashed_secret}

        try:
            response = await self._client.post(
                self.login_url, json=payload, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise LoginTransportError(
                f"Login {describe_transport_error(e)}"
            ) from e

        data = read_json_object(response)

        if response.is_error:
            message = remote_error_message(data) if data else f"HTTP {response.status_code}"
            if response.status_code >= 500:
                raise LoginTransportError(message, status_code=response.status_code)
            raise LoginRejectedError(message)

        if data is None:
            raise LoginRejectedError("Login response is not a JSON object")

        if not is_remote_success(data):
            raise LoginRejectedError(f"Failed: {remote_error_message(data)}")

        mem_info = data.get("memInfo")
        if not isinstance(mem_info, dict):
            raise LoginRejectedError(
                "API response successful (code 0) but missing memInfo"
            )

        try:
            credentials = Credentials.from_mem_info(mem_info)
        except KeyError as e:
            raise LoginRejectedError(
                "API response successful (code 0) but missing memberID or skey"
            ) from e

        logger.info("login_success", handle=identity.handle, attempt=attempt)
        return credentials
