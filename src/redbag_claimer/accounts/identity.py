"""Account identity model and login handle normalization."""

import hashlib
import re
from dataclasses import dataclass

from redbag_claimer.constants import DEFAULT_COUNTRY_CODE, NATIONAL_NUMBER_LENGTH


NON_DIGIT_PATTERN = re.compile(r"\D")


def normalize_handle(raw: str | None, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalize a phone-number login handle to ``+<country><number>``.

    Non-digit characters are stripped. A handle written with a leading ``+``
    already carries its country code. A bare digit string that starts with
    the default country code and is long enough to hold a full national
    number is accepted as-is; anything else gets the default prefix.

    Args:
        raw: Handle as written in configuration
        country_code: Default country calling code, digits only

    Returns:
        Normalized handle, or an empty string if no digits remain
    """
    if not raw:
        return ""

    digits = NON_DIGIT_PATTERN.sub("", raw)
    if not digits:
        return ""

    if raw.strip().startswith("+"):
        return f"+{digits}"

    if digits.startswith(country_code) and len(digits) >= (
        len(country_code) + NATIONAL_NUMBER_LENGTH
    ):
        return f"+{digits}"

    return f"+{country_code}{digits}"


def hash_secret(secret: str) -> str:
    """Hash a raw password the way the login endpoint expects (MD5 hex)."""
    return hashlib.md5(secret.encode("utf-8")).hexdigest()  # noqa: S324


@dataclass(frozen=True)
class AccountIdentity:
    """Normalized login handle plus raw secret for one account."""

    handle: str
    secret: str

    @classmethod
    def from_config(
        cls,
        username: str,
        password: str,
        country_code: str = DEFAULT_COUNTRY_CODE,
    ) -> "AccountIdentity":
        """Build an identity from a configured username/password pair."""
        return cls(handle=normalize_handle(username, country_code), secret=password)

    @property
    def hashed_secret(self) -> str:
        """Secret in the digest form sent to the login endpoint."""
        return hash_secret(self.secret)

    def __repr__(self) -> str:
        return f"AccountIdentity(handle={self.handle!r}, secret='***')"
