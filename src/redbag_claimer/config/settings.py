"""Settings configuration for the red bag claimer."""

from typing import Any

import orjson
import structlog
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from redbag_claimer.constants import (
    CLAIM_TIMEOUT_SECONDS,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_LANG,
    LOGIN_COOLDOWN_SECONDS,
    LOGIN_RETRY_DELAY_SECONDS,
    LOGIN_TIMEOUT_SECONDS,
    MAX_LOGIN_RETRIES,
)
from redbag_claimer.exceptions import ConfigurationError


__all__ = [
    "AccountConfig",
    "ClaimSettings",
    "ServerSettings",
    "Settings",
    "get_settings",
    "parse_credentials_json",
]


logger = structlog.get_logger(__name__)


class AccountConfig(BaseModel):
    """One configured username/password pair."""

    id: int = Field(description="1-based position in CREDENTIALS_JSON")
    username: str
    password: str = Field(repr=False)


class ServerSettings(BaseModel):
    """Webhook server settings."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class ClaimSettings(BaseModel):
    """Login and claim behaviour."""

    lang: str = Field(default=DEFAULT_LANG, description="Language sent with claims")
    login_timeout: float = Field(default=LOGIN_TIMEOUT_SECONDS, gt=0)
    claim_timeout: float = Field(default=CLAIM_TIMEOUT_SECONDS, gt=0)
    max_login_retries: int = Field(
        default=MAX_LOGIN_RETRIES,
        ge=1,
        description="Total login attempts per authentication",
    )
    login_retry_delay: float = Field(default=LOGIN_RETRY_DELAY_SECONDS, ge=0)
    retry_transient_only: bool = Field(
        default=False,
        description="Retry login only on network/timeout failures",
    )
    cooldown_seconds: float = Field(
        default=LOGIN_COOLDOWN_SECONDS,
        ge=0,
        description="Skip an account this long after a failed login",
    )
    country_code: str = Field(
        default=DEFAULT_COUNTRY_CODE,
        pattern=r"^[0-9]{1,4}$",
        description="Default country calling code for login handles",
    )


def parse_credentials_json(raw: str | None) -> list[AccountConfig]:
    """Parse the CREDENTIALS_JSON blob into account configs.

    Entries missing a username or password are skipped with a warning;
    the remaining entries keep their 1-based array position as id.

    Args:
        raw: JSON array of ``{"username": ..., "password": ...}`` objects

    Returns:
        Parsed account configs in declaration order (possibly empty)

    Raises:
        ConfigurationError: If the blob is not valid JSON or not an array
    """
    if not raw:
        return []

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ConfigurationError(f"CREDENTIALS_JSON is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError(
            f"CREDENTIALS_JSON must be a JSON array, got {type(data).__name__}"
        )

    configs: list[AccountConfig] = []
    for index, entry in enumerate(data):
        if (
            not isinstance(entry, dict)
            or not entry.get("username")
            or not entry.get("password")
        ):
            logger.warning("credential_entry_skipped", index=index)
            continue
        configs.append(
            AccountConfig(
                id=index + 1,
                username=str(entry["username"]),
                password=str(entry["password"]),
            )
        )

    logger.info("credentials_parsed", count=len(configs))
    return configs


class Settings(BaseSettings):
    """
    Configuration settings for the red bag claimer.

    Settings are loaded from environment variables and a .env file.
    Environment variables take precedence over .env file values.
    Nested sections use ``__`` as delimiter, e.g. ``CLAIM__LANG=es``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    api_base_url: str | None = Field(
        default=None,
        description="Base URL shared by the login and claim endpoints",
    )

    credentials_json: str | None = Field(
        default=None,
        repr=False,
        description="JSON array of account username/password pairs",
    )

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Webhook server settings",
    )

    claim: ClaimSettings = Field(
        default_factory=ClaimSettings,
        description="Login and claim behaviour",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None

    def require_base_url(self) -> str:
        """Get the API base URL or fail.

        Raises:
            ConfigurationError: If API_BASE_URL is not set
        """
        if not self.api_base_url:
            raise ConfigurationError("API_BASE_URL is not configured")
        return self.api_base_url

    def account_configs(self) -> list[AccountConfig]:
        """Parse the configured account list."""
        return parse_credentials_json(self.credentials_json)

    def model_dump_safe(self) -> dict[str, Any]:
        """Dump settings with the credential blob removed."""
        return self.model_dump(exclude={"credentials_json"})


def get_settings(**overrides: Any) -> Settings:
    """Load settings from the environment.

    Args:
        **overrides: Values taking precedence over the environment

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        return Settings(**overrides)
    except ValueError as e:
        raise ConfigurationError(f"Configuration error: {e}") from e
