"""Configuration module for the red bag claimer."""

from redbag_claimer.exceptions import ConfigurationError

from .settings import (
    AccountConfig,
    ClaimSettings,
    ServerSettings,
    Settings,
    get_settings,
    parse_credentials_json,
)


__all__ = [
    "AccountConfig",
    "ClaimSettings",
    "ConfigurationError",
    "ServerSettings",
    "Settings",
    "get_settings",
    "parse_credentials_json",
]
