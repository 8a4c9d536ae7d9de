"""Helpers for reading responses from the reward API."""

from typing import Any

import httpx
import orjson

from redbag_claimer.constants import REMOTE_SUCCESS_CODE


def read_json_object(response: httpx.Response) -> dict[str, Any] | None:
    """Decode a response body as a JSON object.

    Returns:
        The decoded object, or None if the body is empty, invalid or not an object
    """
    if not response.content:
        return None
    try:
        data = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def is_remote_success(data: dict[str, Any]) -> bool:
    """Check the body-level status code (``"0"`` means success)."""
    code = data.get("code")
    return code is not None and str(code) == REMOTE_SUCCESS_CODE


def remote_error_message(data: dict[str, Any] | None) -> str:
    """Extract a human-readable rejection message from a response body."""
    if data and data.get("msg"):
        return str(data["msg"])
    code = data.get("code") if data else None
    return f"API responded with code {code if code not in (None, '') else 'unknown'}"


def describe_transport_error(error: httpx.HTTPError) -> str:
    """Describe a network-level failure for logs and outcomes."""
    if isinstance(error, httpx.TimeoutException):
        return "request timed out"
    detail = str(error)
    return detail or type(error).__name__
