"""Webhook API server."""

from redbag_claimer.api.app import create_app


__all__ = ["create_app"]
