"""Core utilities shared across the claimer."""

from redbag_claimer.core.logging import setup_logging


__all__ = ["setup_logging"]
