"""Multi-account red bag claimer."""

__version__ = "0.1.0"
