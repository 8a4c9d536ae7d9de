"""Account login against the reward API."""

from redbag_claimer.auth.authenticator import Authenticator


__all__ = ["Authenticator"]
