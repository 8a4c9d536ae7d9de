"""Constants for the claimer.

This module centralizes configuration defaults and remote API values used
across the package.
"""

# Time constants (in seconds)
LOGIN_TIMEOUT_SECONDS = 10.0
CLAIM_TIMEOUT_SECONDS = 15.0
LOGIN_COOLDOWN_SECONDS = 60.0
LOGIN_RETRY_DELAY_SECONDS = 0.1

MAX_LOGIN_RETRIES = 1

# Handle normalization
DEFAULT_COUNTRY_CODE = "57"
NATIONAL_NUMBER_LENGTH = 10

# Remote API
LOGIN_PATH = "/userlogin/"
CLAIM_PATH = "/getRedBag/"
REMOTE_SUCCESS_CODE = "0"
DEFAULT_LANG = "en"

# Inbound codes are six uppercase alphanumerics
CODE_PATTERN = r"^[A-Z0-9]{6}$"

NO_CREDENTIALS_MESSAGE = "No valid credentials could claim the bag."

# First claim call plus one retry after re-login on 401
CLAIM_ATTEMPTS_PER_ACCOUNT = 2
DEFAULT_CLAIM_MESSAGE = "Claimed successfully"
