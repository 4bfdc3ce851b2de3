"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_LIFETIME_HOURS = 8

MIN_SIGNUP_AGE = 16
MIN_PASSWORD_STRENGTH = 3
MIN_PASSWORD_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

SESSION_ID_BYTES = 32
SESSION_PURGE_INTERVAL_SECONDS = 60
CSRF_TOKEN_BYTES = 32
CSRF_HEADER = "X-CSRF-Token"
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

UNKNOWN_CLIENT = "unknown"
