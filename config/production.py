import os

_PLACEHOLDER_SECRET = "please-set-SECRET_KEY"

SECRET_KEY = os.getenv("SECRET_KEY", _PLACEHOLDER_SECRET)

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SESSION_LIFETIME_HOURS = float(os.getenv("SESSION_LIFETIME_HOURS", "8"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "attendance_sid")
SESSION_COOKIE_DOMAIN = os.getenv("SESSION_COOKIE_DOMAIN") or None
SESSION_COOKIE_SECURE = bool(int(os.getenv("SESSION_COOKIE_SECURE", "1")))
SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Strict")

PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))


def validate_runtime_config() -> None:
    if SECRET_KEY == _PLACEHOLDER_SECRET:
        raise RuntimeError("SECRET_KEY must be set in production.")
