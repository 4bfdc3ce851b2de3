import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SESSION_LIFETIME_HOURS = 8
SESSION_COOKIE_NAME = "attendance_sid"
SESSION_COOKIE_DOMAIN = None
SESSION_COOKIE_SECURE = False
SESSION_COOKIE_SAMESITE = "Lax"

# Cheap hashing keeps the suite fast; never use outside tests.
PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
