import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "nfc_attendance"),
}

FIREBASE_CONFIG = {
    "database_url": os.getenv("FIREBASE_DATABASE_URL", ""),
    "auth_token": os.getenv("FIREBASE_AUTH_TOKEN") or None,
    "timeout": float(os.getenv("FIREBASE_TIMEOUT_SECONDS", "10")),
}

# The poll endpoint accepts the scheduler's bearer token or same-origin calls.
CRON_SECRET = os.getenv("CRON_SECRET")
SYNC_SECRET = os.getenv("SYNC_SECRET")
ENFORCE_POLL_AUTH = True

LATE_CUTOFF = os.getenv("LATE_CUTOFF", "09:30")
RECONCILE_ERROR_LIMIT = int(os.getenv("RECONCILE_ERROR_LIMIT", "10"))

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
