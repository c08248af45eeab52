import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "nfc_attendance_test"),
}

FIREBASE_CONFIG = {
    "database_url": "http://localhost:9000",
    "auth_token": None,
    "timeout": 1.0,
}

CRON_SECRET = "test-cron-secret"
SYNC_SECRET = "test-sync-secret"
ENFORCE_POLL_AUTH = False

LATE_CUTOFF = "09:30"
RECONCILE_ERROR_LIMIT = 10

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
