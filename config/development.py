import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "nfc_attendance"),
}

# Firebase Realtime Database written to by the NFC readers.
FIREBASE_CONFIG = {
    "database_url": os.getenv("FIREBASE_DATABASE_URL", ""),
    "auth_token": os.getenv("FIREBASE_AUTH_TOKEN") or None,
    "timeout": float(os.getenv("FIREBASE_TIMEOUT_SECONDS", "10")),
}

CRON_SECRET = os.getenv("CRON_SECRET")
SYNC_SECRET = os.getenv("SYNC_SECRET")
ENFORCE_POLL_AUTH = False

# Check-ins after this wall-clock time count as late on the dashboard.
LATE_CUTOFF = os.getenv("LATE_CUTOFF", "09:30")
RECONCILE_ERROR_LIMIT = int(os.getenv("RECONCILE_ERROR_LIMIT", "10"))

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
