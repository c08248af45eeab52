"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

# Check-ins strictly after this wall-clock time count as late.
DEFAULT_LATE_CUTOFF = time(9, 30)

# Max error strings returned in a reconciliation summary.
DEFAULT_ERROR_LIMIT = 10

DEFAULT_SOURCE_TIMEOUT_SECONDS = 10.0
FIREBASE_ATTENDANCE_PATH = "attendance"
