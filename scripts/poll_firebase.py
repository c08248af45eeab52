"""Run one Firebase -> MySQL reconciliation pass.

Meant for a scheduler (cron, systemd timer). Exit code 1 when the Firebase
snapshot cannot be read.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.nfc_attendance.nfc_attendance.core.exceptions import SourceUnavailableError
from src.nfc_attendance.nfc_attendance.main import configure_logging, container_from_settings, load_settings

logger = logging.getLogger("poll_firebase")


def main() -> int:
    settings = load_settings()
    configure_logging(bool(getattr(settings, "DEBUG", False)))
    container = container_from_settings(settings)

    try:
        summary = container.reconciliation_service.run()
    except SourceUnavailableError as e:
        logger.error("Firebase unavailable: %s", e)
        return 1

    print(json.dumps(summary.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
