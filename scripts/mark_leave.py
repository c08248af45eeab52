"""Mark sessions left open on earlier days as leave.

Usage: python scripts/mark_leave.py [YYYY-MM-DD]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.nfc_attendance.nfc_attendance.core.exceptions import ValidationError
from src.nfc_attendance.nfc_attendance.main import configure_logging, container_from_settings, load_settings


def main(argv: list[str]) -> int:
    settings = load_settings()
    configure_logging(bool(getattr(settings, "DEBUG", False)))
    container = container_from_settings(settings)

    try:
        result = container.attendance_service.mark_leave(argv[0] if argv else None)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
