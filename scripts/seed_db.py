"""Insert the demo roster and NFC tags from database/seed.sql (idempotent)."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.nfc_attendance.nfc_attendance.database.bootstrap import apply_seed_sql
from src.nfc_attendance.nfc_attendance.main import configure_logging, load_settings

logger = logging.getLogger("seed_db")

SEED_PATH = REPO_ROOT / "database" / "seed.sql"


def main() -> None:
    settings = load_settings()
    configure_logging(bool(getattr(settings, "DEBUG", False)))
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=SEED_PATH)
    logger.info("demo employees and tags seeded into %s", db_config.get("database"))


if __name__ == "__main__":
    main()
