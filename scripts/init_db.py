"""Create the database (if missing) and apply database/schema.sql."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.nfc_attendance.nfc_attendance.database.bootstrap import apply_schema, list_tables
from src.nfc_attendance.nfc_attendance.main import SCHEMA_PATH, configure_logging, load_settings

logger = logging.getLogger("init_db")


def main() -> None:
    settings = load_settings()
    configure_logging(bool(getattr(settings, "DEBUG", False)))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    logger.info(
        "schema applied to %s@%s/%s: %s",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("database"),
        ", ".join(tables) or "(no tables)",
    )


if __name__ == "__main__":
    main()
