from __future__ import annotations

import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import parse_clock_time
from .container import Container, build_container
from .core.constants import DEFAULT_ERROR_LIMIT, DEFAULT_LATE_CUTOFF
from .database.bootstrap import apply_schema, list_tables
from .sync.controller import register as register_sync

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def load_settings() -> ModuleType:
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def container_from_settings(settings: ModuleType) -> Container:
    late_cutoff = parse_clock_time(getattr(settings, "LATE_CUTOFF", "")) or DEFAULT_LATE_CUTOFF
    return build_container(
        db_config=getattr(settings, "DB_CONFIG"),
        firebase_config=getattr(settings, "FIREBASE_CONFIG", {}),
        late_cutoff=late_cutoff,
        error_limit=int(getattr(settings, "RECONCILE_ERROR_LIMIT", DEFAULT_ERROR_LIMIT)),
    )


def create_app(container: Optional[Container] = None) -> Flask:
    settings = load_settings()

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["CRON_SECRET"] = getattr(settings, "CRON_SECRET", None)
    app.config["SYNC_SECRET"] = getattr(settings, "SYNC_SECRET", None)
    app.config["ENFORCE_POLL_AUTH"] = bool(getattr(settings, "ENFORCE_POLL_AUTH", False))
    configure_logging(app.config["DEBUG"])

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings.__name__,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        container = container_from_settings(settings)

    register_attendance(app, container)
    register_sync(app, container)

    return app
