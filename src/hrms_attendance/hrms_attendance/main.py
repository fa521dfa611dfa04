from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, list_tables

from .container import build_container
from .attendance.controller import register as register_attendance
from .finalization.controller import register as register_finalization
from .finalization.scheduler import start_scheduler
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)


def create_app(*, start_background_jobs: bool | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        buffer_minutes=int(getattr(settings, "FINALIZATION_BUFFER_MINUTES", 30)),
        bulk_delay_seconds=float(getattr(settings, "BULK_DELAY_SECONDS", 0.1)),
        weekend_days=str(getattr(settings, "WEEKEND_DAYS", "5,6")),
    )
    app.extensions["hrms_attendance"] = container

    register_attendance(app, container)
    register_finalization(app, container)
    register_requests(app, container)

    if start_background_jobs is None:
        start_background_jobs = bool(getattr(settings, "FINALIZATION_SCHEDULER_ENABLED", False))
    if start_background_jobs:
        scheduler = start_scheduler(
            container.finalization_job,
            interval_minutes=int(getattr(settings, "FINALIZATION_INTERVAL_MINUTES", 15)),
        )
        app.extensions["hrms_attendance_scheduler"] = scheduler

    return app
