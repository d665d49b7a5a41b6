from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .holidays.controller import register as register_holidays
from .id_cards.controller import register as register_id_cards
from .reports.controller import register as register_reports
from .sequences.controller import register as register_sequences
from .students.controller import register as register_students
from .teachers.controller import register as register_teachers
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for noisy in ("werkzeug", "mysql.connector"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app(container: Optional[Container] = None) -> Flask:
    """App factory. Tests pass a container built over in-memory repositories."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["school_office"] = container

    register_users(app, container)
    register_sequences(app, container)
    register_classes(app, container)
    register_students(app, container)
    register_teachers(app, container)
    register_holidays(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_id_cards(app, container)

    return app
