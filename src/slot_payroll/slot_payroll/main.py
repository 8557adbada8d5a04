from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .approvals.controller import register as register_approvals
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_admin_user, ensure_default_slots, list_tables
from .payroll.controller import register as register_payroll
from .salary_logs.controller import register as register_salary_logs
from .slots.controller import register as register_slots
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def register_routes(app: Flask, container: Container) -> None:
    register_error_handlers(app)
    register_users(app, container)
    register_slots(app, container)
    register_attendance(app, container)
    register_approvals(app, container)
    register_payroll(app, container)
    register_salary_logs(app, container)


def create_app() -> Flask:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    db_config = getattr(settings, "DB_CONFIG")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )

    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
    if getattr(settings, "AUTO_SEED_DB", False):
        admin_password = getattr(settings, "ADMIN_PASSWORD", None)
        if admin_password:
            ensure_admin_user(db_config, password=admin_password, email=getattr(settings, "ADMIN_EMAIL", None))
        else:
            logger.warning("ADMIN_PASSWORD not set; bootstrap admin not seeded")
        ensure_default_slots(db_config)

    container = build_container(
        db_config=db_config,
        timezone=getattr(settings, "APP_TIMEZONE", "Asia/Kolkata"),
        cache_enabled=bool(getattr(settings, "SLOT_CACHE_ENABLED", True)),
        cache_ttl_seconds=int(getattr(settings, "SLOT_CACHE_TTL_SECONDS", 300)),
    )
    register_routes(app, container)
    return app
