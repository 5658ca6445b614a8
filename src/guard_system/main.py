from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .container import Container, build_container
from .core.constants import (
    DEFAULT_DUPLICATE_WINDOW_MINUTES,
    DEFAULT_LIVE_WINDOW_MINUTES,
    DEFAULT_ON_DUTY_WINDOW_HOURS,
    DEFAULT_STREAM_INTERVAL_SECONDS,
)
from .database.bootstrap import apply_schema, ensure_demo_organization, list_tables

from .attendance.controller import register as register_attendance
from .backup_requests.controller import register as register_backup_requests
from .dashboard.controller import register as register_dashboard
from .gps.controller import register as register_gps
from .incidents.controller import register as register_incidents
from .locations.controller import register as register_locations
from .organizations.controller import register as register_departments
from .patrols.controller import register as register_patrols
from .registration.controller import register as register_registration
from .roles.controller import register as register_roles
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def register_controllers(app: Flask, container: Container) -> None:
    register_users(app, container)
    register_registration(app, container)
    register_departments(app, container)
    register_roles(app, container)
    register_locations(app, container)
    register_attendance(app, container)
    register_gps(app, container)
    register_patrols(app, container)
    register_backup_requests(app, container)
    register_incidents(app, container)
    register_dashboard(app, container)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass a container to skip the database wiring (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["APP_BASE_URL"] = getattr(settings, "APP_BASE_URL", "")
    app.config["STREAM_INTERVAL_SECONDS"] = getattr(
        settings, "STREAM_INTERVAL_SECONDS", DEFAULT_STREAM_INTERVAL_SECONDS
    )

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_organization(db_config)
            logger.info("demo organization ready")

        container = build_container(
            db_config=db_config,
            live_window_minutes=getattr(settings, "LIVE_WINDOW_MINUTES", DEFAULT_LIVE_WINDOW_MINUTES),
            duplicate_window_minutes=getattr(settings, "DUPLICATE_WINDOW_MINUTES", DEFAULT_DUPLICATE_WINDOW_MINUTES),
            on_duty_window_hours=getattr(settings, "ON_DUTY_WINDOW_HOURS", DEFAULT_ON_DUTY_WINDOW_HOURS),
        )

    register_controllers(app, container)
    return app
