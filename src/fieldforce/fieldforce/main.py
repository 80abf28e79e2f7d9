from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import register_error_handlers
from .container import build_container
from .core.constants import DEFAULT_MAX_PHOTO_BYTES
from .database.bootstrap import init_database, seed_database

from .announcements.controller import register as register_announcements
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports
from .requests.controller import register as register_requests
from .schedules.controller import register as register_schedules
from .shifts.controller import register as register_shifts
from .sites.controller import register as register_sites
from .storage.controller import register as register_storage
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users
from .worksessions.controller import register as register_worksessions

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]
DATABASE_DIR = REPO_ROOT / "database"


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
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_PHOTO_BYTES", DEFAULT_MAX_PHOTO_BYTES)) * 2

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if getattr(settings, "AUTO_INIT_DB", False):
        logger.info("Schema ready (tables=%d)", init_database(db_config, DATABASE_DIR))
    if getattr(settings, "AUTO_SEED_DB", False):
        seed_database(db_config, DATABASE_DIR)

    container = build_container(
        db_config=db_config,
        upload_dir=REPO_ROOT / getattr(settings, "UPLOAD_DIR", "uploads"),
        photo_base_url=getattr(settings, "PHOTO_BASE_URL", "/uploads"),
        max_photo_bytes=int(getattr(settings, "MAX_PHOTO_BYTES", DEFAULT_MAX_PHOTO_BYTES)),
        geofence_enforced=bool(getattr(settings, "GEOFENCE_ENFORCED", True)),
        require_checkin_location=bool(getattr(settings, "REQUIRE_CHECKIN_LOCATION", False)),
        require_summary_products=bool(getattr(settings, "REQUIRE_SUMMARY_PRODUCTS", True)),
    )

    register_error_handlers(app)
    register_routes(app, container)
    return app


def register_routes(app: Flask, container) -> None:
    register_users(app, container)
    register_sites(app, container)
    register_storage(app, container)
    register_worksessions(app, container)
    register_notifications(app, container)
    register_announcements(app, container)
    register_schedules(app, container)
    register_shifts(app, container)
    register_requests(app, container)
    register_tasks(app, container)
    register_reports(app, container)
