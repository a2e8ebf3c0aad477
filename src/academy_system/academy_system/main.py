from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .courses.controller import register as register_courses
from .leaves.controller import register as register_leaves
from .registration.controller import register as register_registration
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _bootstrap_database(settings, db_config: dict) -> None:
    root = Path(__file__).resolve().parents[3]
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=root / "database" / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=root / "database" / "seed.sql")
        ensure_demo_accounts(db_config)
        logger.info("Demo seed ready")


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass a container to skip database setup."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    # Room for the base64 payloads of several onboarding images
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", 2 * 1024 * 1024)) * 8

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(
            db_config=db_config,
            upload_folder=getattr(settings, "UPLOAD_FOLDER", "uploads"),
            public_base_url=getattr(settings, "PUBLIC_BASE_URL", ""),
            max_upload_bytes=int(getattr(settings, "MAX_UPLOAD_BYTES", 2 * 1024 * 1024)),
            horizon_days=int(getattr(settings, "SCHEDULE_HORIZON_DAYS", 90)),
        )

    register_users(app, container)
    register_registration(app, container)
    register_courses(app, container)
    register_schedules(app, container)
    register_leaves(app, container)
    register_attendance(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(413)
    def too_large(_e):
        return jsonify({"success": False, "error": "Request body too large"}), 413

    return app
