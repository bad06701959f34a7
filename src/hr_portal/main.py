from __future__ import annotations

import atexit
import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .breaks.controller import register as register_breaks
from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_default_break_schedule, ensure_demo_users, list_tables
from .requests.controller import register as register_requests
from .reviews.controller import register as register_reviews
from .users.controller import register as register_users

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ALLOWED_EMAIL_DOMAIN"] = getattr(settings, "ALLOWED_EMAIL_DOMAIN", "")

    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format=LOG_FORMAT)
    app.logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    owns_container = container is None
    if owns_container:
        container = build_container(
            db_config=db_config,
            email_domain=app.config["ALLOWED_EMAIL_DOMAIN"],
            idle_limit_seconds=int(getattr(settings, "IDLE_LIMIT_SECONDS")),
            required_seconds=int(getattr(settings, "REQUIRED_SECONDS")),
            tick_seconds=int(getattr(settings, "TICK_SECONDS", 1)),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)
            ensure_default_break_schedule(container.conn)
            app.logger.info("schema ready (tables=%s)", len(list_tables(container.conn)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(container.conn, email_domain=app.config["ALLOWED_EMAIL_DOMAIN"])

        if bool(getattr(settings, "START_SCHEDULER", True)):
            container.timer.start()
        # open sessions are force-closed with system-checkout when the process exits
        atexit.register(container.shutdown)

    app.extensions["hr_portal"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_breaks(app, container)
    register_requests(app, container)
    register_reviews(app, container)

    return app
