from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_COMPANY_CODE, DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .leaves.controller import register as register_leaves
from .logging_config import configure_logging
from .payroll.controller import register as register_payroll
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass a ready ``container`` to run against other repositories (tests use
    in-memory fakes); otherwise MySQL repositories are built from settings.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config).describe())
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            company_code=getattr(settings, "COMPANY_CODE", DEFAULT_COMPANY_CODE),
            login_max_attempts=int(getattr(settings, "LOGIN_MAX_ATTEMPTS", 5)),
            login_decay_minutes=int(getattr(settings, "LOGIN_DECAY_MINUTES", 15)),
        )

    app.extensions["hrms.container"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)

    return app
