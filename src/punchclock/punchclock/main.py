from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import install_proxy_fix, register_error_handlers
from .container import build_container
from .core.constants import DEFAULT_TRUSTED_PROXY_HOPS
from .corrections.controller import register as register_corrections
from .database.bootstrap import apply_schema, list_tables
from .offices.controller import register as register_offices
from .qr.controller import register as register_qr
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    install_proxy_fix(app, getattr(settings, "TRUSTED_PROXY_HOPS", DEFAULT_TRUSTED_PROXY_HOPS))
    db_config = getattr(settings, "DB_CONFIG")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(settings=settings)

    register_error_handlers(app)

    register_attendance(app, container)
    register_reports(app, container)
    register_qr(app, container)
    register_offices(app, container)
    register_corrections(app, container)

    return app
