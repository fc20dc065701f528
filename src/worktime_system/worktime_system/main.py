from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .logging_config import configure_logging, get_logger
from .worktime.controller import register as register_worktime

logger = get_logger("main")

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def load_settings() -> Any:
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def create_app(*, settings: Any = None, container: Container | None = None) -> Flask:
    settings = settings or load_settings()
    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "app_starting",
            extra={
                "settings_module": getattr(settings, "__name__", "custom"),
                "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
            },
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema_ready", extra={"tables": len(list_tables(db_config))})
        container = build_container(db_config=db_config, settings=settings)

    register_worktime(app, container)
    return app
