from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .auth.controller import register as register_auth
from .clients.controller import register as register_clients
from .common.web import install_principal_loader, register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS, EMPLOYEE_NUMBER_MAX_ATTEMPTS
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .projects.controller import register as register_projects
from .workspaces.controller import register as register_workspaces

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the JSON API.

    ``container`` lets tests inject services backed by in-memory repositories;
    in that case no database is touched.
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
    app.json.sort_keys = False

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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_accounts(db_config)
            logger.info("Demo seed ready")

        container = build_container(
            db_config=db_config,
            employee_number_attempts=int(
                getattr(settings, "EMPLOYEE_NUMBER_MAX_ATTEMPTS", EMPLOYEE_NUMBER_MAX_ATTEMPTS)
            ),
        )

    register_error_handlers(app)
    install_principal_loader(app, container.identity_service)

    register_auth(app, container)
    register_employees(app, container)
    register_departments(app, container)
    register_clients(app, container)
    register_projects(app, container)
    register_workspaces(app, container)

    return app
