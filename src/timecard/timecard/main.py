from __future__ import annotations

import importlib
import logging
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, TenantContainers, build_container
from .database.bootstrap import apply_schema_to_tenants, list_tables
from .punches.controller import register as register_punches
from .reports.controller import register as register_reports
from .tenancy.resolver import StaticTenantResolver, TenantResolver, parse_tenant_databases

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    *,
    container_factory: Optional[Callable[[str], Container]] = None,
    resolver: Optional[TenantResolver] = None,
) -> Flask:
    """Build the Flask app.

    ``container_factory`` maps a database name to a wired Container; by default
    it builds MySQL-backed containers from DB_CONFIG.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = dict(getattr(settings, "DB_CONFIG"))

    if resolver is None:
        resolver = StaticTenantResolver(
            parse_tenant_databases(getattr(settings, "TENANT_DATABASES", "")),
            default=db_config.get("database"),
        )

    service_settings = {
        "default_timezone": getattr(settings, "DEFAULT_TIMEZONE", "America/Chicago"),
        "week_start_day": int(getattr(settings, "WEEK_START_DAY", 0)),
        "clock_out_grace_minutes": int(getattr(settings, "CLOCK_OUT_GRACE_MINUTES", 30)),
        "overtime_threshold_hours": float(getattr(settings, "OVERTIME_THRESHOLD_HOURS", 40)),
    }

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container_factory is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)) and isinstance(resolver, StaticTenantResolver):
            apply_schema_to_tenants(db_config, resolver.databases)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        def container_factory(database: str) -> Container:
            return build_container(db_config=db_config, database=database, **service_settings)

    containers = TenantContainers(resolver, container_factory)
    app.extensions["timecard"] = containers

    register_error_handlers(app)
    register_punches(app, containers)
    register_reports(app, containers)

    return app
