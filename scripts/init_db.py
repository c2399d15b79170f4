from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timecard.timecard.database.bootstrap import apply_schema, list_tables
from src.timecard.timecard.tenancy.resolver import StaticTenantResolver, parse_tenant_databases

logger = logging.getLogger("init_db")


def main() -> None:
    """Apply database/schema.sql to the default database and every configured tenant database."""
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    resolver = StaticTenantResolver(
        parse_tenant_databases(getattr(settings, "TENANT_DATABASES", "")),
        default=db_config.get("database"),
    )

    schema_path = REPO_ROOT / "database" / "schema.sql"
    for database in resolver.databases:
        target = {**db_config, "database": database}
        apply_schema(target, schema_path=schema_path)
        logger.info(
            "OK: Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
            target.get("user"),
            target.get("host"),
            target.get("port", 3306),
            database,
            len(list_tables(target)),
        )


if __name__ == "__main__":
    main()
