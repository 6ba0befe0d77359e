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

from src.hr_backoffice.hr_backoffice.database.bootstrap import (
    DEMO_CLIENT,
    DEMO_EMPLOYEES,
    apply_seed_sql,
    ensure_demo_accounts,
    sync_role_permissions,
)

logger = logging.getLogger("hr_backoffice.seed_db")


def main() -> int:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    sync_role_permissions(db_config)
    ensure_demo_accounts(db_config)

    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    logger.info("Seeded %s", target)
    for email, password, *_ in DEMO_EMPLOYEES:
        logger.info("demo employee %s / %s", email, password)
    logger.info("demo client %s / %s", DEMO_CLIENT[0], DEMO_CLIENT[1])
    return 0


if __name__ == "__main__":
    sys.exit(main())
