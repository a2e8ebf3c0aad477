"""Load the demo academy (courses, cohorts) and its admin/staff logins."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.academy_system.academy_system.database.bootstrap import apply_seed_sql, ensure_demo_accounts

logger = logging.getLogger("seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_accounts(db_config)
    logger.info("Demo academy AC000001 seeded into %s", db_config.get("database"))
    logger.info("Logins: admin@demo-academy.test / admin123, staff@demo-academy.test / staff123")


if __name__ == "__main__":
    main()
