"""Database maintenance.

    python scripts/manage_db.py init            # create tables from database/schema.sql
    python scripts/manage_db.py seed            # demo sites, products and accounts
    python scripts/manage_db.py setup --env dev # both
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.fieldforce.fieldforce.database.bootstrap import init_database, seed_database

logger = logging.getLogger("fieldforce.manage_db")

COMMANDS = {
    "init": (True, False),
    "seed": (False, True),
    "setup": (True, True),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create or seed the fieldforce MySQL database")
    parser.add_argument("command", choices=sorted(COMMANDS), help="init: schema, seed: demo data, setup: both")
    parser.add_argument("--env", help="settings environment, overrides APP_ENV")
    parser.add_argument(
        "--database-dir",
        type=Path,
        default=REPO_ROOT / "database",
        help="directory holding schema.sql and seed.sql",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module(args.env))
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    create_schema, load_seed = COMMANDS[args.command]
    if create_schema:
        tables = init_database(db_config, args.database_dir)
        logger.info("Schema applied to %s (%d tables)", target, tables)
    if load_seed:
        seed_database(db_config, args.database_dir)
        logger.info("Demo data loaded into %s", target)
    return 0


if __name__ == "__main__":
    sys.exit(main())
