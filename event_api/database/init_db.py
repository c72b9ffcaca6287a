"""
Apply schema.sql and check that every table the API relies on exists.

Run from the project root:

    python -m event_api.database.init_db

Every statement in schema.sql uses CREATE TABLE IF NOT EXISTS, so running
this more than once is harmless.
"""

import logging
import sys
from pathlib import Path
from typing import List

from event_api.config import load_settings
from event_api.database.db_connection import Database

SCHEMA_PATH = Path(__file__).with_name("schema.sql")
TABLES = ["users", "events", "enrollments", "attendance"]

logger = logging.getLogger(__name__)


def apply_schema(db: Database, schema_path: Path = SCHEMA_PATH) -> None:
    """
    Execute the schema file in a single transaction.

    Args:
        db (Database): Pool to borrow a connection from.
        schema_path (Path): SQL file to run.
    """
    ddl = schema_path.read_text(encoding="utf-8")
    with db.connection() as conn:
        with conn.cursor() as cur:
            cur.execute(ddl)
    logger.info(f"Applied {schema_path.name}")


def missing_tables(db: Database) -> List[str]:
    """
    Returns:
        list: Names from TABLES that do not exist in the database.
    """
    missing = []
    with db.connection() as conn:
        with conn.cursor() as cur:
            for table in TABLES:
                cur.execute("SELECT to_regclass(%s);", (table,))
                if cur.fetchone()[0] is None:
                    missing.append(table)
    return missing


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

    db = Database.from_settings(load_settings())
    try:
        apply_schema(db)
        missing = missing_tables(db)
    finally:
        db.close()

    for table in TABLES:
        logger.info(f" - {table}: {'MISSING' if table in missing else 'Found'}")

    if missing:
        logger.error("One or more tables are missing after applying the schema.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
