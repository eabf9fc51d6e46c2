"""
Create the events/guests schema on the configured backend.

MySQL deployments run this once before starting the app; SQLite creates
its schema on first use but accepts it too.
"""

import sys
import time

from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from smart_invite.core.logging import logger
from smart_invite.db.migrations import run_additive_migrations
from smart_invite.db.session import DatabaseAdapter, create_adapter


def wait_for_database(db: DatabaseAdapter, retries: int = 10, delay: float = 2.0) -> None:
    while True:
        try:
            db.get("SELECT 1 AS ok")
            return
        except OperationalError:
            retries -= 1
            if retries <= 0:
                raise
            logger.info("Waiting for database... (%d retries left)", retries)
            time.sleep(delay)


def init_database(db: DatabaseAdapter) -> list:
    wait_for_database(db)
    db.create_schema()
    added = run_additive_migrations(db)
    tables = sorted(inspect(db.engine).get_table_names())
    logger.info("Tables available: %s (added columns: %s)", tables, added or "none")
    return tables


def main() -> int:
    db = create_adapter()
    try:
        init_database(db)
    except Exception:
        logger.exception("Database initialization failed")
        return 1
    finally:
        db.close()
    logger.info("Database initialization complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
