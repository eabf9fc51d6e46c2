import threading
from typing import List

from sqlalchemy.exc import DBAPIError

from smart_invite.core.logging import log_evt, logger
from smart_invite.db.session import DatabaseAdapter, DbResult, Params, StorageError

# (table, column, sqlite ddl type, mysql ddl type)
ADDITIVE_COLUMNS = [
    ("events", "custom_images", "TEXT", "JSON"),
]

_repair_lock = threading.Lock()


def _existing_columns(db: DatabaseAdapter, table: str) -> List[str]:
    if db.backend == "sqlite":
        rows = db.all(f"PRAGMA table_info({table})")
        return [r["name"] for r in rows]
    rows = db.all(
        "SELECT COLUMN_NAME AS name FROM information_schema.columns "
        "WHERE table_schema = DATABASE() AND table_name = :t",
        {"t": table},
    )
    return [r["name"] for r in rows]


def run_additive_migrations(db: DatabaseAdapter) -> List[str]:
    """Add columns introduced after the first deployment.

    Only ever adds. Tables that do not exist yet are left to create_schema().
    Returns the "table.column" names that were added.
    """
    added = []
    for table, column, sqlite_type, mysql_type in ADDITIVE_COLUMNS:
        names = _existing_columns(db, table)
        if not names or column in names:
            continue
        ddl_type = sqlite_type if db.backend == "sqlite" else mysql_type
        db.run(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}")
        added.append(f"{table}.{column}")
        log_evt("info", "migration_column_added", table=table, column=column, backend=db.backend)
    return added


def is_unknown_column_error(ex: BaseException) -> bool:
    msg = str(getattr(ex, "orig", ex)).lower()
    return "unknown column" in msg or "no such column" in msg or "has no column named" in msg


def run_with_schema_repair(db: DatabaseAdapter, sql: str, params: Params = None) -> DbResult:
    """Run a write; on a missing column, migrate once and retry once."""
    try:
        return db.run(sql, params)
    except DBAPIError as ex:
        if not is_unknown_column_error(ex):
            raise
        log_evt("warning", "schema_drift_detected", error=str(ex.orig))

    with _repair_lock:
        run_additive_migrations(db)

    try:
        return db.run(sql, params)
    except DBAPIError as ex:
        logger.exception("write failed after schema repair")
        raise StorageError(str(ex.orig)) from ex
