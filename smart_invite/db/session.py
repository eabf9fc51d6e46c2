import os
import threading
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import StaticPool

from smart_invite.core.config import (
    DB_HOST,
    DB_NAME,
    DB_PASSWORD,
    DB_POOL_SIZE,
    DB_PORT,
    DB_USER,
    DEBUG_SQL,
    SQLITE_PATH,
    USE_MYSQL,
)
from smart_invite.core.logging import logger
from smart_invite.db.models import Base

Params = Optional[Mapping[str, Any]]


class StorageError(RuntimeError):
    """A write that still fails after schema repair."""


@dataclass
class DbResult:
    last_id: int
    changes: int


def _normalize_value(value: Any) -> Any:
    # Both backends must hand back the same shapes.
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _normalize_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _normalize_value(value) for key, value in row.items()}


class DatabaseAdapter:
    """Uniform get/all/run/close over a SQLAlchemy engine.

    SQL is written with named parameters (``:name``) so the same statement
    runs on every backend.
    """

    backend = "unknown"

    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, sql: str, params: Params = None) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(text(sql), dict(params or {})).mappings().first()
        return _normalize_row(row) if row is not None else None

    def all(self, sql: str, params: Params = None) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(text(sql), dict(params or {})).mappings().all()
        return [_normalize_row(r) for r in rows]

    def run(self, sql: str, params: Params = None) -> DbResult:
        with self.engine.begin() as conn:
            result = conn.execute(text(sql), dict(params or {}))
            return DbResult(
                last_id=result.lastrowid or 0,
                changes=max(result.rowcount or 0, 0),
            )

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SQLiteAdapter(DatabaseAdapter):
    """Single-file store. One shared connection, every call serialized."""

    backend = "sqlite"

    def __init__(self, path: str = SQLITE_PATH):
        self.path = path
        self._lock = threading.RLock()
        self._ready = False
        engine = create_engine(
            f"sqlite:///{path}",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=DEBUG_SQL,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        super().__init__(engine)

    def init(self) -> None:
        with self._lock:
            if self._ready:
                return
            directory = os.path.dirname(self.path)
            if directory and self.path != ":memory:":
                os.makedirs(directory, exist_ok=True)
            self.create_schema()
            self._ready = True
            logger.info("SQLite database initialized at %s", self.path)

    def get(self, sql: str, params: Params = None) -> Optional[Dict[str, Any]]:
        with self._lock:
            self.init()
            return super().get(sql, params)

    def all(self, sql: str, params: Params = None) -> List[Dict[str, Any]]:
        with self._lock:
            self.init()
            return super().all(sql, params)

    def run(self, sql: str, params: Params = None) -> DbResult:
        with self._lock:
            self.init()
            return super().run(sql, params)

    def close(self) -> None:
        with self._lock:
            super().close()
            self._ready = False


def _mysql_url() -> URL:
    return URL.create(
        "mysql+pymysql",
        username=DB_USER,
        password=DB_PASSWORD,
        host=DB_HOST or "mysql",
        port=DB_PORT,
        database=DB_NAME,
        query={"charset": "utf8mb4"},
    )


class MySQLAdapter(DatabaseAdapter):
    """Pooled networked store. Schema comes from the init-db script."""

    backend = "mysql"

    def __init__(self, url: Optional[URL] = None, pool_size: int = DB_POOL_SIZE):
        # Fixed-size pool; pool_timeout=None means callers wait for a free
        # connection instead of failing. SQLAlchemy's pymysql dialect sets
        # CLIENT.FOUND_ROWS, so rowcount is "rows matched" like SQLite.
        engine = create_engine(
            url or _mysql_url(),
            pool_size=pool_size,
            max_overflow=0,
            pool_timeout=None,
            pool_pre_ping=True,
            echo=DEBUG_SQL,
        )
        super().__init__(engine)


def create_adapter() -> DatabaseAdapter:
    if USE_MYSQL:
        logger.info("Using MySQL database (production) host=%s db=%s", DB_HOST or "mysql", DB_NAME)
        return MySQLAdapter()
    logger.info("Using SQLite database (development) path=%s", SQLITE_PATH)
    return SQLiteAdapter(SQLITE_PATH)


def get_db(request: Request) -> DatabaseAdapter:
    return request.app.state.db
