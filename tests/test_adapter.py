from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from smart_invite.db import session as db_session
from smart_invite.db.session import MySQLAdapter, SQLiteAdapter, _normalize_value, create_adapter


def _table_names(db):
    return {r["name"] for r in db.all("SELECT name FROM sqlite_master WHERE type = 'table'")}


def test_sqlite_creates_directory_and_schema_on_first_use(tmp_path):
    path = tmp_path / "nested" / "dir" / "smart-invite.db"
    db = SQLiteAdapter(str(path))
    try:
        assert not path.parent.exists()
        assert {"events", "guests"} <= _table_names(db)
        assert path.exists()
    finally:
        db.close()


def test_run_reports_last_id_and_changes(db):
    first = db.run("INSERT INTO events (name) VALUES (:name)", {"name": "A"})
    second = db.run("INSERT INTO events (name) VALUES (:name)", {"name": "B"})
    assert first.changes == 1
    assert second.last_id == first.last_id + 1

    result = db.run("UPDATE events SET location = :loc", {"loc": "Praça"})
    assert result.changes == 2

    result = db.run("DELETE FROM events WHERE id = :id", {"id": 9999})
    assert result.changes == 0


def test_get_and_all(db):
    assert db.get("SELECT * FROM events WHERE id = :id", {"id": 1}) is None
    assert db.all("SELECT * FROM events") == []

    db.run("INSERT INTO events (name) VALUES (:name)", {"name": "A"})
    row = db.get("SELECT * FROM events WHERE name = :name", {"name": "A"})
    assert row["name"] == "A"
    # server-assigned timestamp comes back as a plain string
    datetime.strptime(row["created_at"], "%Y-%m-%d %H:%M:%S")


def test_foreign_key_cascade(db):
    event_id = db.run("INSERT INTO events (name) VALUES ('E')").last_id
    db.run(
        "INSERT INTO guests (event_id, name, token) VALUES (:e, 'G', 'tok-1')",
        {"e": event_id},
    )
    db.run("DELETE FROM events WHERE id = :id", {"id": event_id})
    assert db.all("SELECT * FROM guests") == []


def test_guest_defaults_to_pending(db):
    event_id = db.run("INSERT INTO events (name) VALUES ('E')").last_id
    db.run("INSERT INTO guests (event_id, name, token) VALUES (:e, 'G', 'tok-1')", {"e": event_id})
    row = db.get("SELECT confirmed, num_people FROM guests WHERE token = 'tok-1'")
    assert row == {"confirmed": 0, "num_people": 0}


def test_token_is_unique(db):
    event_id = db.run("INSERT INTO events (name) VALUES ('E')").last_id
    db.run("INSERT INTO guests (event_id, name, token) VALUES (:e, 'G1', 'same')", {"e": event_id})
    with pytest.raises(IntegrityError):
        db.run("INSERT INTO guests (event_id, name, token) VALUES (:e, 'G2', 'same')", {"e": event_id})


def test_close_then_reuse(db):
    db.run("INSERT INTO events (name) VALUES ('E')")
    db.close()
    assert len(db.all("SELECT * FROM events")) == 1


def test_normalize_value():
    assert _normalize_value(datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02 03:04:05"
    assert _normalize_value(Decimal("7")) == 7
    assert isinstance(_normalize_value(Decimal("7")), int)
    assert _normalize_value(Decimal("2.5")) == 2.5
    assert _normalize_value("x") == "x"


def test_create_adapter_defaults_to_sqlite(monkeypatch, tmp_path):
    monkeypatch.setattr(db_session, "USE_MYSQL", False)
    monkeypatch.setattr(db_session, "SQLITE_PATH", str(tmp_path / "x.db"))
    adapter = create_adapter()
    try:
        assert isinstance(adapter, SQLiteAdapter)
        assert adapter.backend == "sqlite"
    finally:
        adapter.close()


def test_create_adapter_selects_mysql(monkeypatch):
    monkeypatch.setattr(db_session, "USE_MYSQL", True)
    adapter = create_adapter()
    try:
        assert isinstance(adapter, MySQLAdapter)
        assert adapter.backend == "mysql"
        assert adapter.engine.url.drivername == "mysql+pymysql"
        assert adapter.engine.pool.size() == 10
    finally:
        adapter.close()
