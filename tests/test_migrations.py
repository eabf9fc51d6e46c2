import sqlite3

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from smart_invite.db import migrations
from smart_invite.db.migrations import is_unknown_column_error, run_additive_migrations, run_with_schema_repair
from smart_invite.db.session import SQLiteAdapter, StorageError
from smart_invite.main import create_app

LEGACY_SCHEMA = """
CREATE TABLE events (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  description TEXT,
  message TEXT,
  photos TEXT,
  location TEXT,
  date TEXT,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE guests (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  event_id INTEGER,
  name TEXT NOT NULL,
  token TEXT UNIQUE NOT NULL,
  confirmed INTEGER DEFAULT 0,
  num_people INTEGER DEFAULT 0,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (event_id) REFERENCES events (id) ON DELETE CASCADE
);
"""

INSERT = (
    "INSERT INTO events (name, photos, custom_images) VALUES (:name, :photos, :custom_images)"
)


@pytest.fixture
def legacy_db(tmp_path):
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(str(path))
    conn.executescript(LEGACY_SCHEMA)
    conn.close()
    adapter = SQLiteAdapter(str(path))
    yield adapter
    adapter.close()


def _columns(db):
    return [r["name"] for r in db.all("PRAGMA table_info(events)")]


def test_adds_missing_column_once(legacy_db):
    assert "custom_images" not in _columns(legacy_db)
    assert run_additive_migrations(legacy_db) == ["events.custom_images"]
    assert "custom_images" in _columns(legacy_db)
    assert run_additive_migrations(legacy_db) == []


def test_fresh_schema_needs_nothing(db):
    assert run_additive_migrations(db) == []


def test_unknown_column_messages():
    assert is_unknown_column_error(Exception("(1054, \"Unknown column 'custom_images' in 'field list'\")"))
    assert is_unknown_column_error(Exception("table events has no column named custom_images"))
    assert not is_unknown_column_error(Exception("no such table: nope"))


def test_write_repairs_schema_and_retries(legacy_db):
    result = run_with_schema_repair(legacy_db, INSERT, {"name": "E", "photos": "[]", "custom_images": "[]"})
    assert result.changes == 1
    row = legacy_db.get("SELECT custom_images FROM events WHERE id = :id", {"id": result.last_id})
    assert row["custom_images"] == "[]"


def test_second_failure_is_a_storage_error(legacy_db, monkeypatch):
    monkeypatch.setattr(migrations, "run_additive_migrations", lambda db: [])
    with pytest.raises(StorageError):
        run_with_schema_repair(legacy_db, INSERT, {"name": "E", "photos": "[]", "custom_images": "[]"})
    assert legacy_db.all("SELECT * FROM events") == []


def test_other_errors_are_not_retried(db, monkeypatch):
    calls = []
    monkeypatch.setattr(migrations, "run_additive_migrations", lambda db: calls.append(1))
    with pytest.raises(OperationalError):
        run_with_schema_repair(db, "INSERT INTO nope (x) VALUES (1)")
    assert calls == []


def test_startup_migrates_legacy_database(legacy_db, tmp_path):
    app = create_app(db=legacy_db, upload_dir=str(tmp_path / "uploads"))
    with TestClient(app) as client:
        assert "custom_images" in _columns(legacy_db)
        r = client.post(
            "/api/events",
            json={
                "name": "Casamento",
                "date": "2026-05-01T16:00:00",
                "custom_images": [{"url": "/uploads/x.png", "position": "right-bottom"}],
            },
        )
        assert r.status_code == 200, r.text
        event = client.get(f"/api/events/{r.json()['id']}").json()
        assert event["custom_images"] == [{"url": "/uploads/x.png", "position": "right-bottom"}]
