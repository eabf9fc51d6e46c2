from smart_invite.db import session as db_session
from smart_invite.scripts import clean_db, init_db


def _seed(db):
    event_id = db.run("INSERT INTO events (name) VALUES ('E')").last_id
    db.run("INSERT INTO guests (event_id, name, token) VALUES (:e, 'G1', 't1')", {"e": event_id})
    db.run("INSERT INTO guests (event_id, name, token) VALUES (:e, 'G2', 't2')", {"e": event_id})


def test_init_database_creates_tables(db):
    assert init_db.init_database(db) == ["events", "guests"]


def test_clean_database_keeps_tables_and_resets_ids(db):
    _seed(db)
    assert clean_db.clean_database(db) == {"guests": 2, "events": 1}
    assert db.all("SELECT * FROM events") == []
    assert db.all("SELECT * FROM guests") == []

    # ids start over
    assert db.run("INSERT INTO events (name) VALUES ('again')").last_id == 1


def test_clean_requires_both_confirmations():
    answers = iter(["CONFIRMAR", "SIM"])
    assert clean_db.confirmed_by_user(lambda prompt: next(answers)) is True

    answers = iter(["CONFIRMAR", "nao"])
    assert clean_db.confirmed_by_user(lambda prompt: next(answers)) is False

    assert clean_db.confirmed_by_user(lambda prompt: "sim") is False


def test_clean_main_cancelled_touches_nothing(monkeypatch):
    monkeypatch.setattr(clean_db, "confirmed_by_user", lambda: False)
    monkeypatch.setattr(clean_db, "create_adapter", lambda: (_ for _ in ()).throw(AssertionError("opened db")))
    assert clean_db.main([]) == 1


def test_clean_main_with_yes(monkeypatch, tmp_path):
    monkeypatch.setattr(db_session, "USE_MYSQL", False)
    monkeypatch.setattr(db_session, "SQLITE_PATH", str(tmp_path / "x.db"))
    adapter = db_session.SQLiteAdapter(str(tmp_path / "x.db"))
    _seed(adapter)
    adapter.close()

    assert clean_db.main(["--yes"]) == 0

    adapter = db_session.SQLiteAdapter(str(tmp_path / "x.db"))
    try:
        assert adapter.all("SELECT * FROM guests") == []
    finally:
        adapter.close()
