import pytest
from fastapi.testclient import TestClient

from smart_invite.db.session import SQLiteAdapter
from smart_invite.main import create_app


@pytest.fixture
def db(tmp_path):
    adapter = SQLiteAdapter(str(tmp_path / "data" / "test.db"))
    yield adapter
    adapter.close()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(db, upload_dir):
    app = create_app(db=db, upload_dir=str(upload_dir))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def event_payload():
    return {
        "name": "Aniversário da Ana",
        "description": "Festa de 30 anos",
        "message": "Contamos com você!",
        "photos": ["/uploads/b.jpg", "/uploads/a.jpg", "/uploads/c.jpg"],
        "location": "Rua das Flores, 123",
        "date": "2026-11-20T19:30:00Z",
        "custom_images": [
            {"url": "/uploads/balloon.png", "position": "left-top"},
            {"url": "/uploads/cake.png", "position": "center-bottom"},
        ],
    }


@pytest.fixture
def make_event(client, event_payload):
    def _make(**overrides):
        payload = dict(event_payload)
        payload.update(overrides)
        r = client.post("/api/events", json=payload)
        assert r.status_code == 200, r.text
        return r.json()["id"]

    return _make


@pytest.fixture
def make_guest(client):
    def _make(event_id, name="Maria"):
        r = client.post("/api/guests", json={"eventId": event_id, "name": name})
        assert r.status_code == 200, r.text
        return r.json()

    return _make
