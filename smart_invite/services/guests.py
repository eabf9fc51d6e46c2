import uuid
from typing import Any, Dict, List, Optional, Tuple

from smart_invite.core.config import BASE_PATH
from smart_invite.db.session import DatabaseAdapter
from smart_invite.services.events import guest_out, load_json_list


def new_token() -> str:
    return str(uuid.uuid4())


def build_invite_link(proto: str, host: str, token: str, base_path: str = BASE_PATH) -> str:
    return f"{proto}://{host}{base_path}/convite/{token}"


def event_exists(db: DatabaseAdapter, event_id: int) -> bool:
    return db.get("SELECT id FROM events WHERE id = :id", {"id": event_id}) is not None


def create_guest(db: DatabaseAdapter, event_id: int, name: str) -> Tuple[int, str]:
    token = new_token()
    result = db.run(
        "INSERT INTO guests (event_id, name, token, confirmed, num_people) "
        "VALUES (:event_id, :name, :token, 0, 0)",
        {"event_id": event_id, "name": name.strip(), "token": token},
    )
    return result.last_id, token


def update_guest_response(db: DatabaseAdapter, token: str, confirmed: bool, num_people: Optional[int]) -> int:
    """Overwrite the response exactly as sent. Returns matched rows.

    A confirm without a count means a party of one; any other answer
    without a count goes back to pending (0).
    """
    if num_people is None:
        num_people = 1 if confirmed else 0
    result = db.run(
        "UPDATE guests SET confirmed = :confirmed, num_people = :num_people WHERE token = :token",
        {"confirmed": 1 if confirmed else 0, "num_people": num_people, "token": token},
    )
    return result.changes


def delete_guest(db: DatabaseAdapter, guest_id: int) -> bool:
    if db.get("SELECT id FROM guests WHERE id = :id", {"id": guest_id}) is None:
        return False
    db.run("DELETE FROM guests WHERE id = :id", {"id": guest_id})
    return True


def get_invite(db: DatabaseAdapter, token: str) -> Optional[Dict[str, Any]]:
    row = db.get(
        """
        SELECT g.*, e.name AS event_name, e.description, e.message,
               e.photos, e.location, e.date
        FROM guests g
        JOIN events e ON g.event_id = e.id
        WHERE g.token = :token
        """,
        {"token": token},
    )
    if row is None:
        return None
    out = guest_out(row)
    out["photos"] = load_json_list(row.get("photos"), "photos", row.get("event_id"))
    return out


def list_event_guests(db: DatabaseAdapter, event_id: int) -> List[Dict[str, Any]]:
    # no token here: this list is shown on the host dashboard
    rows = db.all(
        "SELECT id, name, confirmed, num_people, created_at FROM guests "
        "WHERE event_id = :id ORDER BY created_at DESC, id DESC",
        {"id": event_id},
    )
    return [guest_out(r) for r in rows]
