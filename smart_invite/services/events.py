import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from smart_invite.core.logging import logger
from smart_invite.db.migrations import run_with_schema_repair
from smart_invite.db.session import DatabaseAdapter
from smart_invite.services.rsvp import status_from_row

EVENT_COLUMNS = "name, description, message, photos, location, date, custom_images"


def load_json_list(raw: Any, field: str, event_id: Optional[int] = None) -> list:
    """Stored JSON blob -> list. Null, malformed or non-list values give []."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("invalid JSON in events.%s event_id=%s", field, event_id)
        return []
    return value if isinstance(value, list) else []


def normalize_date(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _event_params(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": fields["name"].strip(),
        "description": fields.get("description"),
        "message": fields.get("message"),
        "photos": json.dumps(list(fields.get("photos") or [])),
        "location": fields.get("location"),
        "date": normalize_date(fields.get("date")),
        "custom_images": json.dumps([dict(ci) for ci in fields.get("custom_images") or []]),
    }


def event_out(row: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    out["photos"] = load_json_list(row.get("photos"), "photos", row.get("id"))
    out["custom_images"] = load_json_list(row.get("custom_images"), "custom_images", row.get("id"))
    return out


def guest_out(row: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    out["confirmed"] = bool(row.get("confirmed"))
    if "num_people" in row:
        out["status"] = status_from_row(row.get("confirmed"), row.get("num_people")).label
    return out


def create_event(db: DatabaseAdapter, fields: Dict[str, Any]) -> int:
    result = run_with_schema_repair(
        db,
        f"INSERT INTO events ({EVENT_COLUMNS}) "
        "VALUES (:name, :description, :message, :photos, :location, :date, :custom_images)",
        _event_params(fields),
    )
    return result.last_id


def update_event(db: DatabaseAdapter, event_id: int, fields: Dict[str, Any]) -> int:
    params = _event_params(fields)
    params["id"] = event_id
    result = run_with_schema_repair(
        db,
        "UPDATE events SET name = :name, description = :description, message = :message, "
        "photos = :photos, location = :location, date = :date, custom_images = :custom_images "
        "WHERE id = :id",
        params,
    )
    return result.changes


def delete_event(db: DatabaseAdapter, event_id: int) -> int:
    # guests go with it (ON DELETE CASCADE)
    return db.run("DELETE FROM events WHERE id = :id", {"id": event_id}).changes


def get_event(db: DatabaseAdapter, event_id: int) -> Optional[Dict[str, Any]]:
    row = db.get("SELECT * FROM events WHERE id = :id", {"id": event_id})
    return event_out(row) if row else None


def list_events(db: DatabaseAdapter) -> List[Dict[str, Any]]:
    rows = db.all("SELECT * FROM events ORDER BY created_at DESC, id DESC")
    return [event_out(r) for r in rows]


def list_events_with_stats(db: DatabaseAdapter) -> List[Dict[str, Any]]:
    # Declined guests (confirmed = 0, num_people = -1) land in pending_guests.
    rows = db.all(
        """
        SELECT
          e.id, e.name, e.description, e.message, e.photos, e.location, e.date,
          e.custom_images, e.created_at,
          COUNT(g.id) AS total_guests,
          COUNT(CASE WHEN g.confirmed = 1 THEN 1 END) AS confirmed_guests,
          COALESCE(SUM(CASE WHEN g.confirmed = 1 THEN g.num_people ELSE 0 END), 0) AS total_people,
          COUNT(CASE WHEN g.id IS NOT NULL AND (g.confirmed = 0 OR g.confirmed IS NULL) THEN 1 END)
            AS pending_guests
        FROM events e
        LEFT JOIN guests g ON e.id = g.event_id
        GROUP BY e.id, e.name, e.description, e.message, e.photos, e.location, e.date,
                 e.custom_images, e.created_at
        ORDER BY e.created_at DESC, e.id DESC
        """
    )
    return [event_out(r) for r in rows]


def compute_stats(guests: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    guests = list(guests)
    confirmed = [g for g in guests if g.get("confirmed")]
    return {
        "total_guests": len(guests),
        "confirmed_guests": len(confirmed),
        "total_people": sum(g.get("num_people") or 0 for g in confirmed),
        # everyone not confirmed, declined included
        "pending_guests": len(guests) - len(confirmed),
    }


def get_event_complete(db: DatabaseAdapter, event_id: int) -> Optional[Dict[str, Any]]:
    event = get_event(db, event_id)
    if event is None:
        return None
    rows = db.all(
        "SELECT * FROM guests WHERE event_id = :id ORDER BY created_at DESC, id DESC",
        {"id": event_id},
    )
    guests = [guest_out(r) for r in rows]
    return {"event": event, "guests": guests, "stats": compute_stats(guests)}
