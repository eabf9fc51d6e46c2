from fastapi import APIRouter, Depends, HTTPException

from smart_invite.api.schemas import EventCreate, EventPayload
from smart_invite.core.logging import log_evt
from smart_invite.db.session import DatabaseAdapter, get_db
from smart_invite.services import events as event_service
from smart_invite.services import guests as guest_service

router = APIRouter()


@router.post("/events")
def create_event(payload: EventCreate, db: DatabaseAdapter = Depends(get_db)):
    event_id = event_service.create_event(db, payload.model_dump())
    log_evt("info", "event_created", event_id=event_id)
    return {"id": event_id, "message": "Evento criado com sucesso!"}


@router.get("/events")
def list_events(db: DatabaseAdapter = Depends(get_db)):
    return event_service.list_events(db)


# declared before /events/{event_id} so "with-stats" is not read as an id
@router.get("/events/with-stats")
def list_events_with_stats(db: DatabaseAdapter = Depends(get_db)):
    return event_service.list_events_with_stats(db)


@router.get("/events/{event_id}")
def get_event(event_id: int, db: DatabaseAdapter = Depends(get_db)):
    e = event_service.get_event(db, event_id)
    if not e:
        raise HTTPException(status_code=404, detail="Evento não encontrado")
    return e


@router.put("/events/{event_id}")
def update_event(event_id: int, payload: EventPayload, db: DatabaseAdapter = Depends(get_db)):
    changes = event_service.update_event(db, event_id, payload.model_dump())
    log_evt("info", "event_updated", event_id=event_id, changes=changes)
    return {"message": "Evento atualizado com sucesso!"}


@router.delete("/events/{event_id}")
def delete_event(event_id: int, db: DatabaseAdapter = Depends(get_db)):
    changes = event_service.delete_event(db, event_id)
    log_evt("info", "event_deleted", event_id=event_id, changes=changes)
    return {"message": "Evento excluído com sucesso!"}


@router.get("/events/{event_id}/complete")
def get_event_complete(event_id: int, db: DatabaseAdapter = Depends(get_db)):
    data = event_service.get_event_complete(db, event_id)
    if not data:
        raise HTTPException(status_code=404, detail="Evento não encontrado")
    return data


@router.get("/events/{event_id}/guests")
def list_event_guests(event_id: int, db: DatabaseAdapter = Depends(get_db)):
    return guest_service.list_event_guests(db, event_id)
