from fastapi import APIRouter, Depends, HTTPException, Request

from smart_invite.api.schemas import GuestCreate, GuestResponseUpdate
from smart_invite.core.logging import log_evt
from smart_invite.db.session import DatabaseAdapter, get_db
from smart_invite.services import guests as guest_service

router = APIRouter()


@router.post("/guests")
def create_guest(payload: GuestCreate, request: Request, db: DatabaseAdapter = Depends(get_db)):
    if not guest_service.event_exists(db, payload.event_id):
        raise HTTPException(status_code=404, detail="Evento não encontrado")

    guest_id, token = guest_service.create_guest(db, payload.event_id, payload.name)

    proto = request.headers.get("x-forwarded-proto", "https")
    host = request.headers.get("host", "localhost:8000")
    link = guest_service.build_invite_link(proto, host, token)

    log_evt("info", "guest_created", event_id=payload.event_id, guest_id=guest_id)
    return {
        "id": guest_id,
        "token": token,
        "link": link,
        "message": "Convidado adicionado com sucesso!",
    }


@router.put("/guests")
def update_guest(payload: GuestResponseUpdate, db: DatabaseAdapter = Depends(get_db)):
    matched = guest_service.update_guest_response(db, payload.token, payload.confirmed, payload.num_people)
    if not matched:
        raise HTTPException(status_code=404, detail="Convite não encontrado")

    log_evt("info", "guest_response", token=payload.token[:8], confirmed=payload.confirmed, num_people=payload.num_people)
    return {"message": "Presença confirmada com sucesso!"}


@router.delete("/guests/{guest_id}")
def delete_guest(guest_id: int, db: DatabaseAdapter = Depends(get_db)):
    if not guest_service.delete_guest(db, guest_id):
        raise HTTPException(status_code=404, detail="Convidado não encontrado")
    log_evt("info", "guest_deleted", guest_id=guest_id)
    return {"success": True, "message": "Convite excluído com sucesso!"}


@router.get("/invite/{token}")
def get_invite(token: str, db: DatabaseAdapter = Depends(get_db)):
    invite = guest_service.get_invite(db, token)
    if not invite:
        raise HTTPException(status_code=404, detail="Convite não encontrado")
    return invite
