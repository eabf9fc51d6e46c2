from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from smart_invite.db.session import DatabaseAdapter, get_db

router = APIRouter()


@router.get("/health")
def health(db: DatabaseAdapter = Depends(get_db)):
    # DB connectivity check
    try:
        db.get("SELECT 1 AS ok")
        db_ok = True
    except SQLAlchemyError:
        db_ok = False

    return {
        "ok": db_ok,
        "db": "ok" if db_ok else "error",
        "backend": db.backend,
    }
