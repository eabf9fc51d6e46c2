from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from smart_invite.api.routers import events as events_router
from smart_invite.api.routers import guests as guests_router
from smart_invite.api.routers import health as health_router
from smart_invite.api.routers import uploads as uploads_router
from smart_invite.core.config import UPLOAD_DIR
from smart_invite.core.logging import logger
from smart_invite.db.migrations import run_additive_migrations
from smart_invite.db.session import DatabaseAdapter, StorageError, create_adapter
from smart_invite.services.uploads import init_upload_dir


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:])
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Requisição inválida"


def create_app(db: Optional[DatabaseAdapter] = None, upload_dir: Optional[str] = None) -> FastAPI:
    app = FastAPI(title="Smart Invite")
    app.state.db = db
    app.state.upload_dir = upload_dir or UPLOAD_DIR

    # Routers
    app.include_router(health_router.router)
    app.include_router(events_router.router, prefix="/api")
    app.include_router(guests_router.router, prefix="/api")
    app.include_router(uploads_router.router, prefix="/api")
    app.include_router(uploads_router.files_router)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _describe_validation(exc)})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("database error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": str(getattr(exc, "orig", None) or exc)})

    @app.on_event("startup")
    def _startup():
        # Fail fast: uploads are useless without a writable directory
        app.state.upload_dir = init_upload_dir(app.state.upload_dir)
        logger.info("Upload directory ready at %s", app.state.upload_dir)

        if app.state.db is None:
            app.state.db = create_adapter()

        try:
            added = run_additive_migrations(app.state.db)
            logger.info("Additive migrations done, added=%s", added or "none")
        except Exception:
            logger.exception("MIGRATIONS skipped/failed")

    @app.on_event("shutdown")
    def _shutdown():
        if app.state.db is not None:
            app.state.db.close()

    return app


app = create_app()
