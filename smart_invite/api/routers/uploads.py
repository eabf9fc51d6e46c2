from typing import List, Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from smart_invite.core.config import MAX_UPLOAD_FILES, MAX_UPLOAD_SIZE
from smart_invite.core.logging import logger
from smart_invite.services.uploads import (
    CACHE_CONTROL,
    IncomingFile,
    PathEscapeError,
    UploadRejected,
    content_type_for,
    resolve_upload_path,
    store_files,
    validate_files,
)

router = APIRouter()

# /uploads/... is also served outside the /api prefix
files_router = APIRouter()


@router.post("/upload")
async def upload(request: Request, file: Optional[List[UploadFile]] = File(None)):
    uploads = file or []
    if len(uploads) > MAX_UPLOAD_FILES:
        raise HTTPException(status_code=400, detail=f"Máximo de {MAX_UPLOAD_FILES} arquivos por envio")

    # Everything is read and checked before the first write.
    incoming = []
    for u in uploads:
        data = await u.read(MAX_UPLOAD_SIZE + 1)
        incoming.append(IncomingFile(filename=u.filename or "", content_type=u.content_type or "", data=data))

    try:
        validate_files(incoming)
    except UploadRejected as ex:
        raise HTTPException(status_code=400, detail=str(ex))

    try:
        stored = store_files(request.app.state.upload_dir, incoming)
    except OSError:
        logger.exception("upload write failed")
        raise HTTPException(status_code=500, detail="Erro no upload do arquivo")

    body = {
        "url": stored[0]["url"],
        "urls": [s["url"] for s in stored],
        "files": stored,
        "message": "Upload realizado com sucesso!",
    }
    if len(stored) == 1:
        body.update(stored[0])
    return body


@router.get("/uploads/{file_path:path}")
def serve_upload(file_path: str, request: Request):
    try:
        path = resolve_upload_path(request.app.state.upload_dir, file_path)
    except PathEscapeError:
        raise HTTPException(status_code=403, detail="Acesso negado")
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Imagem não encontrada")

    return FileResponse(path, media_type=content_type_for(path), headers={"Cache-Control": CACHE_CONTROL})


files_router.add_api_route("/uploads/{file_path:path}", serve_upload, methods=["GET"])
