import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

from smart_invite.core.config import MAX_UPLOAD_FILES, MAX_UPLOAD_SIZE
from smart_invite.core.logging import log_evt

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

CACHE_CONTROL = "public, max-age=31536000, immutable"


class UploadRejected(ValueError):
    """Bad upload request (400)."""


class PathEscapeError(PermissionError):
    """Requested file lies outside the upload directory (403)."""


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


def init_upload_dir(path: Union[str, Path]) -> Path:
    root = Path(path).resolve()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as ex:
        raise RuntimeError(f"cannot create upload directory {root}: {ex}") from ex
    if not os.access(root, os.W_OK):
        raise RuntimeError(f"upload directory {root} is not writable")
    return root


def unique_filename(original_name: str) -> str:
    ext = Path(original_name or "").suffix.lower()
    return f"{int(time.time() * 1000)}_{secrets.token_hex(6)}{ext}"


def validate_files(
    files: Sequence[IncomingFile],
    max_files: int = MAX_UPLOAD_FILES,
    max_size: int = MAX_UPLOAD_SIZE,
) -> None:
    if not files:
        raise UploadRejected("Nenhum arquivo enviado")
    if len(files) > max_files:
        raise UploadRejected(f"Máximo de {max_files} arquivos por envio")
    for f in files:
        if not (f.content_type or "").startswith("image/"):
            raise UploadRejected(f"Tipo de arquivo não permitido: {f.filename}")
        if len(f.data) > max_size:
            raise UploadRejected(f"Arquivo maior que {max_size // (1024 * 1024)}MB: {f.filename}")


def store_files(upload_dir: Path, files: Sequence[IncomingFile]) -> List[Dict]:
    """Write already-validated files. Returns public metadata per file."""
    stored = []
    for f in files:
        name = unique_filename(f.filename)
        target = upload_dir / name
        target.write_bytes(f.data)
        os.chmod(target, 0o644)
        stored.append(
            {
                "url": f"/uploads/{name}",
                "filename": name,
                "originalName": f.filename,
                "size": len(f.data),
            }
        )
        log_evt("info", "upload_stored", filename=name, size=len(f.data))
    return stored


def resolve_upload_path(upload_dir: Path, relative: str) -> Path:
    root = Path(upload_dir).resolve()
    candidate = (root / relative).resolve()
    if candidate != root and root not in candidate.parents:
        raise PathEscapeError(relative)
    if not candidate.is_file():
        raise FileNotFoundError(relative)
    return candidate


def content_type_for(path: Union[str, Path]) -> str:
    return CONTENT_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")
