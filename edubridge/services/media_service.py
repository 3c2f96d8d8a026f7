"""Local storage of uploaded post images."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
from uuid import UUID

from fastapi import HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from ..config import get_settings
from ..constants import POST_IMAGES_FOLDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredUpload:
    """Metadata returned after writing an uploaded file to the media root."""

    path: str
    url: str
    content_type: str


class MediaStorageError(RuntimeError):
    """Raised when an uploaded file cannot be written to disk."""


def _sanitize_segments(parts: Iterable[str]) -> list[str]:
    """Sanitize path segments to be safe for storage keys."""

    sanitized: list[str] = []
    for part in parts:
        if part in {"", ".", ".."}:
            continue
        cleaned = re.sub(r"[^A-Za-z0-9._-]", "-", part.strip())
        cleaned = re.sub(r"-+", "-", cleaned).strip("-")
        if cleaned and cleaned not in {".", ".."}:
            sanitized.append(cleaned)
    return sanitized


def storage_path(requested: str, *, uploader_id: UUID) -> str:
    """Normalise a client-chosen path and anchor it under the uploader's folder.

    Clients name uploads ``<uploader id>/<epoch millis>_<filename>``; anything
    that does not start with the uploader's id is re-homed there.
    """

    segments = _sanitize_segments(requested.replace("\\", "/").split("/"))
    if not segments:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Upload path must include a filename.")
    owner = str(uploader_id)
    if segments[0] != owner:
        segments = [owner, *segments]
    return "/".join([POST_IMAGES_FOLDER, *segments])


def public_url(path: str) -> str:
    base = get_settings().media_base_url.rstrip("/")
    return f"{base}/{path.lstrip('/')}"


def _write_file(destination: Path, data: bytes) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    if destination.exists():
        raise FileExistsError(str(destination))
    with destination.open("wb") as fh:
        fh.write(data)


async def store_upload(upload: UploadFile, *, path: str, uploader_id: UUID) -> StoredUpload:
    """Persist an uploaded file under the media root and return its public URL."""

    settings = get_settings()
    relative = storage_path(path, uploader_id=uploader_id)
    data = await upload.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Uploaded file is too large.")

    destination = Path(settings.media_root) / relative
    try:
        await run_in_threadpool(_write_file, destination, data)
    except FileExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The resource already exists") from exc
    except OSError as exc:
        logger.exception("Failed to write upload %s", relative)
        raise MediaStorageError("Unable to store uploaded file") from exc

    content_type = (upload.content_type or "application/octet-stream").strip() or "application/octet-stream"
    return StoredUpload(path=relative, url=public_url(relative), content_type=content_type)


__all__ = ["MediaStorageError", "StoredUpload", "public_url", "storage_path", "store_upload"]
