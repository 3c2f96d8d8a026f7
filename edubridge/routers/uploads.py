"""Upload endpoint for post images stored under the media root."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ..models import Profile
from ..schemas import MediaUploadResponse
from ..services import MediaStorageError, get_current_user, store_upload

router = APIRouter(tags=["uploads"])


@router.post("/upload/", response_model=MediaUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_endpoint(
    path: str = Form(...),
    file: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user),
) -> MediaUploadResponse:
    """Store an image under ``path`` (keyed by uploader id) and return its public URL."""

    filename = (file.filename or "").strip()
    if not filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file must include a filename.")

    try:
        result = await store_upload(file, path=path, uploader_id=current_user.id)
    except MediaStorageError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return MediaUploadResponse(path=result.path, url=result.url, content_type=result.content_type)


__all__ = ["router"]
