"""Schemas for uploaded post images."""
from __future__ import annotations

from pydantic import BaseModel, Field


class MediaUploadResponse(BaseModel):
    """Response returned after storing an uploaded file."""

    path: str = Field(..., description="Storage path relative to the media root")
    url: str = Field(..., description="Public URL of the uploaded file")
    content_type: str = Field(..., description="MIME type associated with the uploaded file")


__all__ = ["MediaUploadResponse"]
