"""Schemas for profile payloads."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProfileSummary(BaseModel):
    """Author details nested inside posts and comments."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    avatar_url: str | None = None
    role: str = "other"
    verification_status: str = "unverified"

    @property
    def shows_verified_badge(self) -> bool:
        return self.role == "donor" or self.verification_status == "verified"


class ProfileResponse(ProfileSummary):
    created_at: datetime


__all__ = ["ProfileSummary", "ProfileResponse"]
