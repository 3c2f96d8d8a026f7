"""Schemas for notifications."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..constants import NotificationKind


class NotificationCreate(BaseModel):
    user_id: UUID
    type: NotificationKind
    post_id: UUID


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    actor_id: UUID
    post_id: UUID | None = None
    type: str
    read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]


__all__ = ["NotificationCreate", "NotificationResponse", "NotificationListResponse"]
