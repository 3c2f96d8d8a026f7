"""Notification API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import Profile
from ..schemas import NotificationCreate, NotificationListResponse, NotificationResponse
from ..services import add_notification, get_current_user, list_notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=NotificationListResponse)
async def list_my_notifications(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> NotificationListResponse:
    records = list_notifications(db, current_user.id)
    return NotificationListResponse(items=[NotificationResponse.model_validate(item) for item in records])


@router.post("/", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    payload: NotificationCreate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> NotificationResponse:
    """Record that the caller liked or commented on another member's post."""

    record = add_notification(
        db,
        user_id=payload.user_id,
        actor_id=current_user.id,
        post_id=payload.post_id,
        type_=payload.type,
    )
    return NotificationResponse.model_validate(record)


__all__ = ["router"]
