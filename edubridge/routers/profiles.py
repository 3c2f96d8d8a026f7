"""Profile routes consumed read-only by the feed."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import Profile
from ..schemas import ProfileResponse
from ..services import get_current_user

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def my_profile(current_user: Profile = Depends(get_current_user)) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user)


@router.get("/{username}", response_model=ProfileResponse)
async def retrieve_profile(username: str, db: Session = Depends(get_session)) -> ProfileResponse:
    profile = db.scalar(select(Profile).where(Profile.username == username))
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return ProfileResponse.model_validate(profile)


__all__ = ["router"]
