"""Pydantic schemas for posts, likes and comments."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, RootModel

from ..constants import ResourceCategory
from .profiles import ProfileSummary


class LinkPreview(BaseModel):
    """Transient metadata resolved for the first URL found in a post."""

    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None


class WisdomPostCreate(BaseModel):
    """Free-text post, optionally carrying a resolved link preview."""

    model_config = ConfigDict(str_strip_whitespace=True)

    post_type: Literal["wisdom"] = "wisdom"
    content: str = Field(..., min_length=1, max_length=5000)
    image_url: str | None = None
    link_url: str | None = None
    link_title: str | None = None
    link_description: str | None = None
    link_image: str | None = None


class DonationPostCreate(BaseModel):
    """Resource offered by a donor; contact details are revealed on claim."""

    model_config = ConfigDict(str_strip_whitespace=True)

    post_type: Literal["donation"] = "donation"
    resource_title: str = Field(..., min_length=1, max_length=255)
    resource_category: ResourceCategory
    resource_contact: str = Field(..., min_length=1, max_length=255)
    image_url: str | None = None


class SeekingPostCreate(BaseModel):
    """Resource requested by a student."""

    model_config = ConfigDict(str_strip_whitespace=True)

    post_type: Literal["seeking"] = "seeking"
    resource_title: str = Field(..., min_length=1, max_length=255)
    resource_category: ResourceCategory
    image_url: str | None = None


PostCreate = Annotated[
    Union[WisdomPostCreate, DonationPostCreate, SeekingPostCreate],
    Field(discriminator="post_type"),
]


class PostCreateRequest(RootModel[PostCreate]):
    """Request body wrapping the tagged post variants."""


class PostUpdate(BaseModel):
    """Editable fields of a post; link fields are replaced wholesale."""

    content: str | None = Field(default=None, max_length=5000)
    link_url: str | None = None
    link_title: str | None = None
    link_description: str | None = None
    link_image: str | None = None


class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    # Locally synthesized likes carry a temporary string identifier.
    id: UUID | str
    post_id: UUID
    user_id: UUID
    created_at: datetime


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID | str
    post_id: UUID
    user_id: UUID
    content: str
    created_at: datetime
    profile: ProfileSummary | None = None


class PostRow(BaseModel):
    """Flat column values of a post, as carried by realtime events."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    post_type: str
    content: str | None = None
    resource_title: str | None = None
    resource_category: str | None = None
    resource_contact: str | None = None
    image_url: str | None = None
    link_url: str | None = None
    link_title: str | None = None
    link_description: str | None = None
    link_image: str | None = None
    created_at: datetime


class PostResponse(PostRow):
    """Post with its author profile, likes and comments."""

    profile: ProfileSummary | None = None
    likes: list[LikeResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def liked_by(self, user_id: UUID) -> bool:
        return any(like.user_id == user_id for like in self.likes)


class PostFeedResponse(BaseModel):
    """Envelope used when returning a collection of posts."""

    items: list[PostResponse]


__all__ = [
    "LinkPreview",
    "WisdomPostCreate",
    "DonationPostCreate",
    "SeekingPostCreate",
    "PostCreate",
    "PostCreateRequest",
    "PostUpdate",
    "LikeResponse",
    "CommentCreate",
    "CommentResponse",
    "PostRow",
    "PostResponse",
    "PostFeedResponse",
]
