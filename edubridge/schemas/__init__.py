"""Convenience exports for schema layer."""
from .media import MediaUploadResponse
from .notifications import NotificationCreate, NotificationListResponse, NotificationResponse
from .posts import (
    CommentCreate,
    CommentResponse,
    DonationPostCreate,
    LikeResponse,
    LinkPreview,
    PostCreate,
    PostCreateRequest,
    PostFeedResponse,
    PostResponse,
    PostRow,
    PostUpdate,
    SeekingPostCreate,
    WisdomPostCreate,
)
from .profiles import ProfileResponse, ProfileSummary
from .realtime import ChangeEvent

__all__ = [
    "MediaUploadResponse",
    "NotificationCreate",
    "NotificationListResponse",
    "NotificationResponse",
    "CommentCreate",
    "CommentResponse",
    "DonationPostCreate",
    "LikeResponse",
    "LinkPreview",
    "PostCreate",
    "PostCreateRequest",
    "PostFeedResponse",
    "PostResponse",
    "PostRow",
    "PostUpdate",
    "SeekingPostCreate",
    "WisdomPostCreate",
    "ProfileResponse",
    "ProfileSummary",
    "ChangeEvent",
]
