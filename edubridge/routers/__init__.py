"""Aggregate router exports."""
from .notifications import router as notifications_router
from .posts import router as posts_router
from .profiles import router as profiles_router
from .realtime import router as realtime_router
from .uploads import router as uploads_router

__all__ = [
    "notifications_router",
    "posts_router",
    "profiles_router",
    "realtime_router",
    "uploads_router",
]
