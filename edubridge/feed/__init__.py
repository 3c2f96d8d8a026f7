"""Client-side feed core: state container, realtime adapter and optimistic handlers."""
from .composer import Composer, ImageAttachment
from .errors import CapabilityError, FeedError, FeedValidationError, RemoteOperationError
from .gateway import FeedGateway, HttpFeedGateway, PostDraft
from .handlers import ClaimDecision, FeedInteractions, OptimisticAction, Viewer
from .link_preview import Debouncer, StaticLinkPreviewResolver, extract_first_url, resolve_link_preview
from .projection import ALL_POST_TYPES, FeedProjection, FeedSort, project_feed
from .realtime import RealtimeAdapter, refetch_feed
from .store import FeedStore

__all__ = [
    "Composer",
    "ImageAttachment",
    "CapabilityError",
    "FeedError",
    "FeedValidationError",
    "RemoteOperationError",
    "FeedGateway",
    "HttpFeedGateway",
    "PostDraft",
    "ClaimDecision",
    "FeedInteractions",
    "OptimisticAction",
    "Viewer",
    "Debouncer",
    "StaticLinkPreviewResolver",
    "extract_first_url",
    "resolve_link_preview",
    "ALL_POST_TYPES",
    "FeedProjection",
    "FeedSort",
    "project_feed",
    "RealtimeAdapter",
    "refetch_feed",
    "FeedStore",
]
