"""Post composer: per-kind drafts, submission and the debounced link preview."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import PurePosixPath

from pydantic import ValidationError

from ..config import get_settings
from ..constants import PostType
from ..schemas import DonationPostCreate, LinkPreview, PostResponse, SeekingPostCreate, WisdomPostCreate
from .errors import CapabilityError, FeedValidationError, RemoteOperationError
from .gateway import FeedGateway, PostDraft
from .handlers import Viewer
from .link_preview import Debouncer, LinkPreviewResolver, extract_first_url, preview_for_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageAttachment:
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


def image_path(user_id: object, filename: str, *, now_ms: int | None = None) -> str:
    """Storage path for a post image, keyed by uploader and upload time."""

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}/{stamp}_{PurePosixPath(filename).name}"


class Composer:
    """Holds the fields of the post being written and submits it.

    The composer never inserts the new post into the feed itself; the store's
    realtime insert event surfaces it.
    """

    def __init__(
        self,
        gateway: FeedGateway,
        viewer: Viewer | None = None,
        *,
        resolver: LinkPreviewResolver | None = None,
        preview_delay: float | None = None,
    ) -> None:
        self.gateway = gateway
        self.viewer = viewer
        self.resolver = resolver
        self.post_type: PostType = PostType.WISDOM
        self.content = ""
        self.resource_title = ""
        self.resource_category = ""
        self.resource_contact = ""
        self.image: ImageAttachment | None = None
        self.link_preview: LinkPreview | None = None
        self.loading_preview = False
        self.submitting = False
        if preview_delay is None:
            preview_delay = get_settings().link_preview_delay_ms / 1000
        self._preview_timer = Debouncer(preview_delay, self._refresh_preview)

    def select_type(self, post_type: PostType | str) -> None:
        post_type = PostType(post_type)
        if post_type == PostType.SEEKING and not (self.viewer and self.viewer.is_student):
            raise CapabilityError("Only students can request resources.")
        self.post_type = post_type

    def set_content(self, text: str) -> None:
        """Update the free text and reschedule link-preview resolution."""

        self.content = text
        self._preview_timer.schedule(text)

    async def wait_for_preview(self) -> None:
        await self._preview_timer.wait()

    async def _refresh_preview(self, text: str) -> None:
        if extract_first_url(text) is None:
            self.link_preview = None
            return
        self.loading_preview = True
        try:
            self.link_preview = await preview_for_text(text, self.resolver)
        finally:
            self.loading_preview = False

    def clear(self) -> None:
        self._preview_timer.cancel()
        self.content = ""
        self.resource_title = ""
        self.resource_category = ""
        self.resource_contact = ""
        self.image = None
        self.link_preview = None

    def build_draft(self) -> PostDraft:
        """Validate the fields required by the selected kind and return its draft."""

        title = self.resource_title.strip()
        category = self.resource_category.strip()
        try:
            if self.post_type == PostType.WISDOM:
                content = self.content.strip()
                if not content:
                    raise FeedValidationError("Please write something to share.")
                preview = self.link_preview
                link_url = extract_first_url(content)
                if preview is not None and preview.url != link_url:
                    preview = None
                return WisdomPostCreate(
                    content=content,
                    link_url=link_url,
                    link_title=preview.title if preview else None,
                    link_description=preview.description if preview else None,
                    link_image=preview.image if preview else None,
                )
            if not title or not category:
                raise FeedValidationError("Please fill out resource title and category.")
            if self.post_type == PostType.DONATION:
                contact = self.resource_contact.strip()
                if not contact:
                    raise FeedValidationError("Please provide contact info for donation.")
                return DonationPostCreate(resource_title=title, resource_category=category, resource_contact=contact)
            return SeekingPostCreate(resource_title=title, resource_category=category)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise FeedValidationError(f"Invalid {location}: {first.get('msg')}") from exc

    async def submit(self) -> PostResponse | None:
        """Validate, clear the fields, upload the image if any, then insert the post.

        Returns ``None`` when a submission is already in flight. Cleared fields
        are not restored when the upload or insert fails.
        """

        viewer = self.viewer
        if viewer is None or viewer.profile is None:
            raise CapabilityError("Please sign in to post.")
        if self.submitting:
            return None
        if self.post_type == PostType.SEEKING and not viewer.is_student:
            raise CapabilityError("Only students can request resources.")

        draft = self.build_draft()
        image = self.image
        self.submitting = True
        self.clear()
        try:
            if image is not None:
                path = image_path(viewer.user_id, image.filename)
                image_url = await self.gateway.upload_image(path, image.data, image.content_type)
                draft = draft.model_copy(update={"image_url": image_url})
            post = await self.gateway.insert_post(draft)
        except Exception as exc:
            logger.warning("Failed to create %s post: %s", draft.post_type, exc)
            raise RemoteOperationError.wrap(exc, "Failed to create post.") from exc
        finally:
            self.submitting = False
        logger.info("Created %s post %s", post.post_type, post.id)
        return post


__all__ = ["Composer", "ImageAttachment", "image_path"]
