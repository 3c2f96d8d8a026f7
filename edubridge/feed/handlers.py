"""Optimistic like, comment, edit, delete and claim handlers for the feed."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable
from uuid import UUID, uuid4

from ..constants import NotificationKind, PostType, ProfileRole, VerificationStatus
from ..schemas import CommentResponse, LikeResponse, LinkPreview, PostResponse, PostUpdate, ProfileSummary
from .errors import CapabilityError, FeedValidationError, RemoteOperationError
from .gateway import FeedGateway
from .link_preview import LinkPreviewResolver, extract_first_url, resolve_link_preview
from .realtime import refetch_feed
from .store import FeedStore

logger = logging.getLogger(__name__)

VERIFICATION_REDIRECT = "/?page=verification"


@dataclass(frozen=True)
class Viewer:
    """The signed-in member acting on the feed."""

    user_id: UUID
    profile: ProfileSummary | None = None

    @property
    def is_student(self) -> bool:
        return self.profile is not None and self.profile.role == ProfileRole.STUDENT

    @property
    def is_verified(self) -> bool:
        return self.profile is not None and self.profile.verification_status == VerificationStatus.VERIFIED


@dataclass(frozen=True)
class ClaimDecision:
    allowed: bool
    reason: str
    redirect: str | None = None
    contact: str | None = None


@dataclass
class EditSession:
    post_id: UUID
    content: str
    preview: LinkPreview | None = None


@dataclass
class OptimisticAction:
    """Apply locally, then commit remotely, then confirm or compensate.

    ``apply`` runs synchronously before any await so the next read sees it.
    ``compensate`` runs when ``commit`` raises; the failure is then re-raised
    as :class:`RemoteOperationError` carrying the store's message or
    ``fallback_message``. ``confirm`` runs only after a successful commit.
    """

    apply: Callable[[], None]
    commit: Callable[[], Awaitable[object]]
    compensate: Callable[[], Awaitable[object]]
    fallback_message: str
    confirm: Callable[[], Awaitable[object]] | None = field(default=None)


def _temporary_id() -> str:
    return f"tmp-{uuid4().hex}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _update_fields(content: str, link_url: str | None, preview: LinkPreview | None) -> PostUpdate:
    return PostUpdate(
        content=content,
        link_url=link_url,
        link_title=preview.title if preview else None,
        link_description=preview.description if preview else None,
        link_image=preview.image if preview else None,
    )


class FeedInteractions:
    """User actions against the feed, each applied optimistically to ``store``."""

    def __init__(
        self,
        store: FeedStore,
        gateway: FeedGateway,
        viewer: Viewer | None = None,
        *,
        resolver: LinkPreviewResolver | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.viewer = viewer
        self.resolver = resolver
        self.comment_drafts: dict[UUID, str] = {}
        self.editing: EditSession | None = None

    async def refetch(self) -> bool:
        return await refetch_feed(self.store, self.gateway)

    async def _run(self, action: OptimisticAction) -> None:
        action.apply()
        try:
            await action.commit()
        except Exception as exc:
            logger.warning("Remote mutation failed: %s", exc)
            await action.compensate()
            raise RemoteOperationError.wrap(exc, action.fallback_message) from exc
        if action.confirm is not None:
            await action.confirm()

    async def _notify(self, recipient_id: UUID, kind: NotificationKind, post_id: UUID) -> None:
        """Best-effort notification; failures are logged, never surfaced."""

        try:
            await self.gateway.create_notification(recipient_id, kind, post_id)
        except Exception:
            logger.warning("Could not create %s notification for post %s", kind, post_id, exc_info=True)

    def _require_viewer(self, message: str) -> Viewer:
        if self.viewer is None or self.viewer.profile is None:
            raise CapabilityError(message)
        return self.viewer

    def _require_post(self, post_id: UUID) -> PostResponse:
        post = self.store.get(post_id)
        if post is None:
            raise FeedValidationError("Post not found.")
        return post

    # Likes -----------------------------------------------------------------

    async def toggle_like(self, post_id: UUID) -> bool:
        """Flip the viewer's like on ``post_id``; returns whether the post is now liked."""

        viewer = self._require_viewer("Please sign in to like posts.")
        post = self._require_post(post_id)
        has_liked = post.liked_by(viewer.user_id)

        def apply() -> None:
            if has_liked:
                likes = [like for like in post.likes if like.user_id != viewer.user_id]
            else:
                synthesized = LikeResponse(
                    id=_temporary_id(),
                    post_id=post_id,
                    user_id=viewer.user_id,
                    created_at=_now(),
                )
                likes = [*post.likes, synthesized]
            self.store.patch(post_id, {"likes": likes})

        async def commit() -> None:
            if has_liked:
                await self.gateway.delete_like(post_id)
            else:
                await self.gateway.insert_like(post_id)

        async def confirm() -> None:
            if not has_liked and post.user_id != viewer.user_id:
                await self._notify(post.user_id, NotificationKind.LIKE, post_id)

        await self._run(
            OptimisticAction(
                apply=apply,
                commit=commit,
                compensate=self.refetch,
                confirm=confirm,
                fallback_message="Could not update like.",
            )
        )
        return not has_liked

    # Comments --------------------------------------------------------------

    def set_comment_draft(self, post_id: UUID, text: str) -> None:
        self.comment_drafts[post_id] = text

    async def add_comment(self, post_id: UUID, text: str | None = None) -> CommentResponse:
        """Append the comment locally, insert it, then refetch for the canonical row.

        Returns the synthesized comment. On failure only that comment is removed.
        """

        viewer = self._require_viewer("Please sign in and write a comment.")
        content = (text if text is not None else self.comment_drafts.get(post_id, "")).strip()
        if not content:
            raise FeedValidationError("Please write a comment.")
        post = self._require_post(post_id)

        synthesized = CommentResponse(
            id=_temporary_id(),
            post_id=post_id,
            user_id=viewer.user_id,
            content=content,
            created_at=_now(),
            profile=viewer.profile,
        )

        def apply() -> None:
            current = self.store.get(post_id)
            if current is not None:
                self.store.patch(post_id, {"comments": [*current.comments, synthesized]})
            self.comment_drafts[post_id] = ""

        async def commit() -> None:
            await self.gateway.insert_comment(post_id, content)

        async def compensate() -> None:
            current = self.store.get(post_id)
            if current is None:
                return
            remaining = [comment for comment in current.comments if comment.id != synthesized.id]
            self.store.patch(post_id, {"comments": remaining})

        async def confirm() -> None:
            if post.user_id != viewer.user_id:
                await self._notify(post.user_id, NotificationKind.COMMENT, post_id)
            await self.refetch()

        await self._run(
            OptimisticAction(
                apply=apply,
                commit=commit,
                compensate=compensate,
                confirm=confirm,
                fallback_message="Failed to add comment.",
            )
        )
        return synthesized

    # Delete ----------------------------------------------------------------

    def can_modify(self, post: PostResponse) -> bool:
        return self.viewer is not None and post.user_id == self.viewer.user_id

    async def delete_post(self, post_id: UUID) -> None:
        self._require_viewer("Please sign in to delete posts.")
        post = self._require_post(post_id)
        if not self.can_modify(post):
            raise CapabilityError("You can only delete your own posts.")

        await self._run(
            OptimisticAction(
                apply=lambda: self.store.remove(post_id),
                commit=lambda: self.gateway.delete_post(post_id),
                compensate=self.refetch,
                fallback_message="Failed to delete post.",
            )
        )

    # Edit ------------------------------------------------------------------

    async def begin_edit(self, post_id: UUID) -> EditSession:
        """Enter edit mode for ``post_id`` with the preview of its current first URL."""

        post = self._require_post(post_id)
        content = post.content or ""
        url = extract_first_url(content)
        preview = await resolve_link_preview(url, self.resolver) if url else None
        self.editing = EditSession(post_id=post_id, content=content, preview=preview)
        return self.editing

    def cancel_edit(self) -> None:
        self.editing = None

    async def edit_post(self, post_id: UUID, content: str, preview: LinkPreview | None = None) -> None:
        """Patch content and link fields locally, leave edit mode, then update the store.

        The local patch uses the supplied or edit-session preview when it matches
        the edited URL; otherwise link metadata is left empty until the preview
        resolves after the patch. Ownership is enforced by the store's
        (id, owner) predicate; a rejected update is discarded by refetching.
        """

        self._require_viewer("Please sign in to edit posts.")
        self._require_post(post_id)

        link_url = extract_first_url(content)
        if preview is None and self.editing is not None and self.editing.post_id == post_id:
            preview = self.editing.preview
        if link_url is None or (preview is not None and preview.url != link_url):
            preview = None
        fields = _update_fields(content, link_url, preview)

        def apply() -> None:
            self.store.patch(post_id, fields.model_dump())
            self.cancel_edit()

        async def commit() -> None:
            update = fields
            if link_url is not None and preview is None:
                resolved = await resolve_link_preview(link_url, self.resolver)
                update = _update_fields(content, link_url, resolved)
                self.store.patch(post_id, update.model_dump(exclude={"content"}))
            await self.gateway.update_post(post_id, update)

        await self._run(
            OptimisticAction(
                apply=apply,
                commit=commit,
                compensate=self.refetch,
                fallback_message="Failed to update post.",
            )
        )

    # Claims ----------------------------------------------------------------

    def _claim_block(self, post: PostResponse) -> ClaimDecision | None:
        viewer = self.viewer
        if viewer is None:
            return ClaimDecision(False, "You must be signed in to claim resources.")
        if not viewer.is_student:
            return ClaimDecision(False, "Only students can claim resources.")
        if not viewer.is_verified:
            return ClaimDecision(
                False,
                "You must be a verified student to claim resources. Please verify your profile.",
                redirect=VERIFICATION_REDIRECT,
            )
        if post.user_id == viewer.user_id:
            return ClaimDecision(False, "You cannot claim your own resource.")
        if post.post_type != PostType.DONATION:
            return ClaimDecision(False, "Only donated resources can be claimed.")
        return None

    def claim_resource(self, post_id: UUID) -> ClaimDecision:
        """Reveal the donor's contact details when every precondition holds.

        Preconditions are checked in order and the first failure is reported:
        signed in, student role, verified status, not the donor. Nothing is
        written to the store.
        """

        post = self._require_post(post_id)
        blocked = self._claim_block(post)
        if blocked is not None:
            return blocked
        return ClaimDecision(True, "Claim this resource", contact=post.resource_contact)

    def claim_hint(self, post: PostResponse) -> str:
        """Tooltip text for the claim button."""

        viewer = self.viewer
        if viewer is None:
            return "Sign in to claim resources"
        if not viewer.is_student:
            return "Only students can claim resources"
        if not viewer.is_verified:
            return "Verify your student profile to claim resources"
        if post.user_id == viewer.user_id:
            return "You cannot claim your own resource"
        return "Claim this resource"

    @property
    def can_post_seeking(self) -> bool:
        return self.viewer is not None and self.viewer.is_student


__all__ = [
    "ClaimDecision",
    "EditSession",
    "FeedInteractions",
    "OptimisticAction",
    "VERIFICATION_REDIRECT",
    "Viewer",
]
