"""Error taxonomy surfaced by feed operations."""
from __future__ import annotations


class FeedError(RuntimeError):
    """Base class for every error a feed operation surfaces to its caller."""


class FeedValidationError(FeedError):
    """A required field is missing; raised before any remote call."""


class CapabilityError(FeedError):
    """The viewer lacks a precondition (sign-in, role, verification, ownership)."""

    def __init__(self, message: str, *, redirect: str | None = None) -> None:
        super().__init__(message)
        self.redirect = redirect


class RemoteOperationError(FeedError):
    """The data store rejected a query or mutation."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def wrap(cls, exc: BaseException, fallback: str) -> "RemoteOperationError":
        """Keep the store's message when it has one, otherwise use ``fallback``."""

        if isinstance(exc, RemoteOperationError):
            return cls(str(exc) or fallback, status_code=exc.status_code)
        return cls(str(exc) or fallback)


__all__ = ["FeedError", "FeedValidationError", "CapabilityError", "RemoteOperationError"]
