"""Schemas for row-level change events pushed to feed subscribers."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..constants import ChangeKind, FeedTable


class ChangeEvent(BaseModel):
    """One row change on a feed table.

    ``row`` holds the new column values for inserts and updates; ``old`` holds
    the previous values (at least the primary key) for updates and deletes.
    """

    table: FeedTable
    event: ChangeKind
    row: dict[str, Any] | None = None
    old: dict[str, Any] | None = None


__all__ = ["ChangeEvent"]
