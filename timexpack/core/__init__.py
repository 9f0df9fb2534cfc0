"""Core models and identifier primitives for timex."""

from timexpack.core.models import (
    Commit,
    short_id,
    split_commit_message,
    timestamp_from_epoch,
    to_object_id,
)
from timexpack.core.types import (
    CHANGE_TYPES,
    ENTRY_KINDS,
    LINE_TYPES,
    REWRITE_CHANGE_TYPES,
    ChangeType,
    DiffLineType,
    EntryKind,
    ObjectId,
)

__all__ = [
    "Commit",
    "ObjectId",
    "ChangeType",
    "DiffLineType",
    "EntryKind",
    "CHANGE_TYPES",
    "REWRITE_CHANGE_TYPES",
    "LINE_TYPES",
    "ENTRY_KINDS",
    "short_id",
    "split_commit_message",
    "timestamp_from_epoch",
    "to_object_id",
]
