"""Canonical object store adapter contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from timexpack.core.models import Commit
from timexpack.core.types import EntryKind, ObjectId

TreeHandle = ObjectId


@dataclass(frozen=True, slots=True)
class LineStats:
    """Inserted/removed line counts reported by the line-diff primitive."""

    insertions: int
    removals: int


@dataclass(frozen=True, slots=True)
class Addition:
    location: str
    entry_kind: EntryKind
    id: ObjectId


@dataclass(frozen=True, slots=True)
class Deletion:
    location: str
    entry_kind: EntryKind
    id: ObjectId


@dataclass(frozen=True, slots=True)
class Modification:
    location: str
    entry_kind: EntryKind
    id: ObjectId
    previous_id: ObjectId


@dataclass(frozen=True, slots=True)
class Rewrite:
    """A deletion+addition pair reclassified as a rename or copy."""

    location: str
    source_location: str
    copy: bool
    stats: LineStats | None = None


TreeChange = Union[Addition, Deletion, Modification, Rewrite]


class ObjectStoreAdapter(Protocol):
    """Protocol for read-only access to a content-addressed object store."""

    def resolve_reference_tips(self) -> list[ObjectId]:
        """Return the commit id every reference points at."""

    def resolve_head(self) -> ObjectId:
        """Return the commit id HEAD points at."""

    def resolve_revision(self, spec: str) -> ObjectId:
        """Resolve a revision string (hex, branch, tag, HEAD) to a commit id."""

    def resolve_commit(self, object_id: ObjectId) -> Commit:
        """Load a commit; missing ids and non-commit objects raise."""

    def resolve_tree(self, object_id: ObjectId) -> TreeHandle:
        """Peel a commit-like id to its root tree."""

    def diff_trees(self, old_tree: TreeHandle, new_tree: TreeHandle) -> list[TreeChange]:
        """Enumerate old->new tree changes with rewrite detection."""

    def diff_bytes(self, old: bytes, new: bytes) -> LineStats:
        """Count inserted and removed lines between two buffers."""

    def read_blob(self, object_id: ObjectId) -> bytes:
        """Return raw blob content."""
