"""Commit metadata listing for the history reachable from HEAD."""

from __future__ import annotations

from collections.abc import Iterator

from timexpack.core.models import Commit
from timexpack.store.base import ObjectStoreAdapter
from timexpack.walk.graph import CommitGraphWalker


def head_history(store: ObjectStoreAdapter) -> Iterator[Commit]:
    """Yield every commit reachable from HEAD in breadth-first order."""
    for commit_id in CommitGraphWalker.from_head(store):
        yield store.resolve_commit(commit_id)
