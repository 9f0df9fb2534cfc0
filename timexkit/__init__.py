"""Stable public API surface for timex.

This module is the supported import path for library users.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from timexpack.core.models import Commit
from timexpack.core.types import ObjectId
from timexpack.diff import CommitDiff, DiffLine, FileChange, iter_commit_diffs
from timexpack.diff import diff_commits as _diff_commits
from timexpack.diff import render_commit_diff
from timexpack.diff.highlight import Highlighter
from timexpack.store import (
    DEFAULT_REWRITE_POLICY,
    GitObjectStore,
    RewritePolicy,
    open_object_store,
)
from timexpack.walk import CommitGraphWalker, adjacent_pairs, head_history

__version__ = "0.1.0"


def walk(path: str | Path) -> list[ObjectId]:
    """Return every commit id reachable from any reference, in walk order."""
    with open_object_store(path) as store:
        return list(CommitGraphWalker(store))


def commits(path: str | Path) -> list[Commit]:
    """Return commit metadata for the history reachable from HEAD."""
    with open_object_store(path) as store:
        return list(head_history(store))


def diff(
    path: str | Path,
    old: str,
    new: str,
    *,
    highlighter: Highlighter | None = None,
) -> CommitDiff:
    """Diff two revisions (hex ids, branch or tag names, HEAD)."""
    with open_object_store(path) as store:
        return _diff_commits(
            store,
            store.resolve_revision(old),
            store.resolve_revision(new),
            highlighter=highlighter,
        )


def diffs(
    path: str | Path,
    *,
    highlighter: Highlighter | None = None,
    rewrite_policy: RewritePolicy | None = DEFAULT_REWRITE_POLICY,
) -> Iterator[CommitDiff]:
    """Lazily diff every adjacent pair of the all-reference walk.

    The repository stays open until the iterator is exhausted or closed.
    `rewrite_policy=None` disables rename and copy detection.
    """
    with open_object_store(path, rewrite_policy=rewrite_policy) as store:
        yield from iter_commit_diffs(store, highlighter=highlighter)


__all__ = [
    "__version__",
    "Commit",
    "CommitDiff",
    "FileChange",
    "DiffLine",
    "ObjectId",
    "GitObjectStore",
    "RewritePolicy",
    "CommitGraphWalker",
    "adjacent_pairs",
    "walk",
    "commits",
    "diff",
    "diffs",
    "render_commit_diff",
]
