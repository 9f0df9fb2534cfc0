"""Tree diff engine producing per-file, per-line change records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import logging

from timexpack.core.models import short_id
from timexpack.core.types import DiffLineType, ObjectId
from timexpack.diff.exceptions import UnsupportedChangeError
from timexpack.diff.highlight import Highlighter, highlight
from timexpack.diff.models import CommitDiff, DiffLine, FileChange
from timexpack.store.base import (
    Addition,
    Deletion,
    Modification,
    ObjectStoreAdapter,
    Rewrite,
    TreeChange,
)
from timexpack.walk.graph import CommitGraphWalker
from timexpack.walk.pairs import adjacent_pairs

logger = logging.getLogger(__name__)

_CONTENT_KINDS = ("blob", "symlink")


def diff_commits(
    store: ObjectStoreAdapter,
    old_commit: ObjectId,
    new_commit: ObjectId,
    *,
    highlighter: Highlighter | None = highlight,
) -> CommitDiff:
    """Diff the trees of two commits.

    Change order follows the store's tree-diff enumeration. Submodule and
    tree entries are skipped, as are symlink modifications. Any resolution
    or diff error aborts the whole pair; no partial result is returned.
    """
    old_tree = store.resolve_tree(old_commit)
    new_tree = store.resolve_tree(new_commit)

    changes: list[FileChange] = []
    for tree_change in store.diff_trees(old_tree, new_tree):
        file_change = _file_change(store, tree_change, highlighter=highlighter)
        if file_change is not None:
            changes.append(file_change)

    logger.debug(
        "diffed %s..%s: %d file change(s)",
        short_id(old_commit),
        short_id(new_commit),
        len(changes),
    )
    return CommitDiff(old_commit=old_commit, new_commit=new_commit, changes=tuple(changes))


class TreeDiffEngine:
    """Binds a store and highlighter for repeated commit-pair diffs."""

    def __init__(
        self,
        store: ObjectStoreAdapter,
        *,
        highlighter: Highlighter | None = highlight,
    ) -> None:
        self.store = store
        self.highlighter = highlighter

    def diff(self, old_commit: ObjectId, new_commit: ObjectId) -> CommitDiff:
        return diff_commits(self.store, old_commit, new_commit, highlighter=self.highlighter)

    def diff_pairs(self, pairs: Iterable[tuple[ObjectId, ObjectId]]) -> Iterator[CommitDiff]:
        for old_commit, new_commit in pairs:
            yield self.diff(old_commit, new_commit)


def iter_commit_diffs(
    store: ObjectStoreAdapter,
    walker: Iterable[ObjectId] | None = None,
    *,
    highlighter: Highlighter | None = highlight,
) -> Iterator[CommitDiff]:
    """Lazily diff every adjacent pair of the walk (all references by default)."""
    commit_ids = CommitGraphWalker(store) if walker is None else walker
    engine = TreeDiffEngine(store, highlighter=highlighter)
    return engine.diff_pairs(adjacent_pairs(commit_ids))


def split_lines(data: bytes) -> list[str]:
    """Decode blob content and split it into lines without terminators."""
    text = data.decode("utf-8", "replace")
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _file_change(
    store: ObjectStoreAdapter,
    change: TreeChange,
    *,
    highlighter: Highlighter | None,
) -> FileChange | None:
    if isinstance(change, Addition):
        if change.entry_kind not in _CONTENT_KINDS:
            logger.debug("skipping added %s entry %s", change.entry_kind, change.location)
            return None
        lines = split_lines(store.read_blob(change.id))
        return FileChange(
            path=change.location,
            change_type="added",
            lines_added=len(lines),
            lines_removed=0,
            diff_lines=_tagged(lines, "added"),
        )

    if isinstance(change, Deletion):
        if change.entry_kind not in _CONTENT_KINDS:
            logger.debug("skipping deleted %s entry %s", change.entry_kind, change.location)
            return None
        lines = split_lines(store.read_blob(change.id))
        return FileChange(
            path=change.location,
            change_type="deleted",
            lines_added=0,
            lines_removed=len(lines),
            diff_lines=_tagged(lines, "removed"),
        )

    if isinstance(change, Modification):
        if change.entry_kind != "blob":
            logger.debug("skipping modified %s entry %s", change.entry_kind, change.location)
            return None
        old_data = store.read_blob(change.previous_id)
        new_data = store.read_blob(change.id)
        stats = store.diff_bytes(old_data, new_data)
        diff_lines = _tagged(
            split_lines(old_data), "removed", path=change.location, highlighter=highlighter
        ) + _tagged(split_lines(new_data), "added", path=change.location, highlighter=highlighter)
        return FileChange(
            path=change.location,
            change_type="modified",
            lines_added=stats.insertions,
            lines_removed=stats.removals,
            diff_lines=diff_lines,
        )

    if isinstance(change, Rewrite):
        # line reconstruction for renames and copies is not attempted
        return FileChange(
            path=change.location,
            change_type="copied" if change.copy else "renamed",
            lines_added=change.stats.insertions if change.stats is not None else 0,
            lines_removed=change.stats.removals if change.stats is not None else 0,
            source_path=change.source_location,
        )

    raise UnsupportedChangeError(f"Unsupported tree change: {change!r}")


def _tagged(
    lines: list[str],
    line_type: DiffLineType,
    *,
    path: str | None = None,
    highlighter: Highlighter | None = None,
) -> tuple[DiffLine, ...]:
    return tuple(
        DiffLine(
            line_type=line_type,
            content=line,
            rendered=_annotate(line, path, highlighter),
        )
        for line in lines
    )


def _annotate(line: str, path: str | None, highlighter: Highlighter | None) -> str | None:
    if highlighter is None or path is None:
        return None
    try:
        return highlighter(line, path)
    except Exception as error:
        # highlighting failures degrade to plain content
        logger.debug("highlight failed for %s: %s", path, error)
        return None
