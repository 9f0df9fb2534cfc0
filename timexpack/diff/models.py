"""Data models for commit-pair tree diffs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from timexpack.core.models import to_object_id
from timexpack.core.types import (
    CHANGE_TYPES,
    LINE_TYPES,
    REWRITE_CHANGE_TYPES,
    ChangeType,
    DiffLineType,
    ObjectId,
)


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single tagged line of file content."""

    line_type: DiffLineType
    content: str
    rendered: str | None = None

    def __post_init__(self) -> None:
        if self.line_type not in LINE_TYPES:
            raise ValueError(f"Unsupported line type: {self.line_type}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_type": self.line_type,
            "content": self.content,
            "rendered": self.rendered,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DiffLine":
        return cls(
            line_type=raw["line_type"],
            content=raw["content"],
            rendered=raw.get("rendered"),
        )


@dataclass(frozen=True, slots=True)
class FileChange:
    """File-level change between two trees."""

    path: str
    change_type: ChangeType
    lines_added: int = 0
    lines_removed: int = 0
    source_path: str | None = None
    diff_lines: tuple[DiffLine, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.change_type not in CHANGE_TYPES:
            raise ValueError(f"Unsupported change type: {self.change_type}")
        is_rewrite = self.change_type in REWRITE_CHANGE_TYPES
        if is_rewrite and self.source_path is None:
            raise ValueError(f"{self.change_type} change for {self.path} requires a source path")
        if not is_rewrite and self.source_path is not None:
            raise ValueError(f"{self.change_type} change for {self.path} cannot have a source path")

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "change_type": self.change_type,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "source_path": self.source_path,
            "diff_lines": [line.to_dict() for line in self.diff_lines],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FileChange":
        return cls(
            path=raw["path"],
            change_type=raw["change_type"],
            lines_added=int(raw.get("lines_added", 0)),
            lines_removed=int(raw.get("lines_removed", 0)),
            source_path=raw.get("source_path"),
            diff_lines=tuple(DiffLine.from_dict(line) for line in raw.get("diff_lines", [])),
        )


@dataclass(frozen=True, slots=True)
class CommitDiff:
    """Structured diff between the trees of two commits."""

    old_commit: ObjectId
    new_commit: ObjectId
    changes: tuple[FileChange, ...] = field(default_factory=tuple)

    @property
    def lines_added(self) -> int:
        return sum(change.lines_added for change in self.changes)

    @property
    def lines_removed(self) -> int:
        return sum(change.lines_removed for change in self.changes)

    def summary(self) -> dict[str, int]:
        counts = {change_type: 0 for change_type in CHANGE_TYPES}
        for change in self.changes:
            counts[change.change_type] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "old_commit": self.old_commit,
            "new_commit": self.new_commit,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "summary": self.summary(),
            "changes": [change.to_dict() for change in self.changes],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CommitDiff":
        return cls(
            old_commit=to_object_id(raw["old_commit"]),
            new_commit=to_object_id(raw["new_commit"]),
            changes=tuple(FileChange.from_dict(change) for change in raw.get("changes", [])),
        )
