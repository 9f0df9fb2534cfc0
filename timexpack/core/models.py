"""Core data models for commits and object identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import re
from typing import Any

from timexpack.core.types import ObjectId

_HEX_SHA_RE = re.compile(r"^[0-9a-f]{40}$")


def to_object_id(value: str | bytes) -> ObjectId:
    """Normalize a hex SHA (str or bytes) into an ObjectId."""
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError as error:
            raise ValueError(f"Object id is not ASCII hex: {value!r}") from error
    normalized = value.strip().lower()
    if not _HEX_SHA_RE.match(normalized):
        raise ValueError(f"Malformed object id: {value!r}")
    return ObjectId(normalized)


def short_id(object_id: ObjectId, length: int = 10) -> str:
    return object_id[:length]


@dataclass(frozen=True, slots=True)
class Commit:
    """Read-only projection of a stored commit object."""

    id: ObjectId
    parent_ids: tuple[ObjectId, ...]
    author: str
    timestamp: datetime
    title: str
    body: str | None = None

    @classmethod
    def from_message(
        cls,
        *,
        id: ObjectId,
        parent_ids: tuple[ObjectId, ...],
        author: str,
        timestamp: datetime,
        message: str,
    ) -> "Commit":
        title, body = split_commit_message(message)
        return cls(
            id=id,
            parent_ids=parent_ids,
            author=author,
            timestamp=timestamp,
            title=title,
            body=body,
        )

    @property
    def is_merge(self) -> bool:
        return len(self.parent_ids) > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_ids": list(self.parent_ids),
            "author": self.author,
            "timestamp": self.timestamp.isoformat(),
            "title": self.title,
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Commit":
        return cls(
            id=to_object_id(raw["id"]),
            parent_ids=tuple(to_object_id(parent) for parent in raw.get("parent_ids", [])),
            author=raw.get("author", ""),
            timestamp=datetime.fromisoformat(raw["timestamp"]),
            title=raw.get("title", ""),
            body=raw.get("body"),
        )


def split_commit_message(message: str) -> tuple[str, str | None]:
    """Split a commit message into its title line and optional body."""
    stripped = message.strip("\n")
    if not stripped:
        return "", None
    title, _, rest = stripped.partition("\n")
    body = rest.strip("\n").strip()
    return title.strip(), body or None


def timestamp_from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)
