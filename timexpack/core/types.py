"""Type definitions for timex core models."""

from typing import Literal, NewType

ObjectId = NewType("ObjectId", str)

ChangeType = Literal[
    "added",
    "deleted",
    "modified",
    "renamed",
    "copied",
]

CHANGE_TYPES: tuple[str, ...] = (
    "added",
    "deleted",
    "modified",
    "renamed",
    "copied",
)

REWRITE_CHANGE_TYPES: tuple[str, ...] = ("renamed", "copied")

DiffLineType = Literal["added", "removed", "context"]

LINE_TYPES: tuple[str, ...] = ("added", "removed", "context")

EntryKind = Literal["blob", "symlink", "tree", "submodule"]

ENTRY_KINDS: tuple[str, ...] = ("blob", "symlink", "tree", "submodule")
