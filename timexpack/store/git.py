"""Object store adapter backed by a local git repository (dulwich)."""

from __future__ import annotations

from dataclasses import dataclass
import difflib
import logging
from pathlib import Path
import stat

from dulwich.diff_tree import (
    CHANGE_ADD,
    CHANGE_COPY,
    CHANGE_DELETE,
    CHANGE_MODIFY,
    CHANGE_RENAME,
    RenameDetector,
    tree_changes,
)
from dulwich.errors import NotGitRepository
from dulwich.objects import S_ISGITLINK, Blob, ShaFile, Tag, Tree, TreeEntry
from dulwich.objects import Commit as GitCommit
from dulwich.objectspec import parse_commit
from dulwich.repo import BaseRepo, Repo

from timexpack.core.models import Commit, timestamp_from_epoch, to_object_id
from timexpack.core.types import EntryKind, ObjectId
from timexpack.store.base import (
    Addition,
    Deletion,
    LineStats,
    Modification,
    Rewrite,
    TreeChange,
    TreeHandle,
)
from timexpack.store.exceptions import (
    ObjectNotFoundError,
    ObjectTypeError,
    ReferenceResolutionError,
    RepositoryNotFoundError,
    StoreDiffError,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RewritePolicy:
    """Similarity policy used to reclassify delete+add pairs as renames/copies."""

    rename_threshold: int = 60
    max_files: int | None = 200
    find_copies_harder: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.rename_threshold <= 100:
            raise ValueError("rename_threshold must be between 0 and 100")
        if self.max_files is not None and self.max_files < 0:
            raise ValueError("max_files must be non-negative")


DEFAULT_REWRITE_POLICY = RewritePolicy()


class GitObjectStore:
    """Read-only adapter over a dulwich repository."""

    def __init__(
        self,
        repo: BaseRepo,
        *,
        rewrite_policy: RewritePolicy | None = DEFAULT_REWRITE_POLICY,
        owns_repo: bool = False,
    ) -> None:
        self._repo = repo
        self._rewrite_policy = rewrite_policy
        self._owns_repo = owns_repo

    def __enter__(self) -> "GitObjectStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_repo:
            self._repo.close()

    def resolve_reference_tips(self) -> list[ObjectId]:
        try:
            refs = self._repo.get_refs()
        except (OSError, KeyError, ValueError) as error:
            raise ReferenceResolutionError(f"Failed to enumerate references: {error}") from error

        tips: list[ObjectId] = []
        for name, sha in sorted(refs.items()):
            if not name.startswith(b"refs/"):
                continue
            try:
                target = self._peel(sha)
            except ObjectNotFoundError as error:
                raise ReferenceResolutionError(
                    f"Reference {name.decode('utf-8', 'replace')} points at a missing object"
                ) from error
            if not isinstance(target, GitCommit):
                logger.debug(
                    "skipping reference %s: target is a %s",
                    name.decode("utf-8", "replace"),
                    target.type_name.decode("ascii"),
                )
                continue
            tips.append(to_object_id(target.id))
        return tips

    def resolve_head(self) -> ObjectId:
        try:
            return to_object_id(self._repo.head())
        except KeyError as error:
            raise ReferenceResolutionError("HEAD does not point at a commit") from error

    def resolve_revision(self, spec: str) -> ObjectId:
        try:
            obj = parse_commit(self._repo, spec.encode("utf-8"))
        except (KeyError, ValueError) as error:
            raise ReferenceResolutionError(f"Unknown revision: {spec}") from error
        target = self._peel(obj.id)
        if not isinstance(target, GitCommit):
            raise ObjectTypeError(
                f"Revision {spec} names a {target.type_name.decode('ascii')}, not a commit"
            )
        return to_object_id(target.id)

    def resolve_commit(self, object_id: ObjectId) -> Commit:
        obj = self._load(object_id.encode("ascii"))
        if not isinstance(obj, GitCommit):
            raise ObjectTypeError(
                f"Object {object_id} is a {obj.type_name.decode('ascii')}, not a commit"
            )
        return Commit.from_message(
            id=object_id,
            parent_ids=tuple(to_object_id(parent) for parent in obj.parents),
            author=_author_name(obj.author),
            timestamp=timestamp_from_epoch(obj.commit_time),
            message=obj.message.decode("utf-8", "replace"),
        )

    def resolve_tree(self, object_id: ObjectId) -> TreeHandle:
        obj = self._peel(object_id.encode("ascii"))
        if isinstance(obj, GitCommit):
            obj = self._load(obj.tree)
        if not isinstance(obj, Tree):
            raise ObjectTypeError(
                f"Object {object_id} does not peel to a tree "
                f"(found {obj.type_name.decode('ascii')})"
            )
        return to_object_id(obj.id)

    def diff_trees(self, old_tree: TreeHandle, new_tree: TreeHandle) -> list[TreeChange]:
        detector = self._rename_detector()
        try:
            raw_changes = list(
                tree_changes(
                    self._repo.object_store,
                    old_tree.encode("ascii"),
                    new_tree.encode("ascii"),
                    rename_detector=detector,
                )
            )
        except KeyError as error:
            raise ObjectNotFoundError(
                f"Tree diff {old_tree}..{new_tree} references a missing object: {error}"
            ) from error
        except ValueError as error:
            raise StoreDiffError(f"Tree diff {old_tree}..{new_tree} failed: {error}") from error

        changes: list[TreeChange] = []
        for raw in raw_changes:
            if raw.type == CHANGE_ADD:
                changes.append(
                    Addition(
                        location=_path(raw.new),
                        entry_kind=_entry_kind(raw.new.mode),
                        id=to_object_id(raw.new.sha),
                    )
                )
            elif raw.type == CHANGE_DELETE:
                changes.append(
                    Deletion(
                        location=_path(raw.old),
                        entry_kind=_entry_kind(raw.old.mode),
                        id=to_object_id(raw.old.sha),
                    )
                )
            elif raw.type == CHANGE_MODIFY:
                changes.append(
                    Modification(
                        location=_path(raw.new),
                        entry_kind=_entry_kind(raw.new.mode),
                        id=to_object_id(raw.new.sha),
                        previous_id=to_object_id(raw.old.sha),
                    )
                )
            elif raw.type in (CHANGE_RENAME, CHANGE_COPY):
                changes.append(
                    Rewrite(
                        location=_path(raw.new),
                        source_location=_path(raw.old),
                        copy=raw.type == CHANGE_COPY,
                        stats=self._rewrite_stats(raw.old, raw.new),
                    )
                )
        return changes

    def diff_bytes(self, old: bytes, new: bytes) -> LineStats:
        matcher = difflib.SequenceMatcher(
            None,
            _split_lines(old),
            _split_lines(new),
            autojunk=False,
        )
        insertions = 0
        removals = 0
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag in ("replace", "delete"):
                removals += i2 - i1
            if tag in ("replace", "insert"):
                insertions += j2 - j1
        return LineStats(insertions=insertions, removals=removals)

    def read_blob(self, object_id: ObjectId) -> bytes:
        obj = self._load(object_id.encode("ascii"))
        if not isinstance(obj, Blob):
            raise ObjectTypeError(
                f"Object {object_id} is a {obj.type_name.decode('ascii')}, not a blob"
            )
        return obj.as_raw_string()

    def _rename_detector(self) -> RenameDetector | None:
        policy = self._rewrite_policy
        if policy is None:
            return None
        return RenameDetector(
            self._repo.object_store,
            rename_threshold=policy.rename_threshold,
            max_files=policy.max_files,
            find_copies_harder=policy.find_copies_harder,
        )

    def _rewrite_stats(self, old: TreeEntry, new: TreeEntry) -> LineStats | None:
        if _entry_kind(old.mode) not in ("blob", "symlink"):
            return None
        if _entry_kind(new.mode) not in ("blob", "symlink"):
            return None
        return self.diff_bytes(
            self.read_blob(to_object_id(old.sha)),
            self.read_blob(to_object_id(new.sha)),
        )

    def _load(self, sha: bytes) -> ShaFile:
        try:
            return self._repo.object_store[sha]
        except KeyError as error:
            raise ObjectNotFoundError(
                f"Object {sha.decode('ascii', 'replace')} not found"
            ) from error

    def _peel(self, sha: bytes) -> ShaFile:
        obj = self._load(sha)
        while isinstance(obj, Tag):
            _, target = obj.object
            obj = self._load(target)
        return obj


def open_object_store(
    path: str | Path,
    *,
    rewrite_policy: RewritePolicy | None = DEFAULT_REWRITE_POLICY,
) -> GitObjectStore:
    """Open the git repository at `path` as a read-only object store."""
    repo_path = Path(path).expanduser()
    try:
        repo = Repo(str(repo_path))
    except (NotGitRepository, FileNotFoundError, NotADirectoryError) as error:
        raise RepositoryNotFoundError(f"Not a git repository: {repo_path}") from error
    logger.debug("opened repository %s", repo_path)
    return GitObjectStore(repo, rewrite_policy=rewrite_policy, owns_repo=True)


def _entry_kind(mode: int) -> EntryKind:
    if S_ISGITLINK(mode):
        return "submodule"
    if stat.S_ISLNK(mode):
        return "symlink"
    if stat.S_ISDIR(mode):
        return "tree"
    return "blob"


def _path(entry: TreeEntry) -> str:
    return entry.path.decode("utf-8", "replace")


def _author_name(raw_author: bytes) -> str:
    author = raw_author.decode("utf-8", "replace")
    name, _, _ = author.partition(" <")
    return name.strip()


def _split_lines(data: bytes) -> list[bytes]:
    # same line boundaries as the engine's split_lines: "\n" only, trailing "\r" dropped
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return [line[:-1] if line.endswith(b"\r") else line for line in lines]
