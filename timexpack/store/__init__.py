"""Object store adapter contract and the dulwich-backed implementation."""

from timexpack.store.base import (
    Addition,
    Deletion,
    LineStats,
    Modification,
    ObjectStoreAdapter,
    Rewrite,
    TreeChange,
    TreeHandle,
)
from timexpack.store.exceptions import (
    ObjectNotFoundError,
    ObjectStoreError,
    ObjectTypeError,
    ReferenceResolutionError,
    RepositoryNotFoundError,
    ResolutionError,
    StoreDiffError,
)
from timexpack.store.git import (
    DEFAULT_REWRITE_POLICY,
    GitObjectStore,
    RewritePolicy,
    open_object_store,
)

__all__ = [
    "ObjectStoreAdapter",
    "TreeHandle",
    "TreeChange",
    "Addition",
    "Deletion",
    "Modification",
    "Rewrite",
    "LineStats",
    "GitObjectStore",
    "RewritePolicy",
    "DEFAULT_REWRITE_POLICY",
    "open_object_store",
    "ObjectStoreError",
    "ResolutionError",
    "RepositoryNotFoundError",
    "ReferenceResolutionError",
    "ObjectNotFoundError",
    "ObjectTypeError",
    "StoreDiffError",
]
