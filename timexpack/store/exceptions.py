"""Object store subsystem exceptions."""


class ObjectStoreError(Exception):
    """Base class for object store errors."""


class ResolutionError(ObjectStoreError):
    """A reference, commit, tree, or blob lookup failed."""


class RepositoryNotFoundError(ResolutionError):
    """Path does not hold a readable git repository."""


class ReferenceResolutionError(ResolutionError):
    """References could not be enumerated or a revision could not be parsed."""


class ObjectNotFoundError(ResolutionError):
    """Object id is missing from the object store."""


class ObjectTypeError(ResolutionError):
    """Object exists but has the wrong type for the requested operation."""


class StoreDiffError(ObjectStoreError):
    """Tree-to-tree or byte-level diff enumeration failed."""
