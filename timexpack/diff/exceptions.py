"""Diff subsystem exceptions."""


class DiffError(Exception):
    """Base class for commit-pair diff errors."""


class UnsupportedChangeError(DiffError):
    """Tree diff produced a change variant the engine cannot classify."""
