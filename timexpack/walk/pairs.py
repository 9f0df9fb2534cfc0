"""Adjacent-pair sequencing over a lazy stream."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

T = TypeVar("T")

_UNSET = object()


def adjacent_pairs(items: Iterable[T]) -> Iterator[tuple[T, T]]:
    """Yield `(previous, current)` for each consecutive pair of items.

    `[a, b, c]` yields `(a, b)` then `(b, c)`; fewer than two items yield
    nothing. Errors raised while pulling `items` propagate unchanged.
    """
    previous: object = _UNSET
    for current in items:
        if previous is not _UNSET:
            yield previous, current  # type: ignore[misc]
        previous = current
