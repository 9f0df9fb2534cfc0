"""Deduplicating breadth-first walk over a repository's commit graph."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator
import logging

from timexpack.core.types import ObjectId
from timexpack.store.base import ObjectStoreAdapter
from timexpack.walk.pairs import adjacent_pairs

logger = logging.getLogger(__name__)


class CommitGraphWalker:
    """Multi-source BFS over the commit graph.

    The queue is seeded with every reference tip (or explicit `tips`).
    Each commit id is yielded at most once. Emission order interleaves
    histories of different references generation by generation, so
    consecutive ids are not necessarily parent and child.

    The walk is lazy and not restartable. A resolution failure propagates
    out of the iteration step that hit it and ends the walk.
    """

    def __init__(
        self,
        store: ObjectStoreAdapter,
        *,
        tips: Iterable[ObjectId] | None = None,
    ) -> None:
        self._store = store
        seeds = store.resolve_reference_tips() if tips is None else list(tips)
        self._queue: deque[ObjectId] = deque(seeds)
        self._visited: set[ObjectId] = set()
        self._iterator = self._walk()
        logger.debug("commit walk seeded with %d tip(s)", len(seeds))

    @classmethod
    def from_head(cls, store: ObjectStoreAdapter) -> "CommitGraphWalker":
        return cls(store, tips=[store.resolve_head()])

    def __iter__(self) -> Iterator[ObjectId]:
        return self

    def __next__(self) -> ObjectId:
        return next(self._iterator)

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def visit(self, callback: Callable[[ObjectId], None]) -> None:
        for commit_id in self:
            callback(commit_id)

    def adjacent_pairs(self) -> Iterator[tuple[ObjectId, ObjectId]]:
        return adjacent_pairs(self)

    def _walk(self) -> Iterator[ObjectId]:
        while self._queue:
            commit_id = self._queue.popleft()
            if commit_id in self._visited:
                continue
            self._visited.add(commit_id)

            commit = self._store.resolve_commit(commit_id)
            for parent_id in commit.parent_ids:
                parent = self._store.resolve_commit(parent_id)
                self._queue.append(parent.id)
            yield commit_id

        logger.debug("commit walk finished after %d commit(s)", len(self._visited))
