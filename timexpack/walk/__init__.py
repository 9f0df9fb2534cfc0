"""Commit graph traversal and pair sequencing."""

from timexpack.walk.graph import CommitGraphWalker
from timexpack.walk.history import head_history
from timexpack.walk.pairs import adjacent_pairs

__all__ = [
    "CommitGraphWalker",
    "adjacent_pairs",
    "head_history",
]
