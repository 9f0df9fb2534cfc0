"""Diff subsystem for timex."""

from timexpack.diff.engine import TreeDiffEngine, diff_commits, iter_commit_diffs, split_lines
from timexpack.diff.exceptions import DiffError, UnsupportedChangeError
from timexpack.diff.formatting import (
    render_commit,
    render_commit_diff,
    render_diff_line,
    render_diff_summary,
    render_file_change,
)
from timexpack.diff.highlight import Highlighter, highlight, make_highlighter
from timexpack.diff.models import CommitDiff, DiffLine, FileChange

__all__ = [
    "CommitDiff",
    "FileChange",
    "DiffLine",
    "TreeDiffEngine",
    "diff_commits",
    "iter_commit_diffs",
    "split_lines",
    "DiffError",
    "UnsupportedChangeError",
    "Highlighter",
    "highlight",
    "make_highlighter",
    "render_commit",
    "render_commit_diff",
    "render_diff_line",
    "render_diff_summary",
    "render_file_change",
]
