"""Terminal and plain-text rendering for commit diffs."""

from __future__ import annotations

import typer

from timexpack.core.models import Commit
from timexpack.diff.models import CommitDiff, DiffLine, FileChange

_CHANGE_MARKERS = {
    "added": ("+", "green"),
    "deleted": ("-", "red"),
    "modified": ("M", "yellow"),
    "renamed": ("R", "blue"),
    "copied": ("C", "cyan"),
}

_LINE_PREFIXES = {
    "added": ("+", "green"),
    "removed": ("-", "red"),
    "context": (" ", None),
}


def _style(text: str, fg: str | None, *, color: bool) -> str:
    if not color or fg is None:
        return text
    return typer.style(text, fg=fg)


def render_diff_line(line: DiffLine, *, color: bool = True) -> str:
    prefix, fg = _LINE_PREFIXES[line.line_type]
    if color and line.rendered is not None:
        content = line.rendered
    else:
        content = _style(line.content, fg, color=color)
    return f"{_style(prefix, fg, color=color)} {content}"


def render_file_change(change: FileChange, *, color: bool = True) -> str:
    marker, fg = _CHANGE_MARKERS[change.change_type]
    header = f"{_style(marker, fg, color=color)} {_style(change.path, 'bright_white', color=color)} "
    if change.source_path is not None:
        header += f"(from: {_style(change.source_path, 'bright_black', color=color)}) "
    header += (
        f"({_style('changes:', 'bright_black', color=color)} "
        f"+{_style(str(change.lines_added), 'green', color=color)}, "
        f"-{_style(str(change.lines_removed), 'red', color=color)})"
    )

    lines = [header]
    lines.extend(render_diff_line(line, color=color) for line in change.diff_lines)
    lines.append("")
    return "\n".join(lines)


def render_commit_diff(diff: CommitDiff, *, color: bool = True) -> str:
    lines = [
        "Commit diff "
        f"{_style(diff.old_commit, 'bright_yellow', color=color)} -> "
        f"{_style(diff.new_commit, 'bright_yellow', color=color)}"
    ]
    lines.extend(render_file_change(change, color=color) for change in diff.changes)
    return "\n".join(lines)


def render_diff_summary(diff: CommitDiff) -> str:
    summary = diff.summary()
    return (
        f"old={diff.old_commit} new={diff.new_commit} "
        f"files={len(diff.changes)} added={summary['added']} deleted={summary['deleted']} "
        f"modified={summary['modified']} renamed={summary['renamed']} copied={summary['copied']} "
        f"lines=+{diff.lines_added}/-{diff.lines_removed}"
    )


def render_commit(commit: Commit, *, color: bool = True) -> str:
    lines = [f"{_style('commit', 'bright_yellow', color=color)} {commit.id}"]
    if commit.author:
        lines.append(f"{_style('Author', 'bright_blue', color=color)}: {commit.author}")
    lines.append(f"{_style('Date', 'bright_blue', color=color)}: {commit.timestamp.isoformat()}")
    if commit.title:
        lines.append(
            f"{_style('Title', 'bright_blue', color=color)}: "
            f"{_style(commit.title, 'bright_green', color=color)}"
        )
    if commit.body:
        lines.append(
            f"{_style('Body', 'bright_blue', color=color)}: "
            f"{_style(commit.body, 'bright_green', color=color)}"
        )
    lines.append("")
    return "\n".join(lines)
