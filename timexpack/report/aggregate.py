"""Per-project commit diff aggregation and summary reports."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from timexpack.diff.engine import iter_commit_diffs
from timexpack.diff.highlight import Highlighter
from timexpack.diff.models import CommitDiff
from timexpack.report.summarize import SummaryConfig, summarize_diffs
from timexpack.report.workload import Project, Workload
from timexpack.store.git import open_object_store

logger = logging.getLogger(__name__)


def walk_commit_diffs(
    repo_path: str | Path,
    *,
    highlighter: Highlighter | None = None,
) -> list[CommitDiff]:
    """Diff every adjacent pair of the all-reference walk of a repository."""
    with open_object_store(repo_path) as store:
        return list(iter_commit_diffs(store, highlighter=highlighter))


def project_repo_path(project: Project, base_dir: Path | None = None) -> Path:
    repo_path = Path(project.git_url).expanduser()
    if base_dir is not None and not repo_path.is_absolute():
        return base_dir / repo_path
    return repo_path


def generate_workload(
    workload: Workload,
    *,
    base_dir: Path | None = None,
    highlighter: Highlighter | None = None,
) -> dict[str, list[CommitDiff]]:
    all_diffs: dict[str, list[CommitDiff]] = {}
    for project in workload.projects:
        repo_path = project_repo_path(project, base_dir)
        diffs = walk_commit_diffs(repo_path, highlighter=highlighter)
        logger.debug("project %s: %d commit diff(s)", project.name, len(diffs))
        all_diffs[project.name] = diffs
    return all_diffs


def generate_report(
    workload: Workload,
    config: SummaryConfig,
    *,
    base_dir: Path | None = None,
    request_post: Callable[..., Any] | None = None,
) -> dict[str, str]:
    """Summarize each project's commit diffs."""
    reports: dict[str, str] = {}
    for project_name, diffs in generate_workload(workload, base_dir=base_dir).items():
        reports[project_name] = summarize_diffs(diffs, config, request_post=request_post)
    return reports
