"""Workload reports: per-project diff aggregation and summarization."""

from timexpack.report.aggregate import (
    generate_report,
    generate_workload,
    project_repo_path,
    walk_commit_diffs,
)
from timexpack.report.exceptions import ReportError, SummarizationError, WorkloadConfigError
from timexpack.report.summarize import (
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    SummaryConfig,
    build_summary_prompt,
    summarize_diffs,
)
from timexpack.report.workload import (
    Project,
    UserConfig,
    Workload,
    load_workload,
    workload_from_config,
)

__all__ = [
    "Project",
    "UserConfig",
    "Workload",
    "load_workload",
    "workload_from_config",
    "SummaryConfig",
    "DEFAULT_MODEL",
    "DEFAULT_BASE_URL",
    "build_summary_prompt",
    "summarize_diffs",
    "walk_commit_diffs",
    "generate_workload",
    "generate_report",
    "project_repo_path",
    "ReportError",
    "WorkloadConfigError",
    "SummarizationError",
]
