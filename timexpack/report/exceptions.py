"""Report subsystem exceptions."""


class ReportError(Exception):
    """Base class for workload report errors."""


class WorkloadConfigError(ReportError):
    """Workload TOML config is malformed or incomplete."""


class SummarizationError(ReportError):
    """Chat completion request failed or returned an unexpected shape."""
