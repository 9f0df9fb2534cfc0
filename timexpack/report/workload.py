"""Workload configuration: the user and the projects to report on."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import tomllib
from typing import Any

from timexpack.report.exceptions import WorkloadConfigError

_PROJECT_FIELDS = ("name", "code", "description", "git_url")


@dataclass(frozen=True, slots=True)
class UserConfig:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Project:
    name: str
    code: str
    description: str
    git_url: str


@dataclass(slots=True)
class Workload:
    """Parsed workload file."""

    user: UserConfig
    projects: list[Project] = field(default_factory=list)

    def project_names(self) -> list[str]:
        return [project.name for project in self.projects]


def workload_from_config(raw: dict[str, Any], *, source: str = "<memory>") -> Workload:
    user_raw = raw.get("user")
    if not isinstance(user_raw, dict):
        raise WorkloadConfigError(f"Workload config requires a [user] table ({source}).")
    try:
        user = UserConfig(name=str(user_raw["name"]), email=str(user_raw["email"]))
    except KeyError as error:
        raise WorkloadConfigError(
            f"Workload [user] is missing '{error.args[0]}' ({source})."
        ) from error

    projects_raw = raw.get("projects", [])
    if not isinstance(projects_raw, list):
        raise WorkloadConfigError(f"Workload 'projects' must be an array of tables ({source}).")

    projects: list[Project] = []
    for index, entry in enumerate(projects_raw):
        if not isinstance(entry, dict):
            raise WorkloadConfigError(f"Workload project #{index} must be a table ({source}).")
        missing = [name for name in _PROJECT_FIELDS if name not in entry]
        if missing:
            raise WorkloadConfigError(
                f"Workload project #{index} is missing {', '.join(missing)} ({source})."
            )
        projects.append(Project(**{name: str(entry[name]) for name in _PROJECT_FIELDS}))

    return Workload(user=user, projects=projects)


def load_workload(path: str | Path) -> Workload:
    """Load workload config from a TOML file."""
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as error:
        raise WorkloadConfigError(f"Cannot read workload config ({config_path}): {error}") from error

    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as error:
        raise WorkloadConfigError(f"Invalid workload TOML ({config_path}): {error}") from error

    return workload_from_config(raw, source=str(config_path))
