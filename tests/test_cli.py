import json
from pathlib import Path
import re
from typing import Any

import pytest
import requests
from typer.testing import CliRunner

import timexkit
from repo_helpers import RepoBuilder
from timexpack.cli.app import app
from timexpack.core.types import ObjectId


def _history(builder: RepoBuilder) -> dict[str, ObjectId]:
    a = builder.commit({"README": b"hello\n"}, message="Initial import")
    b = builder.commit(
        {"README": b"hello\nworld\n", "src/app.py": b"print('hi')\n"},
        parents=[a],
        message="Add app\n\nFirst entry point.",
        ref="refs/heads/main",
    )
    return {"A": a, "B": b}


def test_cli_version_option_reports_package_version() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    reported = result.output.strip()
    assert re.fullmatch(r"\d+\.\d+\.\d+", reported) is not None
    assert reported == timexkit.__version__


def test_cli_walk_text_output(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["walk", str(repo_path)])

    assert result.exit_code == 0
    assert result.stdout.split() == [ids["B"], ids["A"]]


def test_cli_walk_json_and_limit(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["walk", str(repo_path), "--json", "--limit", "1"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["commit_ids"] == [ids["B"]]


def test_cli_commits_text_output(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["--no-color", "commits", str(repo_path)])

    assert result.exit_code == 0
    assert f"commit {ids['B']}" in result.stdout
    assert "Title: Add app" in result.stdout
    assert "Body: First entry point." in result.stdout
    assert "Author: Ada Lovelace" in result.stdout


def test_cli_commits_json_output(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["commits", str(repo_path), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert [commit["id"] for commit in payload["commits"]] == [ids["B"], ids["A"]]
    assert payload["commits"][0]["parent_ids"] == [ids["A"]]


def test_cli_diff_text_output(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["--no-color", "diff", str(repo_path), ids["A"], "main"])

    assert result.exit_code == 0
    assert f"Commit diff {ids['A']} -> {ids['B']}" in result.stdout
    assert "M README (changes: +1, -0)" in result.stdout
    assert "+ src/app.py (changes: +1, -0)" in result.stdout
    assert "\x1b[" not in result.stdout


def test_cli_diff_json_output(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["diff", str(repo_path), ids["A"], "HEAD", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["old_commit"] == ids["A"]
    assert payload["new_commit"] == ids["B"]
    assert payload["summary"]["added"] == 1
    assert payload["summary"]["modified"] == 1
    assert payload["lines_added"] == 2
    assert all(
        line["rendered"] is None
        for change in payload["changes"]
        for line in change["diff_lines"]
    )


def test_cli_diff_unknown_revision_fails(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    _history(builder)

    result = CliRunner().invoke(app, ["diff", str(repo_path), "nope", "HEAD", "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "error"
    assert payload["message"].startswith("diff failed:")
    assert payload["repo_path"] == str(repo_path)


def test_cli_diffs_summary_lines(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    ids = _history(builder)

    result = CliRunner().invoke(app, ["diffs", str(repo_path), "--summary"])

    assert result.exit_code == 0
    assert result.stdout.strip() == (
        f"old={ids['B']} new={ids['A']} files=2 added=0 deleted=1 "
        "modified=1 renamed=0 copied=0 lines=+0/-2"
    )


def test_cli_diffs_json_output(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    _history(builder)

    result = CliRunner().invoke(app, ["diffs", str(repo_path), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert len(payload["diffs"]) == 1
    assert payload["diffs"][0]["lines_removed"] == 2


def test_cli_quiet_suppresses_text(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    _history(builder)

    result = CliRunner().invoke(app, ["--quiet", "walk", str(repo_path)])

    assert result.exit_code == 0
    assert result.stdout == ""


def test_cli_reports_missing_repository(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["walk", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "walk failed: Not a git repository" in result.output


def _write_workload(tmp_path: Path) -> Path:
    path = tmp_path / "workload.toml"
    path.write_text(
        "\n".join(
            [
                "[user]",
                'name = "Ada Lovelace"',
                'email = "ada@example.com"',
                "",
                "[[projects]]",
                'name = "Engine"',
                'code = "ENG"',
                'description = "notes"',
                'git_url = "repo"',
                "",
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_cli_report_summarizes_projects(
    disk_repo: tuple[Path, RepoBuilder],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    repo_path, builder = disk_repo
    _history(builder)
    workload_path = _write_workload(repo_path.parent)
    seen: dict[str, Any] = {}

    class _Response:
        def raise_for_status(self) -> None:
            return None

        def json(self) -> dict[str, Any]:
            return {"choices": [{"message": {"content": "Built the engine."}}]}

    def fake_post(url: str, **kwargs: Any) -> _Response:
        seen["url"] = url
        seen["model"] = kwargs["json"]["model"]
        return _Response()

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(requests, "post", fake_post)

    result = CliRunner().invoke(
        app,
        ["report", str(workload_path), "--model", "gpt-4o-mini", "--json"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["reports"] == {"Engine": "Built the engine."}
    assert seen == {
        "url": "https://api.openai.com/v1/chat/completions",
        "model": "gpt-4o-mini",
    }

    text = CliRunner().invoke(app, ["report", str(workload_path)])
    assert text.exit_code == 0
    assert text.stdout.splitlines() == ["== Engine", "Built the engine."]


def test_cli_report_requires_api_key(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    workload_path = _write_workload(tmp_path)

    result = CliRunner().invoke(app, ["report", str(workload_path)])

    assert result.exit_code == 1
    assert "report failed: missing API key; set OPENAI_API_KEY" in result.output


def test_cli_report_missing_workload(tmp_path: Path) -> None:
    missing = tmp_path / "absent.toml"

    result = CliRunner().invoke(app, ["report", str(missing), "--api-key", "sk", "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["message"] == f"report failed: workload config not found: {missing}"


def test_cli_report_workload_directory_fails_cleanly(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["report", str(tmp_path), "--api-key", "sk", "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "error"
    assert payload["message"].startswith("report failed: Cannot read workload config")
    assert payload["workload_path"] == str(tmp_path)
