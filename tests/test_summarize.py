from pathlib import Path
from typing import Any

import pytest
import requests

from repo_helpers import RepoBuilder
from timexpack.core.models import to_object_id
from timexpack.diff import CommitDiff, FileChange
from timexpack.report import (
    Project,
    SummarizationError,
    SummaryConfig,
    UserConfig,
    Workload,
    build_summary_prompt,
    generate_report,
    generate_workload,
    summarize_diffs,
)
from timexpack.report.summarize import SUMMARY_PROMPT


class _FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _completion(content: Any) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _diff() -> CommitDiff:
    return CommitDiff(
        old_commit=to_object_id("a" * 40),
        new_commit=to_object_id("b" * 40),
        changes=(FileChange(path="README", change_type="added", lines_added=1),),
    )


def test_summary_prompt_embeds_plain_diffs() -> None:
    prompt = build_summary_prompt([_diff()])

    assert prompt.startswith(SUMMARY_PROMPT)
    assert f"Commit diff {'a' * 40} -> {'b' * 40}" in prompt
    assert "+ README (changes: +1, -0)" in prompt
    assert "\x1b[" not in prompt


def test_summarize_posts_chat_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_post(url: str, *, headers: dict, json: dict, timeout: float) -> _FakeResponse:
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return _FakeResponse(_completion("Added a README."))

    monkeypatch.setattr(requests, "post", fake_post)
    config = SummaryConfig(api_key="sk-test", base_url="https://llm.example/", timeout_seconds=5)

    summary = summarize_diffs([_diff()], config)

    assert summary == "Added a README."
    assert captured["url"] == "https://llm.example/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer sk-test"
    assert captured["json"]["model"] == "gpt-4-turbo-preview"
    assert captured["json"]["messages"][0]["role"] == "user"
    assert captured["json"]["messages"][0]["content"].startswith(SUMMARY_PROMPT)
    assert captured["timeout"] == 5


def test_summarize_returns_empty_string_without_content() -> None:
    config = SummaryConfig(api_key="sk-test")

    summary = summarize_diffs(
        [],
        config,
        request_post=lambda *args, **kwargs: _FakeResponse(_completion(None)),
    )

    assert summary == ""


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse({}, status_code=500),
        _FakeResponse(ValueError("not json")),
        _FakeResponse({"choices": []}),
        _FakeResponse({"choices": [{"text": "legacy"}]}),
        _FakeResponse(["not", "an", "object"]),
    ],
)
def test_summarize_rejects_bad_responses(response: _FakeResponse) -> None:
    config = SummaryConfig(api_key="sk-test")

    with pytest.raises(SummarizationError):
        summarize_diffs([_diff()], config, request_post=lambda *args, **kwargs: response)


def test_summarize_wraps_transport_errors() -> None:
    def unreachable(*args: Any, **kwargs: Any) -> _FakeResponse:
        raise requests.ConnectionError("connection refused")

    with pytest.raises(SummarizationError, match="connection refused"):
        summarize_diffs([_diff()], SummaryConfig(api_key="sk-test"), request_post=unreachable)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"api_key": "  "},
        {"api_key": "sk", "model": ""},
        {"api_key": "sk", "timeout_seconds": 0},
    ],
)
def test_summary_config_validation(kwargs: dict) -> None:
    with pytest.raises(SummarizationError):
        SummaryConfig(**kwargs)


def _workload() -> Workload:
    return Workload(
        user=UserConfig(name="Ada Lovelace", email="ada@example.com"),
        projects=[Project(name="Engine", code="ENG", description="notes", git_url="repo")],
    )


def test_generate_workload_collects_diffs_per_project(
    disk_repo: tuple[Path, RepoBuilder],
) -> None:
    repo_path, builder = disk_repo
    root = builder.commit({"README": b"hello\n"}, message="root")
    builder.commit({"README": b"hello\nworld\n"}, parents=[root], ref="refs/heads/main")

    collected = generate_workload(_workload(), base_dir=repo_path.parent)

    [diff] = collected["Engine"]
    assert diff.old_commit != diff.new_commit
    assert diff.changes[0].path == "README"


def test_generate_report_summarizes_each_project(disk_repo: tuple[Path, RepoBuilder]) -> None:
    repo_path, builder = disk_repo
    root = builder.commit({"README": b"hello\n"}, message="root")
    builder.commit({"README": b"hello\nworld\n"}, parents=[root], ref="refs/heads/main")
    prompts: list[str] = []

    def fake_post(url: str, **kwargs: Any) -> _FakeResponse:
        prompts.append(kwargs["json"]["messages"][0]["content"])
        return _FakeResponse(_completion("Extended the README."))

    reports = generate_report(
        _workload(),
        SummaryConfig(api_key="sk-test"),
        base_dir=repo_path.parent,
        request_post=fake_post,
    )

    assert reports == {"Engine": "Extended the README."}
    assert "M README (changes: +0, -1)" in prompts[0]
