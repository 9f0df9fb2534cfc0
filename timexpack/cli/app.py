from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version as package_version
from itertools import islice
import json
import logging
import os
from pathlib import Path
import sys
from typing import Any, NoReturn

import typer

from timexpack.diff import (
    DiffError,
    iter_commit_diffs,
    diff_commits,
    make_highlighter,
    render_commit,
    render_commit_diff,
    render_diff_summary,
)
from timexpack.diff.highlight import DEFAULT_STYLE, Highlighter
from timexpack.report import (
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    ReportError,
    SummaryConfig,
    generate_report,
    load_workload,
)
from timexpack.store import ObjectStoreError, open_object_store
from timexpack.walk import CommitGraphWalker, head_history

app = typer.Typer(help="timex CLI: commit graph walks and tree diffs")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()
_DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


def _resolve_cli_version() -> str:
    try:
        return package_version("timex")
    except PackageNotFoundError:
        from timexkit import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show timex version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log walker and diff progress to stderr.",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


def _echo(message: str, *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _fail(command: str, error: Exception, *, json_output: bool, **context: Any) -> NoReturn:
    message = f"{command} failed: {error}"
    if json_output:
        _echo_json(
            {
                "status": "error",
                "exit_code": 1,
                "message": message,
                **context,
            }
        )
    else:
        _echo(message, err=True)
    raise typer.Exit(code=1) from error


def _text_highlighter(*, json_output: bool, no_highlight: bool, style: str) -> Highlighter | None:
    if json_output or no_highlight or _OUTPUT_OPTIONS.no_color:
        return None
    return make_highlighter(style)


@app.command()
def commits(
    repo: Path = typer.Argument(..., help="Path to a local git repository."),
    limit: int | None = typer.Option(
        None,
        "--limit",
        min=1,
        help="Maximum number of commits to list.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable commit list.",
    ),
) -> None:
    """List commits reachable from HEAD with their metadata."""
    try:
        with open_object_store(repo) as store:
            history = list(islice(head_history(store), limit))
    except ObjectStoreError as error:
        _fail("commits", error, json_output=json_output, repo_path=str(repo))

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "repo_path": str(repo),
                "commits": [commit.to_dict() for commit in history],
            }
        )
        return

    color = not _OUTPUT_OPTIONS.no_color
    for commit in history:
        _echo(render_commit(commit, color=color))


@app.command()
def walk(
    repo: Path = typer.Argument(..., help="Path to a local git repository."),
    limit: int | None = typer.Option(
        None,
        "--limit",
        min=1,
        help="Maximum number of commit ids to emit.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable walk order.",
    ),
) -> None:
    """Print commit ids in all-reference breadth-first walk order."""
    try:
        with open_object_store(repo) as store:
            commit_ids = list(islice(CommitGraphWalker(store), limit))
    except ObjectStoreError as error:
        _fail("walk", error, json_output=json_output, repo_path=str(repo))

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "repo_path": str(repo),
                "commit_ids": commit_ids,
            }
        )
        return

    for commit_id in commit_ids:
        _echo(commit_id)


@app.command()
def diff(
    repo: Path = typer.Argument(..., help="Path to a local git repository."),
    old: str = typer.Argument(..., help="Old revision (hex id, branch, tag, HEAD)."),
    new: str = typer.Argument(..., help="New revision (hex id, branch, tag, HEAD)."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff output.",
    ),
    no_highlight: bool = typer.Option(
        False,
        "--no-highlight",
        help="Skip syntax highlighting of modified lines.",
    ),
    style: str = typer.Option(
        DEFAULT_STYLE,
        "--style",
        help="Pygments style used for syntax highlighting.",
    ),
) -> None:
    """Diff the trees of two revisions."""
    highlighter = _text_highlighter(json_output=json_output, no_highlight=no_highlight, style=style)
    try:
        with open_object_store(repo) as store:
            result = diff_commits(
                store,
                store.resolve_revision(old),
                store.resolve_revision(new),
                highlighter=highlighter,
            )
    except (ObjectStoreError, DiffError) as error:
        _fail("diff", error, json_output=json_output, repo_path=str(repo))

    if json_output:
        _echo_json(
            {
                **result.to_dict(),
                "status": "ok",
                "exit_code": 0,
                "repo_path": str(repo),
            }
        )
        return

    _echo(render_commit_diff(result, color=not _OUTPUT_OPTIONS.no_color))


@app.command()
def diffs(
    repo: Path = typer.Argument(..., help="Path to a local git repository."),
    limit: int | None = typer.Option(
        None,
        "--limit",
        min=1,
        help="Maximum number of commit pairs to diff.",
    ),
    summary_only: bool = typer.Option(
        False,
        "--summary",
        help="Print one summary line per commit pair.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff list.",
    ),
    no_highlight: bool = typer.Option(
        False,
        "--no-highlight",
        help="Skip syntax highlighting of modified lines.",
    ),
    style: str = typer.Option(
        DEFAULT_STYLE,
        "--style",
        help="Pygments style used for syntax highlighting.",
    ),
) -> None:
    """Diff every adjacent pair of the all-reference walk."""
    highlighter = (
        None
        if summary_only
        else _text_highlighter(json_output=json_output, no_highlight=no_highlight, style=style)
    )
    color = not _OUTPUT_OPTIONS.no_color
    collected: list[dict[str, Any]] = []
    try:
        with open_object_store(repo) as store:
            for result in islice(iter_commit_diffs(store, highlighter=highlighter), limit):
                if json_output:
                    collected.append(result.to_dict())
                elif summary_only:
                    _echo(render_diff_summary(result))
                else:
                    _echo(render_commit_diff(result, color=color))
    except (ObjectStoreError, DiffError) as error:
        _fail("diffs", error, json_output=json_output, repo_path=str(repo))

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "repo_path": str(repo),
                "diffs": collected,
            }
        )


@app.command()
def report(
    workload_path: Path = typer.Argument(..., help="Path to workload TOML config."),
    model: str = typer.Option(DEFAULT_MODEL, "--model", help="Chat completion model."),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL,
        "--base-url",
        help="Base URL of the OpenAI-compatible API.",
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="API key (defaults to the --api-key-env variable).",
    ),
    api_key_env: str = typer.Option(
        _DEFAULT_API_KEY_ENV,
        "--api-key-env",
        help="Environment variable holding the API key.",
    ),
    timeout_seconds: float = typer.Option(
        60.0,
        "--timeout",
        help="Summary request timeout in seconds.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable report.",
    ),
) -> None:
    """Summarize the work recorded in each workload project."""
    resolved_key = (api_key or os.getenv(api_key_env) or "").strip()
    try:
        if not resolved_key:
            raise ReportError(f"missing API key; set {api_key_env} or pass --api-key")
        workload = load_workload(workload_path)
        config = SummaryConfig(
            api_key=resolved_key,
            model=model,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        reports = generate_report(workload, config, base_dir=workload_path.resolve().parent)
    except FileNotFoundError as error:
        _fail(
            "report",
            ReportError(f"workload config not found: {error.filename or workload_path}"),
            json_output=json_output,
            workload_path=str(workload_path),
        )
    except (ReportError, ObjectStoreError, DiffError, OSError) as error:
        _fail("report", error, json_output=json_output, workload_path=str(workload_path))

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "workload_path": str(workload_path),
                "model": model,
                "reports": reports,
            }
        )
        return

    for project_name, summary in reports.items():
        _echo(f"== {project_name}")
        _echo(summary)


def main() -> None:
    app()
