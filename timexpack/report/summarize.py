"""Summarize commit diffs with an OpenAI-compatible chat completion API."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from typing import Any, Callable

import requests

from timexpack.diff.formatting import render_commit_diff
from timexpack.diff.models import CommitDiff
from timexpack.report.exceptions import SummarizationError

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "Please analyze these git commits and write a brief summary of the work done:\n"
)
DEFAULT_MODEL = "gpt-4-turbo-preview"
DEFAULT_BASE_URL = "https://api.openai.com"


@dataclass(slots=True)
class SummaryConfig:
    """Connection and model settings for summarization."""

    api_key: str
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 60.0

    def __post_init__(self) -> None:
        if not self.api_key.strip():
            raise SummarizationError("An API key is required for summarization.")
        if not self.model.strip():
            raise SummarizationError("A model name is required for summarization.")
        if self.timeout_seconds <= 0:
            raise SummarizationError("timeout_seconds must be positive.")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/chat/completions"


def build_summary_prompt(diffs: Iterable[CommitDiff]) -> str:
    descriptions = "".join(f"{render_commit_diff(diff, color=False)}\n" for diff in diffs)
    return f"{SUMMARY_PROMPT}{descriptions}"


def summarize_diffs(
    diffs: Iterable[CommitDiff],
    config: SummaryConfig,
    *,
    request_post: Callable[..., Any] | None = None,
) -> str:
    """Return the model's summary of `diffs` (empty when no content comes back)."""
    prompt = build_summary_prompt(diffs)
    payload = {
        "model": config.model,
        "messages": [{"role": "user", "content": prompt}],
    }
    headers = {
        "Authorization": f"Bearer {config.api_key}",
        "Content-Type": "application/json",
    }
    post_fn = request_post or requests.post

    logger.debug("requesting summary from %s (%d prompt chars)", config.endpoint, len(prompt))
    try:
        response = post_fn(
            config.endpoint,
            headers=headers,
            json=payload,
            timeout=config.timeout_seconds,
        )
        response.raise_for_status()
        body = response.json()
    except requests.RequestException as error:
        raise SummarizationError(f"Summary request failed: {error}") from error
    except ValueError as error:
        raise SummarizationError(f"Summary response is not valid JSON: {error}") from error

    return _first_choice_content(body)


def _first_choice_content(body: Any) -> str:
    if not isinstance(body, dict):
        raise SummarizationError("Summary response must be a JSON object.")
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        raise SummarizationError("Summary response has no choices.")
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise SummarizationError("Summary response choice has no message.")
    content = message.get("content")
    return content if isinstance(content, str) else ""
