"""Syntax highlighting of single source lines for terminal display."""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from pathlib import PurePosixPath

from pygments import highlight as pygments_highlight
from pygments.formatter import Formatter
from pygments.formatters import TerminalTrueColorFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

Highlighter = Callable[[str, str], "str | None"]

DEFAULT_STYLE = "monokai"


@lru_cache(maxsize=256)
def _lexer_for(file_name: str) -> Lexer:
    try:
        return get_lexer_for_filename(file_name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False, ensurenl=False)


@lru_cache(maxsize=8)
def _formatter_for(style: str) -> Formatter:
    return TerminalTrueColorFormatter(style=style)


def highlight(line: str, path: str, *, style: str = DEFAULT_STYLE) -> str | None:
    """Return `line` with ANSI true-color escapes, or None when unavailable.

    The lexer is picked from the file name of `path`; unknown names fall
    back to plain text. Lexers and formatters are cached for the process
    lifetime.
    """
    try:
        formatter = _formatter_for(style)
    except ClassNotFound:
        return None
    lexer = _lexer_for(PurePosixPath(path).name)
    return pygments_highlight(line, lexer, formatter).rstrip("\n")


def make_highlighter(style: str) -> Highlighter:
    def _highlight(line: str, path: str) -> str | None:
        return highlight(line, path, style=style)

    return _highlight
