"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from clishape.exceptions import DependencyMissingError

_STYLE_WORD = r"(?:bold|dim|italic|underline|red|green|yellow|blue|magenta|cyan|white)"
_MARKUP_TAG = re.compile(rf"\[/?{_STYLE_WORD}(?: {_STYLE_WORD})*\]")
"""Style tags the CLI emits; other bracketed text is left alone."""


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``DependencyMissingError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise DependencyMissingError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


def strip_markup(text: str) -> str:
    """Remove Rich style tags from *text* for plain-text output."""
    return _MARKUP_TAG.sub("", text)


def rich_available() -> bool:
    try:
        _load_rich_console_class()
    except DependencyMissingError:
        return False
    return True


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else print unstyled text to stderr."""
        try:
            rich_console = get_rich_console()
        except DependencyMissingError:
            plain = [strip_markup(obj) if isinstance(obj, str) else obj for obj in objects]
            print(*plain, file=sys.stderr)
            return
        rich_console.print(*objects)


console = _ConsoleProxy()


def escape(text: str) -> str:
    """Escape Rich markup in *text*; identity when Rich is missing."""
    try:
        from rich.markup import escape as rich_escape
    except ModuleNotFoundError:
        return text
    return rich_escape(text)
