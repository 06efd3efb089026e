"""Scrub process output before it is parsed or shown.

* :func:`strip_ansi` removes terminal colour/cursor escape sequences.
* :func:`sanitize_error_output` hides user home directories, and in broad
  mode every other absolute path, so error text can be surfaced without
  leaking the local account layout.
"""

from __future__ import annotations

import re

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|\x1b[@-Z\\-_]")

# Not preceded by a path/URL character, so "./src" and "https://h/p" are left alone.
_BOUNDARY = r"(?<![\w.~/:\\-])"

_HOME_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(_BOUNDARY + r"/home/[^/\s]+/"), "~/"),
    (re.compile(_BOUNDARY + r"/Users/[^/\s]+/"), "~/"),
    (re.compile(_BOUNDARY + r"/root/"), "~/"),
    (re.compile(_BOUNDARY + r"[A-Za-z]:\\Users\\[^\\\s]+\\"), "~\\\\"),
)

_UNIX_PATH = re.compile(_BOUNDARY + r"/(?:[\w.@+-]+/)+([\w.@+-]+)")
_WINDOWS_PATH = re.compile(_BOUNDARY + r"[A-Za-z]:\\(?:[^\\\s:*?\"<>|]+\\)+([^\\\s:*?\"<>|]+)")

REDACTED: str = "<redacted-path>"


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from *text*."""
    return _ANSI_RE.sub("", text)


def sanitize_error_output(text: str, *, all_paths: bool = False) -> str:
    """Replace home-directory prefixes with ``~`` and optionally redact paths.

    Parameters
    ----------
    text:
        Raw error output.
    all_paths:
        When ``True`` every remaining absolute path is reduced to
        ``<redacted-path>/<basename>`` (``\\`` separator for Windows
        paths).  Relative paths are never touched.
    """
    if not text:
        return text
    for pattern, replacement in _HOME_PATTERNS:
        text = pattern.sub(replacement, text)
    if all_paths:
        text = _UNIX_PATH.sub(lambda m: f"{REDACTED}/{m.group(1)}", text)
        text = _WINDOWS_PATH.sub(lambda m: f"{REDACTED}\\{m.group(1)}", text)
    return text
