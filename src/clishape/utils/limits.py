"""Length limits for caller-supplied strings and lists.

Generous limits that stop pathological inputs from reaching a command
line without getting in the way of normal use.
"""

from __future__ import annotations

from collections.abc import Sized

from clishape.exceptions import InputTooLongError

STRING_MAX: int = 65_536
"""Generic string parameters."""

ARRAY_MAX: int = 1_000
"""Number of items in a list parameter."""

PATH_MAX: int = 4_096
"""File-system paths."""

MESSAGE_MAX: int = 72_000
"""Request bodies and similar long-form text."""

SHORT_STRING_MAX: int = 255
"""Names, refs, tags and other identifiers."""


def assert_max_length(value: Sized, limit: int, param_name: str) -> None:
    """Raise :class:`InputTooLongError` when ``len(value)`` exceeds *limit*."""
    size = len(value)
    if size > limit:
        raise InputTooLongError(
            f"{param_name} exceeds maximum length of {limit} (got {size}).",
            param_name=param_name,
        )
