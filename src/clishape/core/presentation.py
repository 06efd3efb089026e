"""Full/compact dual representation of parsed results.

Every (tool, action) pair supplies three pure functions:

* ``format_full(result) -> str`` — every field, one deterministic layout.
* ``project_compact(result) -> compact`` — lists capped at
  :data:`COMPACT_LIST_LIMIT`, blobs cut to :data:`PREVIEW_CHARS`, rich
  records reduced to their primary keys; every other scalar kept as is.
* ``format_compact(compact) -> str`` — renders the projection only.

:class:`Renderer` bundles the three and applies the selection policy in
:meth:`Renderer.present`.

Selection policy
----------------
``force_full`` always returns the full result.  Otherwise the full
result's JSON payload is compared with the raw CLI text using
:func:`estimate_tokens`; if the structured payload would not be smaller
than the raw text, the compact projection is returned instead (ties go
to compact).

Rules
-----
* No ambient state: projection depends only on its argument, and the
  compact/full choice only on the explicit arguments to ``present``.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

F = TypeVar("F")
C = TypeVar("C")
T = TypeVar("T")

COMPACT_LIST_LIMIT: int = 10
"""Maximum number of list items kept by any compact projection."""

PREVIEW_CHARS: int = 200
"""Maximum length of a text blob kept by any compact projection."""

ELLIPSIS: str = "..."


# ---------------------------------------------------------------------------
# Projection helpers
# ---------------------------------------------------------------------------

def cap(items: Iterable[T], limit: int = COMPACT_LIST_LIMIT) -> tuple[T, ...]:
    """Return at most *limit* items as a tuple, preserving order."""
    return tuple(items)[:limit]


def preview(text: str | None, limit: int = PREVIEW_CHARS) -> str | None:
    """Cut *text* to *limit* characters, marking the cut with ``...``."""
    if text is None or len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def more_line(total: int, shown: int, noun: str = "more") -> str | None:
    """``"  ... and N more"`` when *shown* items stand for *total*, else ``None``."""
    hidden = total - shown
    if hidden <= 0:
        return None
    return f"  ... and {hidden} {noun}"


def failure_line(title: str, error_type: Enum | None, error_message: str | None) -> str:
    """``"<title> failed [kind]: message"`` for a failed result."""
    kind = f" [{error_type.value}]" if error_type is not None else ""
    message = f": {error_message}" if error_message else ""
    return f"{title} failed{kind}{message}"


# ---------------------------------------------------------------------------
# JSON view
# ---------------------------------------------------------------------------

def to_jsonable(value: Any) -> Any:
    """Convert result dataclasses into plain JSON-compatible data.

    Enums become their values, tuples become lists; field order follows
    the dataclass definition so output is stable.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: to_jsonable(getattr(value, field.name)) for field in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    return value


def to_json(value: Any, *, indent: int | None = None) -> str:
    """Serialize a result (full or compact) to JSON text."""
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(to_jsonable(value), ensure_ascii=False, indent=indent, separators=separators)


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def prefers_compact(result: Any, raw_text: str) -> bool:
    """``True`` when the full payload is not smaller than *raw_text*."""
    return estimate_tokens(to_json(result)) >= estimate_tokens(raw_text)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Presentation(Generic[T]):
    """What a caller receives: structured data plus its text rendering."""

    structured: T
    """The full result or its compact projection."""

    text: str
    """Human-readable rendering of :attr:`structured`."""

    compact: bool
    """``True`` when :attr:`structured` is the compact projection."""


@dataclass(frozen=True, slots=True)
class Renderer(Generic[F, C]):
    """The three rendering functions of one (tool, action) pair."""

    format_full: Callable[[F], str]
    project_compact: Callable[[F], C]
    format_compact: Callable[[C], str]

    def present(
        self,
        result: F,
        raw_text: str,
        *,
        force_full: bool = False,
    ) -> Presentation[Any]:
        """Apply the selection policy to *result*.

        Parameters
        ----------
        result:
            The full parsed result.
        raw_text:
            The CLI output the result was parsed from.
        force_full:
            Skip the size comparison and return the full result.
        """
        if force_full or not prefers_compact(result, raw_text):
            return Presentation(structured=result, text=self.format_full(result), compact=False)
        projected = self.project_compact(result)
        return Presentation(structured=projected, text=self.format_compact(projected), compact=True)
