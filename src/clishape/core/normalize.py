"""Normalization helpers shared by every domain parser.

Wrapped CLIs change their output between versions and flags, so parsers
are built from small, total pieces:

* JSON extraction that tolerates banner text before the document.
* Ordered ``(predicate, extractor)`` strategy lists for JSON-then-text
  fallbacks.
* Ordered line grammars: the first grammar that matches a line owns it.
* A fixed-column splitter for the tabular output most CLIs print.
* Unit tables for sizes and durations.
* Identifier shortening and lifecycle-phase reduction.

Rules
-----
* Pure functions only — no I/O, no logging side effects beyond debug.
* Nothing here raises on malformed input; helpers return ``None`` or a
  caller-supplied default instead.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

SHORT_ID_LENGTH: int = 12

_DECODER = json.JSONDecoder()


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

def extract_json(text: str, openers: str = "{") -> Any | None:
    """Decode the first JSON value in *text* that starts at one of *openers*.

    Text printed before the document (deprecation banners, progress
    lines) is skipped.  Returns ``None`` when no opener is present or the
    value cannot be decoded.
    """
    positions = [pos for pos in (text.find(ch) for ch in openers) if pos != -1]
    if not positions:
        return None
    start = min(positions)
    try:
        value, _ = _DECODER.raw_decode(text, start)
    except (ValueError, RecursionError):
        logger.debug("No decodable JSON at offset %d", start)
        return None
    return value


def iter_json_lines(text: str) -> Iterator[dict[str, Any]]:
    """Yield each line of *text* that decodes to a JSON object.

    Lines that are blank, not objects, or not decodable are skipped.
    """
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.startswith("{"):
            continue
        try:
            value = json.loads(stripped)
        except (ValueError, RecursionError):
            continue
        if isinstance(value, dict):
            yield value


def has_json_object(text: str) -> bool:
    """Predicate: *text* contains a ``{`` that could open a JSON object."""
    return "{" in text


def always(_text: str) -> bool:
    """Predicate that accepts every input (terminal text fallback)."""
    return True


# ---------------------------------------------------------------------------
# Strategy chains
# ---------------------------------------------------------------------------

def run_strategies(
    text: str,
    strategies: Sequence[tuple[Callable[[str], bool], Callable[[str], T | None]]],
) -> T | None:
    """Return the first non-``None`` extraction from *strategies*.

    Each entry is a ``(predicate, extractor)`` pair evaluated in order.
    The extractor only runs when its predicate accepts *text*.  Returns
    ``None`` when every strategy declines.
    """
    for applies, extract in strategies:
        if not applies(text):
            continue
        value = extract(text)
        if value is not None:
            return value
        logger.debug("Strategy %s declined, trying next", getattr(extract, "__name__", extract))
    return None


# ---------------------------------------------------------------------------
# Line grammars
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LineGrammar:
    """One category of output line, recognised by a regular expression."""

    name: str
    """Category name reported alongside each match."""

    pattern: re.Pattern[str]
    """Compiled expression searched against each line."""


def grammar(name: str, pattern: str, flags: int = 0) -> LineGrammar:
    """Shorthand for building a :class:`LineGrammar`."""
    return LineGrammar(name=name, pattern=re.compile(pattern, flags))


def scan_lines(
    text: str,
    grammars: Sequence[LineGrammar],
) -> Iterator[tuple[str, re.Match[str]]]:
    """Yield ``(grammar_name, match)`` for every line some grammar claims.

    Grammars are tried in order; the first one that matches a line wins
    and later grammars never see that line.
    """
    for line in text.splitlines():
        for candidate in grammars:
            match = candidate.pattern.search(line)
            if match is not None:
                yield candidate.name, match
                break


# ---------------------------------------------------------------------------
# Tabular output
# ---------------------------------------------------------------------------

_HEADER_CELL = re.compile(r"\S+(?: \S+)*")


def split_columns(text: str, delimiter: str | None = None) -> list[dict[str, str]]:
    """Split CLI table output into one dict per row keyed by header.

    Without *delimiter* the header's cell offsets define fixed columns
    (cells are separated by two or more spaces, so ``CONTAINER ID`` stays
    one header).  With *delimiter* each line is split on it instead.
    Rows shorter than the header get empty strings.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    header, body = lines[0], lines[1:]

    if delimiter is not None:
        names = [cell.strip() for cell in header.split(delimiter)]
        rows: list[dict[str, str]] = []
        for line in body:
            cells = [cell.strip() for cell in line.split(delimiter)]
            cells.extend([""] * (len(names) - len(cells)))
            rows.append(dict(zip(names, cells)))
        return rows

    cells = [(m.start(), m.group(0)) for m in _HEADER_CELL.finditer(header)]
    rows = []
    for line in body:
        row: dict[str, str] = {}
        for index, (start, name) in enumerate(cells):
            end = cells[index + 1][0] if index + 1 < len(cells) else None
            row[name] = line[start:end].strip()
        rows.append(row)
    return rows


# ---------------------------------------------------------------------------
# Sizes
# ---------------------------------------------------------------------------

_SIZE_UNITS: Mapping[str, int] = {
    "": 1,
    "b": 1,
    "k": 1000,
    "kb": 1000,
    "mb": 1000**2,
    "gb": 1000**3,
    "tb": 1000**4,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
}

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$")


def parse_size(text: str | None) -> int | None:
    """Convert a human size (``43.2MB``, ``150MiB``, ``12B``) to bytes.

    Decimal prefixes are powers of 1000 and binary prefixes powers of
    1024.  Unknown units and unparseable text give ``None``.
    """
    if not text:
        return None
    match = _SIZE_RE.match(text)
    if match is None:
        return None
    multiplier = _SIZE_UNITS.get(match.group(2).lower())
    if multiplier is None:
        return None
    size = float(match.group(1)) * multiplier
    if not math.isfinite(size):
        return None
    return round(size)


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------

_DURATION_UNITS: Mapping[str, float] = {
    "ms": 0.001,
    "msec": 0.001,
    "msecs": 0.001,
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "s": 1.0,
    "sec": 1.0,
    "secs": 1.0,
    "second": 1.0,
    "seconds": 1.0,
    "m": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "minute": 60.0,
    "minutes": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "hour": 3600.0,
    "hours": 3600.0,
}

# Longest alternatives first so "ms" is not read as "m" + "s".
_UNIT_ALTERNATION = "|".join(sorted(_DURATION_UNITS, key=len, reverse=True))
_DURATION_PART = re.compile(rf"(\d+(?:\.\d+)?)\s*({_UNIT_ALTERNATION})(?![A-Za-z])", re.IGNORECASE)
_DURATION_FULL = re.compile(
    rf"^(?:\s*\d+(?:\.\d+)?\s*(?:{_UNIT_ALTERNATION})(?![A-Za-z]))+\s*$",
    re.IGNORECASE,
)
_CLOCK_RE = re.compile(r"^\s*(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)\s*$")
_BARE_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


def parse_duration(text: str | None) -> float | None:
    """Normalize a textual duration to seconds.

    Accepts unit forms (``2.5s``, ``42 ms``, ``1m30s``, ``2 minutes``),
    clock forms (``00:00:02.34``, ``01:05``) and bare numbers (seconds).
    Returns ``None`` for anything else.
    """
    if not text:
        return None

    clock = _CLOCK_RE.match(text)
    if clock is not None:
        hours = float(clock.group(1) or 0)
        return round(hours * 3600 + float(clock.group(2)) * 60 + float(clock.group(3)), 6)

    bare = _BARE_NUMBER.match(text)
    if bare is not None:
        return float(bare.group(1))

    if _DURATION_FULL.match(text) is None:
        return None
    total = 0.0
    for amount, unit in _DURATION_PART.findall(text):
        total += float(amount) * _DURATION_UNITS[unit.lower()]
    return round(total, 6)


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

def short_id(value: str | None) -> str:
    """Canonical 12-character form of a content-addressed identifier.

    ``sha256:`` prefixes are dropped, so ``sha256:abc…`` and ``abc…``
    shorten to the same value.
    """
    if not value:
        return ""
    stripped = value.strip()
    if stripped.lower().startswith("sha256:"):
        stripped = stripped[len("sha256:"):]
    return stripped[:SHORT_ID_LENGTH]


# ---------------------------------------------------------------------------
# Lifecycle phases
# ---------------------------------------------------------------------------

def reduce_phases(
    events: Iterable[tuple[K, str]],
    rank: Mapping[str, int],
) -> list[tuple[K, str]]:
    """Collapse ``(key, phase)`` events to the most-advanced phase per key.

    Keys keep the order in which they first appeared.  Phases missing
    from *rank* sort below every known phase.
    """
    best: dict[K, str] = {}
    for key, phase in events:
        current = best.get(key)
        if current is None or rank.get(phase, -1) >= rank.get(current, -1):
            best[key] = phase
    return list(best.items())


# ---------------------------------------------------------------------------
# Loose JSON field access
# ---------------------------------------------------------------------------

def to_int(value: object, default: int = 0) -> int:
    """Coerce a JSON scalar to ``int``; *default* for anything else."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        stripped = value.strip()
        if re.fullmatch(r"-?\d+", stripped):
            return int(stripped)
    return default


def to_str(value: object, default: str = "unknown") -> str:
    """Coerce a JSON scalar to ``str``; *default* for missing or empty values."""
    if value is None or isinstance(value, (dict, list)):
        return default
    text = str(value)
    return text if text else default


def as_dict(value: object) -> dict[str, Any]:
    """Return *value* if it is a JSON object, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: object) -> list[Any]:
    """Return *value* if it is a JSON array, else an empty list."""
    return value if isinstance(value, list) else []
