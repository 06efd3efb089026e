"""Parsers for ``docker compose up -d`` and ``docker compose down``.

Compose logs each entity once per lifecycle event (``Creating``,
``Created``, ``Starting``, ``Started``), on stderr, and the classic
``docker-compose`` v1 binary used a different ``Creating x ... done``
layout.  Both grammars feed the same ``(entity, phase)`` events, which
are reduced to one row per entity holding its most-advanced phase.
Counts are taken from the reduced rows only.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import LineGrammar, grammar, reduce_phases, scan_lines
from clishape.domains.compose.models import ComposeDown, ComposeEntity, ComposeErrorType, ComposeUp

PHASE_RANK: Mapping[str, int] = {
    "Creating": 0,
    "Recreate": 1,
    "Recreated": 2,
    "Created": 3,
    "Starting": 4,
    "Waiting": 5,
    "Started": 6,
    "Healthy": 7,
    "Running": 8,
    "Stopping": 9,
    "Killing": 9,
    "Stopped": 10,
    "Killed": 10,
    "Removing": 11,
    "Removed": 12,
    "Error": 13,
}
"""Lifecycle order; a higher rank replaces a lower one for the same entity."""

_UP_RANGE = (PHASE_RANK["Created"], PHASE_RANK["Running"])

# v1 reports the in-progress verb followed by "done" or "error".
_V1_COMPLETED: Mapping[str, str] = {
    "Creating": "Created",
    "Recreating": "Recreated",
    "Starting": "Started",
    "Stopping": "Stopped",
    "Killing": "Killed",
    "Removing": "Removed",
}

_GRAMMARS: tuple[LineGrammar, ...] = (
    grammar("v2", r"^\W*(?P<kind>Container|Network|Volume)\s+(?P<name>\S+)\s+(?P<phase>[A-Z][a-z]+)\b"),
    grammar("v1-network", r"^(?P<verb>Creating|Removing) network \"?(?P<name>[^\"\s]+)\"?"),
    grammar("v1-volume", r"^(?P<verb>Creating|Removing) volume \"?(?P<name>[^\"\s]+)\"?"),
    grammar("v1", r"^(?P<verb>Creating|Recreating|Starting|Stopping|Killing|Removing)\s+(?P<name>\S+)\s+\.\.\.\s*(?P<result>done|error)?"),
)

_RULES: tuple[ErrorRule[ComposeErrorType], ...] = (
    rule(r"timed out", ComposeErrorType.TIMEOUT),
    rule(r"cannot connect to the docker daemon|is the docker daemon running", ComposeErrorType.DAEMON_UNAVAILABLE),
    rule(r"no configuration file provided|can't find a suitable configuration file|compose file .* not found", ComposeErrorType.NO_CONFIG),
    rule(r"port is already allocated|address already in use", ComposeErrorType.PORT_CONFLICT),
    rule(r"pull access denied|manifest unknown|repository does not exist|no such image", ComposeErrorType.IMAGE_NOT_FOUND),
)


def _events(text: str) -> Iterator[tuple[tuple[str, str], str]]:
    """Yield ``((kind, name), phase)`` for every recognised line."""
    for kind, match in scan_lines(text, _GRAMMARS):
        if kind == "v2":
            yield (match.group("kind").lower(), match.group("name")), match.group("phase")
        elif kind in ("v1-network", "v1-volume"):
            entity = "network" if kind == "v1-network" else "volume"
            yield (entity, match.group("name")), _V1_COMPLETED[match.group("verb")]
        else:
            verb = match.group("verb")
            result = match.group("result")
            if result == "error":
                phase = "Error"
            elif result == "done":
                phase = _V1_COMPLETED[verb]
            else:
                phase = verb
            yield ("container", match.group("name")), phase


def reduce_entities(text: str) -> tuple[ComposeEntity, ...]:
    """Collapse all lifecycle lines in *text* to one entity per name."""
    reduced = reduce_phases(_events(text), PHASE_RANK)
    return tuple(ComposeEntity(kind=kind, name=name, phase=phase) for (kind, name), phase in reduced)


def _error_fields(stdout: str, stderr: str) -> tuple[ComposeErrorType, str]:
    text = f"{stdout}\n{stderr}"
    return (
        classify(text, _RULES, ComposeErrorType.UNKNOWN),
        first_error_line(stderr or stdout, "Compose command failed"),
    )


def parse_compose_up(stdout: str, stderr: str, exit_code: int) -> ComposeUp:
    """Parse ``docker compose up -d`` output."""
    entities = reduce_entities(f"{stdout}\n{stderr}")
    containers = [e for e in entities if e.kind == "container"]
    low, high = _UP_RANGE
    started = sum(1 for e in containers if low <= PHASE_RANK.get(e.phase, -1) <= high)

    fields = dict(
        services=tuple(e.name for e in containers),
        entities=entities,
        started=started,
        networks_created=sum(1 for e in entities if e.kind == "network" and e.phase == "Created"),
        volumes_created=sum(1 for e in entities if e.kind == "volume" and e.phase == "Created"),
    )
    if exit_code != 0 or any(e.phase == "Error" for e in entities):
        error_type, message = _error_fields(stdout, stderr)
        return ComposeUp(success=False, error_type=error_type, error_message=message, **fields)
    return ComposeUp(success=True, **fields)


def parse_compose_down(stdout: str, stderr: str, exit_code: int) -> ComposeDown:
    """Parse ``docker compose down`` output."""
    entities = reduce_entities(f"{stdout}\n{stderr}")
    stopped_rank = PHASE_RANK["Stopped"]
    stopped = sum(
        1
        for e in entities
        if e.kind == "container" and e.phase != "Error" and PHASE_RANK.get(e.phase, -1) >= stopped_rank
    )
    removed = sum(1 for e in entities if e.phase == "Removed")

    if exit_code != 0 or any(e.phase == "Error" for e in entities):
        error_type, message = _error_fields(stdout, stderr)
        return ComposeDown(
            success=False,
            entities=entities,
            stopped=stopped,
            removed=removed,
            error_type=error_type,
            error_message=message,
        )
    return ComposeDown(success=True, entities=entities, stopped=stopped, removed=removed)
