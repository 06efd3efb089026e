"""Full and compact renderings of ``docker compose`` results."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, preview
from clishape.domains.compose.models import ComposeDown, ComposeDownCompact, ComposeUp, ComposeUpCompact


def _up_headline(success: bool, started: int, services: tuple[str, ...]) -> str:
    if not success:
        return "Compose up failed"
    if started == 0:
        return "Compose up succeeded (no new services started)"
    return f"Compose up: {started} services started ({', '.join(services)})"


def format_compose_up(data: ComposeUp) -> str:
    if not data.success:
        lines = [failure_line("Compose up", data.error_type, data.error_message)]
    else:
        lines = [_up_headline(True, data.started, data.services)]
    lines.extend(f"  {e.kind:<9} {e.name} {e.phase}" for e in data.entities)
    return "\n".join(lines)


def compact_compose_up(data: ComposeUp) -> ComposeUpCompact:
    return ComposeUpCompact(
        success=data.success,
        services=cap(data.services),
        started=data.started,
        networks_created=data.networks_created,
        volumes_created=data.volumes_created,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_compose_up_compact(data: ComposeUpCompact) -> str:
    line = _up_headline(data.success, data.started, data.services)
    if not data.success and data.error_type is not None:
        line += f" [{data.error_type.value}]"
    return line


def _down_headline(success: bool, stopped: int, removed: int) -> str:
    if not success:
        return "Compose down failed"
    return f"Compose down: {stopped} stopped, {removed} removed"


def format_compose_down(data: ComposeDown) -> str:
    if not data.success:
        lines = [failure_line("Compose down", data.error_type, data.error_message)]
    else:
        lines = [_down_headline(True, data.stopped, data.removed)]
    lines.extend(f"  {e.kind:<9} {e.name} {e.phase}" for e in data.entities)
    return "\n".join(lines)


def compact_compose_down(data: ComposeDown) -> ComposeDownCompact:
    return ComposeDownCompact(
        success=data.success,
        stopped=data.stopped,
        removed=data.removed,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_compose_down_compact(data: ComposeDownCompact) -> str:
    line = _down_headline(data.success, data.stopped, data.removed)
    if not data.success and data.error_type is not None:
        line += f" [{data.error_type.value}]"
    return line


UP_RENDERER = Renderer(format_compose_up, compact_compose_up, format_compose_up_compact)
DOWN_RENDERER = Renderer(format_compose_down, compact_compose_down, format_compose_down_compact)
