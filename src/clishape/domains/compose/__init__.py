"""``docker compose`` domain: ``up`` and ``down``."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import Action, Context, context_flag
from clishape.core.models import RawInvocationResult
from clishape.domains.compose import formatters, guards, parsers
from clishape.domains.compose.models import ComposeDown, ComposeUp
from clishape.exceptions import GuardError


def _up_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_up_args(
        args,
        file=context.get("file") or None,
        project=context.get("project") or None,
        build=context_flag(context, "build"),
    )


def _down_args(args: Sequence[str], context: Context) -> list[str]:
    if args:
        raise GuardError("compose down takes no arguments.", param_name="args")
    return guards.build_down_args(
        file=context.get("file") or None,
        project=context.get("project") or None,
        volumes=context_flag(context, "volumes"),
    )


def _up(raw: RawInvocationResult, _context: Context) -> ComposeUp:
    return parsers.parse_compose_up(raw.stdout, raw.stderr, raw.exit_code)


def _down(raw: RawInvocationResult, _context: Context) -> ComposeDown:
    return parsers.parse_compose_down(raw.stdout, raw.stderr, raw.exit_code)


ACTIONS: tuple[Action, ...] = (
    Action("compose", "up", "docker", _up_args, _up, formatters.UP_RENDERER,
           description="Start services [SERVICE...] (context: file, project, build)"),
    Action("compose", "down", "docker", _down_args, _down, formatters.DOWN_RENDERER,
           description="Stop and remove services (context: file, project, volumes)"),
)

__all__: list[str] = ["ACTIONS"]
