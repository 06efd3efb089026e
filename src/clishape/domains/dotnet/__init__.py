"""``dotnet`` domain: ``build``."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import Action, Context, context_flag, single_operand
from clishape.core.models import RawInvocationResult
from clishape.domains.dotnet import formatters, guards, parsers
from clishape.domains.dotnet.models import DotnetBuild


def _build_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_build_args(
        single_operand(args, context, "project"),
        configuration=context.get("configuration") or None,
        framework=context.get("framework") or None,
        no_restore=context_flag(context, "no_restore"),
    )


def _build(raw: RawInvocationResult, _context: Context) -> DotnetBuild:
    return parsers.parse_build(raw.stdout, raw.stderr, raw.exit_code)


ACTIONS: tuple[Action, ...] = (
    Action("dotnet", "build", "dotnet", _build_args, _build, formatters.BUILD_RENDERER,
           description="Build a project or solution [PROJECT] "
                       "(context: project, configuration, framework, no_restore)",
           is_build=True),
)

__all__: list[str] = ["ACTIONS"]
