"""``npm`` domain: ``install`` and ``audit``."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import Action, Context, context_flag
from clishape.core.models import RawInvocationResult
from clishape.core.normalize import parse_duration
from clishape.domains.npm import formatters, guards, parsers
from clishape.domains.npm.models import NpmAudit, NpmInstall
from clishape.exceptions import GuardError


def _install_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_install_args(args, dev=context_flag(context, "dev"))


def _audit_args(args: Sequence[str], context: Context) -> list[str]:
    if args:
        raise GuardError("npm audit takes no arguments.", param_name="args")
    return guards.build_audit_args(
        audit_level=context.get("audit_level") or None,
        production=context_flag(context, "production"),
    )


def _install(raw: RawInvocationResult, context: Context) -> NpmInstall:
    return parsers.parse_install(
        raw.stdout,
        raw.stderr,
        raw.exit_code,
        duration_seconds=parse_duration(context.get("duration")),
    )


def _audit(raw: RawInvocationResult, _context: Context) -> NpmAudit:
    return parsers.parse_audit(raw.stdout, raw.stderr, raw.exit_code)


ACTIONS: tuple[Action, ...] = (
    Action("npm", "install", "npm", _install_args, _install, formatters.INSTALL_RENDERER,
           description="Install packages [PACKAGE...] (context: dev, duration)", is_build=True),
    Action("npm", "audit", "npm", _audit_args, _audit, formatters.AUDIT_RENDERER,
           description="Audit dependencies (context: audit_level, production)"),
)

__all__: list[str] = ["ACTIONS"]
