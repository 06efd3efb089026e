"""``helm`` domain: list, status, install, upgrade and uninstall."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from clishape.core.actions import (
    Action,
    Context,
    context_flag,
    context_list,
    require_operand,
)
from clishape.core.models import RawInvocationResult
from clishape.domains.helm import formatters, guards, parsers
from clishape.domains.helm.models import HelmResult
from clishape.exceptions import GuardError

# ---------------------------------------------------------------------------
# Argument builders
# ---------------------------------------------------------------------------

def _namespace(context: Context) -> str | None:
    return context.get("namespace") or None


def _release_and_chart(args: Sequence[str], context: Context) -> tuple[str, str]:
    """``RELEASE CHART`` operands, each falling back to the context."""
    if len(args) > 2:
        raise GuardError(
            f"Expected a release and a chart, got {len(args)} arguments.",
            param_name="args",
        )
    release = args[0] if args else context.get("name", "")
    chart = args[1] if len(args) > 1 else context.get("chart", "")
    if not chart:
        raise GuardError(
            "Missing chart.",
            param_name="chart",
            hint="Pass RELEASE CHART as arguments or use --context chart=...",
        )
    return release, chart


def _list_args(args: Sequence[str], context: Context) -> list[str]:
    if args:
        raise GuardError("helm list takes no arguments.", param_name="args")
    return guards.build_list_args(
        namespace=_namespace(context),
        all_namespaces=context_flag(context, "all_namespaces"),
    )


def _status_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_status_args(require_operand(args, context, "name"), namespace=_namespace(context))


def _install_args(args: Sequence[str], context: Context) -> list[str]:
    release, chart = _release_and_chart(args, context)
    return guards.build_install_args(
        release,
        chart,
        namespace=_namespace(context),
        version=context.get("version") or None,
        values_files=context_list(context, "values"),
        set_values=context_list(context, "set"),
        wait=context_flag(context, "wait"),
    )


def _upgrade_args(args: Sequence[str], context: Context) -> list[str]:
    release, chart = _release_and_chart(args, context)
    return guards.build_upgrade_args(
        release,
        chart,
        namespace=_namespace(context),
        install=context_flag(context, "install"),
        values_files=context_list(context, "values"),
        set_values=context_list(context, "set"),
    )


def _uninstall_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_uninstall_args(require_operand(args, context, "name"), namespace=_namespace(context))


# ---------------------------------------------------------------------------
# Parser adapters
# ---------------------------------------------------------------------------

def _adapter(action: str) -> Callable[[RawInvocationResult, Context], HelmResult]:
    def parse(raw: RawInvocationResult, context: Context) -> HelmResult:
        return parsers.parse_helm(
            raw.stdout,
            raw.stderr,
            raw.exit_code,
            action=action,
            name=context.get("name", ""),
            namespace=context.get("namespace") or None,
        )

    return parse


ACTIONS: tuple[Action, ...] = (
    Action("helm", "list", "helm", _list_args, _adapter("list"), formatters.HELM_RENDERER,
           description="List releases (context: namespace, all_namespaces)"),
    Action("helm", "status", "helm", _status_args, _adapter("status"), formatters.HELM_RENDERER,
           description="Release status RELEASE (context: name, namespace)"),
    Action("helm", "install", "helm", _install_args, _adapter("install"), formatters.HELM_RENDERER,
           description="Install a chart RELEASE CHART "
                       "(context: name, chart, namespace, version, values, set, wait)"),
    Action("helm", "upgrade", "helm", _upgrade_args, _adapter("upgrade"), formatters.HELM_RENDERER,
           description="Upgrade a release RELEASE CHART "
                       "(context: name, chart, namespace, install, values, set)"),
    Action("helm", "uninstall", "helm", _uninstall_args, _adapter("uninstall"),
           formatters.HELM_RENDERER, description="Uninstall a release RELEASE (context: name, namespace)"),
)

__all__: list[str] = ["ACTIONS"]
