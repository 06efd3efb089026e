"""``kubectl`` domain: ``get``."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import Action, Context, context_flag
from clishape.core.models import RawInvocationResult
from clishape.domains.kubectl import formatters, guards, parsers
from clishape.domains.kubectl.models import KubectlGet
from clishape.exceptions import GuardError


def _get_args(args: Sequence[str], context: Context) -> list[str]:
    """``get [RESOURCE [NAME]]``, each falling back to the context."""
    if len(args) > 2:
        raise GuardError(
            f"Expected at most a resource and a name, got {len(args)} arguments.",
            param_name="args",
        )
    resource = args[0] if args else context.get("resource", "")
    name = args[1] if len(args) > 1 else context.get("name") or None
    return guards.build_get_args(
        resource,
        name,
        namespace=context.get("namespace") or None,
        all_namespaces=context_flag(context, "all_namespaces"),
        selector=context.get("selector") or None,
    )


def _get(raw: RawInvocationResult, context: Context) -> KubectlGet:
    return parsers.parse_get(
        raw.stdout,
        raw.stderr,
        raw.exit_code,
        resource=context.get("resource", ""),
        namespace=context.get("namespace") or None,
    )


ACTIONS: tuple[Action, ...] = (
    Action("kubectl", "get", "kubectl", _get_args, _get, formatters.GET_RENDERER,
           description="List resources RESOURCE [NAME] "
                       "(context: resource, namespace, all_namespaces, selector)"),
)

__all__: list[str] = ["ACTIONS"]
