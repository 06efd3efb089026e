"""Full and compact renderings of ``helm`` results.

One renderer serves every helm action; each function switches on the
record's ``action`` tag.
"""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, more_line, preview
from clishape.domains.helm.models import (
    HelmCompact,
    HelmList,
    HelmListCompact,
    HelmReleaseCompact,
    HelmResult,
    HelmStatus,
    HelmUninstall,
)


def _release_line(verb: str, name: str, namespace: str | None, revision: int | None,
                  status: str | None, chart: str | None) -> str:
    parts = [f"{verb} {name}"]
    if namespace:
        parts.append(f"namespace {namespace}")
    if revision is not None:
        parts.append(f"revision {revision}")
    if status:
        parts.append(status)
    if chart:
        parts.append(chart)
    return " | ".join(parts)


_VERBS = {
    "status": "Release",
    "install": "Installed",
    "upgrade": "Upgraded",
}


def format_helm(data: HelmResult) -> str:
    if not data.success:
        return failure_line(f"helm {data.action}", data.error_type, data.error_message)
    if isinstance(data, HelmList):
        scope = f" in {data.namespace}" if data.namespace else ""
        lines = [f"{data.total} releases{scope}"]
        for r in data.releases:
            app = f" (app {r.app_version})" if r.app_version else ""
            lines.append(f"  {r.name} [{r.namespace}] rev {r.revision} {r.status} {r.chart}{app}")
        return "\n".join(lines)
    if isinstance(data, HelmUninstall):
        return f"Uninstalled {data.name}" if data.status else f"helm uninstall {data.name}: done"

    lines = [_release_line(_VERBS[data.action], data.name, data.namespace, data.revision,
                           data.status, data.chart)]
    if data.app_version:
        lines.append(f"  app version: {data.app_version}")
    if isinstance(data, HelmStatus) and data.description:
        lines.append(f"  {data.description}")
    if data.notes:
        lines.append("  notes:")
        lines.extend(f"    {line}" for line in data.notes.splitlines())
    return "\n".join(lines)


def compact_helm(data: HelmResult) -> HelmCompact:
    if isinstance(data, HelmList):
        return HelmListCompact(
            success=data.success,
            namespace=data.namespace,
            names=cap(r.name for r in data.releases),
            total=data.total,
            error_type=data.error_type,
            error_message=preview(data.error_message),
        )
    if isinstance(data, HelmUninstall):
        return HelmUninstall(
            success=data.success,
            name=data.name,
            namespace=data.namespace,
            status=data.status,
            error_type=data.error_type,
            error_message=preview(data.error_message),
        )
    return HelmReleaseCompact(
        action=data.action,
        success=data.success,
        name=data.name,
        namespace=data.namespace,
        revision=data.revision,
        status=data.status,
        chart=data.chart,
        app_version=data.app_version,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_helm_compact(data: HelmCompact) -> str:
    if not data.success:
        return failure_line(f"helm {data.action}", data.error_type, data.error_message)
    if isinstance(data, HelmListCompact):
        lines = [f"{data.total} releases"]
        if data.names:
            lines.append(f"  {', '.join(data.names)}")
        extra = more_line(data.total, len(data.names))
        if extra:
            lines.append(extra)
        return "\n".join(lines)
    if isinstance(data, HelmUninstall):
        return format_helm(data)
    return _release_line(_VERBS.get(data.action, "Release"), data.name, data.namespace,
                         data.revision, data.status, data.chart)


HELM_RENDERER = Renderer(format_helm, compact_helm, format_helm_compact)
