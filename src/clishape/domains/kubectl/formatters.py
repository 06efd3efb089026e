"""Full and compact renderings of ``kubectl get`` results."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, more_line, preview
from clishape.domains.kubectl.models import KubectlGet, KubectlGetCompact


def _title(resource: str, namespace: str | None) -> str:
    scope = f" -n {namespace}" if namespace else ""
    return f"kubectl get {resource or 'resources'}{scope}"


def format_get(data: KubectlGet) -> str:
    title = _title(data.resource, data.namespace)
    if not data.success:
        return failure_line(title, data.error_type, data.error_message)
    lines = [f"{title}: {data.total} item(s)"]
    for item in data.items:
        where = f" ({item.namespace})" if item.namespace and not data.namespace else ""
        status = f" {item.status}" if item.status else ""
        lines.append(f"  {item.kind} {item.name}{where}{status}")
    return "\n".join(lines)


def compact_get(data: KubectlGet) -> KubectlGetCompact:
    return KubectlGetCompact(
        success=data.success,
        resource=data.resource,
        namespace=data.namespace,
        names=cap(item.name for item in data.items),
        total=data.total,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_get_compact(data: KubectlGetCompact) -> str:
    title = _title(data.resource, data.namespace)
    if not data.success:
        return failure_line(title, data.error_type, data.error_message)
    lines = [f"{title}: {data.total} item(s)"]
    if data.names:
        lines.append(f"  {', '.join(data.names)}")
    extra = more_line(data.total, len(data.names))
    if extra:
        lines.append(extra)
    return "\n".join(lines)


GET_RENDERER = Renderer(format_get, compact_get, format_get_compact)
