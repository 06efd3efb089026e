"""Parser for ``kubectl get``.

``-o json`` output is either a ``List`` with ``items`` or, when a single
object is requested by name, that object itself.  Without ``-o json``
the default table is read by header offsets.
"""

from __future__ import annotations

from typing import Any

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import (
    always,
    as_dict,
    as_list,
    extract_json,
    has_json_object,
    run_strategies,
    split_columns,
    to_str,
)
from clishape.domains.kubectl.models import K8sResource, KubectlErrorType, KubectlGet

_RULES: tuple[ErrorRule[KubectlErrorType], ...] = (
    rule(r"timed out|deadline exceeded", KubectlErrorType.TIMEOUT),
    rule(r"doesn't have a resource type|could not find the requested resource", KubectlErrorType.UNKNOWN_RESOURCE),
    rule(r"\bforbidden\b|\bunauthorized\b|must be logged in", KubectlErrorType.FORBIDDEN),
    rule(r"connection (?:to the server .* )?(?:was )?refused|unable to connect to the server", KubectlErrorType.CONNECTION_REFUSED),
    rule(r"\(NotFound\)|not found", KubectlErrorType.NOT_FOUND),
)


def _resource_from_json(item: dict[str, Any], default_kind: str) -> K8sResource:
    metadata = as_dict(item.get("metadata"))
    status = as_dict(item.get("status")).get("phase")
    namespace = metadata.get("namespace")
    created = metadata.get("creationTimestamp")
    return K8sResource(
        kind=to_str(item.get("kind"), default_kind),
        name=to_str(metadata.get("name"), ""),
        namespace=namespace if isinstance(namespace, str) else None,
        status=status if isinstance(status, str) else None,
        created=created if isinstance(created, str) else None,
        labels={
            str(key): value
            for key, value in as_dict(metadata.get("labels")).items()
            if isinstance(value, str)
        },
    )


def _items_from_json(text: str, default_kind: str) -> list[K8sResource] | None:
    document = extract_json(text)
    if not isinstance(document, dict):
        return None
    if "items" in document:
        return [
            _resource_from_json(item, default_kind)
            for item in as_list(document["items"])
            if isinstance(item, dict)
        ]
    if "metadata" in document:
        return [_resource_from_json(document, default_kind)]
    return None


def _items_from_table(text: str, default_kind: str) -> list[K8sResource] | None:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines or not lines[0].lstrip().startswith(("NAME", "NAMESPACE")):
        return None
    items = []
    for row in split_columns("\n".join(lines)):
        name = row.get("NAME", "")
        if not name:
            continue
        kind, _, short = name.partition("/")
        items.append(
            K8sResource(
                kind=kind if short else default_kind,
                name=short or name,
                namespace=row.get("NAMESPACE") or None,
                status=row.get("STATUS") or None,
                age=row.get("AGE") or None,
            )
        )
    return items


def parse_get(
    stdout: str,
    stderr: str,
    exit_code: int,
    *,
    resource: str = "",
    namespace: str | None = None,
) -> KubectlGet:
    """Parse ``kubectl get`` output for *resource* (``pods``, ``svc``, …)."""
    kind = resource or "unknown"
    items = run_strategies(
        stdout,
        [
            (has_json_object, lambda text: _items_from_json(text, kind)),
            (always, lambda text: _items_from_table(text, kind)),
        ],
    ) or []

    if namespace is None:
        namespaces = {item.namespace for item in items if item.namespace}
        namespace = namespaces.pop() if len(namespaces) == 1 else None

    fields = dict(resource=resource, namespace=namespace, items=tuple(items), total=len(items))
    if exit_code != 0:
        text = f"{stdout}\n{stderr}"
        return KubectlGet(
            success=False,
            error_type=classify(text, _RULES, KubectlErrorType.UNKNOWN),
            error_message=first_error_line(stderr or stdout, "kubectl get failed"),
            **fields,
        )
    return KubectlGet(success=True, **fields)
