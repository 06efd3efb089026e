"""Argument guards and command-vector builders for ``kubectl``."""

from __future__ import annotations

import re

from clishape.core.guards import assert_no_flag_injection
from clishape.exceptions import GuardError
from clishape.utils.limits import SHORT_STRING_MAX, assert_max_length

# RFC 1123 label, the format Kubernetes enforces for namespaces.
_NAMESPACE_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def validate_resource(value: str) -> None:
    """Resource types (``pods``, ``deploy``, ``crd.group.io``) and ``kind/name`` refs."""
    assert_max_length(value, SHORT_STRING_MAX, "resource")
    assert_no_flag_injection(value, "resource")
    if not value.strip() or any(ch.isspace() for ch in value):
        raise GuardError(f'Invalid resource: "{value}".', param_name="resource")


def validate_namespace(value: str) -> None:
    assert_max_length(value, 63, "namespace")
    assert_no_flag_injection(value, "namespace")
    if not _NAMESPACE_RE.match(value):
        raise GuardError(
            f'Invalid namespace: "{value}".',
            param_name="namespace",
            hint="Namespaces are lowercase letters, digits and '-'.",
        )


def build_get_args(
    resource: str,
    name: str | None = None,
    *,
    namespace: str | None = None,
    all_namespaces: bool = False,
    selector: str | None = None,
) -> list[str]:
    validate_resource(resource)
    args = ["get", resource]
    if name is not None:
        validate_resource(name)
        args.append(name)
    if all_namespaces:
        args.append("--all-namespaces")
    elif namespace is not None:
        validate_namespace(namespace)
        args.extend(["-n", namespace])
    if selector is not None:
        assert_max_length(selector, SHORT_STRING_MAX, "selector")
        assert_no_flag_injection(selector, "selector")
        args.extend(["-l", selector])
    args.extend(["-o", "json"])
    return args
