"""Argument guards and command-vector builders for ``npm``."""

from __future__ import annotations

import re
from collections.abc import Sequence

from clishape.core.guards import assert_no_flag_injection
from clishape.exceptions import GuardError
from clishape.utils.limits import ARRAY_MAX, SHORT_STRING_MAX, assert_max_length

# name, @scope/name, optionally @version-or-tag-or-range.
_PACKAGE_SPEC = re.compile(r"^(?:@[a-z0-9][\w.~-]*/)?[a-z0-9][\w.~-]*(?:@[^\s;|&`$<>]+)?$", re.IGNORECASE)


def validate_package_spec(spec: str) -> None:
    assert_max_length(spec, SHORT_STRING_MAX, "package")
    assert_no_flag_injection(spec, "package")
    if not _PACKAGE_SPEC.match(spec):
        raise GuardError(
            f'Invalid package: "{spec}".',
            param_name="package",
            hint="Use a registry name such as 'lodash', '@scope/pkg' or 'pkg@^1.2.0'.",
        )


def build_install_args(
    packages: Sequence[str] = (),
    *,
    dev: bool = False,
    json_output: bool = False,
) -> list[str]:
    assert_max_length(packages, ARRAY_MAX, "packages")
    args = ["install"]
    if dev:
        args.append("--save-dev")
    if json_output:
        args.append("--json")
    for spec in packages:
        validate_package_spec(spec)
        args.append(spec)
    return args


_AUDIT_LEVELS = frozenset({"info", "low", "moderate", "high", "critical"})


def build_audit_args(*, audit_level: str | None = None, production: bool = False) -> list[str]:
    args = ["audit", "--json"]
    if audit_level is not None:
        if audit_level not in _AUDIT_LEVELS:
            raise GuardError(
                f'Invalid audit level: "{audit_level}".',
                param_name="audit_level",
                hint=f"Allowed: {', '.join(sorted(_AUDIT_LEVELS))}",
            )
        args.append(f"--audit-level={audit_level}")
    if production:
        args.append("--omit=dev")
    return args
