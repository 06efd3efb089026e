"""Argument guards and command-vector builders for ``helm``."""

from __future__ import annotations

import re
from collections.abc import Sequence

from clishape.core.guards import assert_no_flag_injection
from clishape.domains.kubectl.guards import validate_namespace
from clishape.exceptions import GuardError
from clishape.utils.limits import PATH_MAX, SHORT_STRING_MAX, assert_max_length

# Helm release names: lowercase RFC 1123 subdomain, at most 53 characters.
_RELEASE_RE = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")
RELEASE_MAX: int = 53


def validate_release(name: str) -> None:
    assert_max_length(name, RELEASE_MAX, "release")
    assert_no_flag_injection(name, "release")
    if not _RELEASE_RE.match(name):
        raise GuardError(f'Invalid release: "{name}".', param_name="release")


def validate_chart(chart: str) -> None:
    """Charts are repo references (``bitnami/nginx``), paths or OCI URLs."""
    assert_max_length(chart, PATH_MAX, "chart")
    assert_no_flag_injection(chart, "chart")
    if not chart.strip() or any(ch.isspace() for ch in chart):
        raise GuardError(f'Invalid chart: "{chart}".', param_name="chart")


def _scope(namespace: str | None) -> list[str]:
    if namespace is None:
        return []
    validate_namespace(namespace)
    return ["--namespace", namespace]


def build_list_args(*, namespace: str | None = None, all_namespaces: bool = False) -> list[str]:
    args = ["list", "-o", "json"]
    if all_namespaces:
        return [*args, "--all-namespaces"]
    return args + _scope(namespace)


def build_status_args(release: str, *, namespace: str | None = None) -> list[str]:
    validate_release(release)
    return ["status", release, "-o", "json", *_scope(namespace)]


def _values_args(values_files: Sequence[str], set_values: Sequence[str]) -> list[str]:
    args: list[str] = []
    for path in values_files:
        assert_max_length(path, PATH_MAX, "values")
        assert_no_flag_injection(path, "values")
        args.extend(["-f", path])
    for assignment in set_values:
        assert_max_length(assignment, SHORT_STRING_MAX, "set")
        assert_no_flag_injection(assignment, "set")
        if "=" not in assignment:
            raise GuardError(f'Invalid --set value: "{assignment}". Expected key=value.', param_name="set")
        args.extend(["--set", assignment])
    return args


def build_install_args(
    release: str,
    chart: str,
    *,
    namespace: str | None = None,
    version: str | None = None,
    values_files: Sequence[str] = (),
    set_values: Sequence[str] = (),
    wait: bool = False,
) -> list[str]:
    validate_release(release)
    validate_chart(chart)
    args = ["install", release, chart, "-o", "json", *_scope(namespace)]
    if version is not None:
        assert_no_flag_injection(version, "version")
        args.extend(["--version", version])
    args.extend(_values_args(values_files, set_values))
    if wait:
        args.append("--wait")
    return args


def build_upgrade_args(
    release: str,
    chart: str,
    *,
    namespace: str | None = None,
    install: bool = False,
    values_files: Sequence[str] = (),
    set_values: Sequence[str] = (),
) -> list[str]:
    validate_release(release)
    validate_chart(chart)
    args = ["upgrade", release, chart, "-o", "json", *_scope(namespace)]
    if install:
        args.append("--install")
    args.extend(_values_args(values_files, set_values))
    return args


def build_uninstall_args(release: str, *, namespace: str | None = None) -> list[str]:
    validate_release(release)
    return ["uninstall", release, *_scope(namespace)]
