"""Argument guards and command-vector builders for ``git``."""

from __future__ import annotations

import re

from clishape.core.guards import assert_no_flag_injection
from clishape.domains.git.parsers import FIELD_SEPARATOR
from clishape.exceptions import GuardError
from clishape.utils.limits import SHORT_STRING_MAX, assert_max_length

LOG_FORMAT: str = FIELD_SEPARATOR.join(("%H", "%h", "%an", "%ae", "%aI", "%D", "%s"))
"""``--format`` value whose output :func:`parse_log` reads."""

DEFAULT_LOG_COUNT: int = 20

# Rules from git-check-ref-format(1), without the single-component rule.
_BAD_REF = re.compile(r"\.\.|[\x00-\x20\x7f~^:?*\[\\]|@\{|//|^/|/$|\.$|\.lock$|/\.")


def validate_ref(value: str, param_name: str = "branch") -> None:
    """Reject refs git itself would refuse, and refs that look like flags."""
    assert_max_length(value, SHORT_STRING_MAX, param_name)
    assert_no_flag_injection(value, param_name)
    if not value or value == "@" or _BAD_REF.search(value):
        raise GuardError(f'Invalid {param_name}: "{value}".', param_name=param_name)


def validate_remote(value: str) -> None:
    assert_max_length(value, SHORT_STRING_MAX, "remote")
    assert_no_flag_injection(value, "remote")
    if not value.strip():
        raise GuardError("Remote name must not be empty.", param_name="remote")


def build_status_args() -> list[str]:
    return ["status", "--porcelain=v1", "--branch"]


def build_log_args(*, max_count: int = DEFAULT_LOG_COUNT, ref: str | None = None) -> list[str]:
    args = ["log", f"--format={LOG_FORMAT}", f"--max-count={max(max_count, 1)}"]
    if ref is not None:
        validate_ref(ref, "ref")
        args.append(ref)
    return args


def build_push_args(
    remote: str = "origin",
    branch: str | None = None,
    *,
    set_upstream: bool = False,
    force_with_lease: bool = False,
) -> list[str]:
    validate_remote(remote)
    args = ["push"]
    if set_upstream:
        args.append("--set-upstream")
    if force_with_lease:
        args.append("--force-with-lease")
    args.append(remote)
    if branch:
        validate_ref(branch)
        args.append(branch)
    return args


def build_pull_args(
    remote: str | None = None,
    branch: str | None = None,
    *,
    rebase: bool = False,
) -> list[str]:
    args = ["pull"]
    if rebase:
        args.append("--rebase")
    if remote is not None:
        validate_remote(remote)
        args.append(remote)
        if branch:
            validate_ref(branch)
            args.append(branch)
    return args
