"""Argument guards and command-vector builders for ``dotnet``."""

from __future__ import annotations

import re

from clishape.core.guards import assert_no_flag_injection
from clishape.exceptions import GuardError
from clishape.utils.limits import PATH_MAX, SHORT_STRING_MAX, assert_max_length

_CONFIGURATION = re.compile(r"^[A-Za-z][\w.-]*$")


def validate_project(project: str) -> None:
    """A project or solution file, or a directory that contains one."""
    assert_max_length(project, PATH_MAX, "project")
    assert_no_flag_injection(project, "project")
    if not project.strip():
        raise GuardError("Project path must not be empty.", param_name="project")


def build_build_args(
    project: str | None = None,
    *,
    configuration: str | None = None,
    framework: str | None = None,
    no_restore: bool = False,
) -> list[str]:
    args = ["build"]
    if project is not None:
        validate_project(project)
        args.append(project)
    for flag, value, name in (
        ("--configuration", configuration, "configuration"),
        ("--framework", framework, "framework"),
    ):
        if value is None:
            continue
        assert_max_length(value, SHORT_STRING_MAX, name)
        if not _CONFIGURATION.match(value):
            raise GuardError(f'Invalid {name}: "{value}".', param_name=name)
        args.extend([flag, value])
    if no_restore:
        args.append("--no-restore")
    return args
