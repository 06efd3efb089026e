"""Argument guards and command-vector builders for ``docker compose``."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.guards import assert_no_flag_injection, assert_positional_args
from clishape.utils.limits import PATH_MAX, SHORT_STRING_MAX, assert_max_length


def _compose_prefix(file: str | None, project: str | None) -> list[str]:
    args = ["compose"]
    if file is not None:
        assert_max_length(file, PATH_MAX, "file")
        assert_no_flag_injection(file, "file")
        args.extend(["-f", file])
    if project is not None:
        assert_max_length(project, SHORT_STRING_MAX, "project")
        assert_no_flag_injection(project, "project")
        args.extend(["-p", project])
    return args


def build_up_args(
    services: Sequence[str] = (),
    *,
    file: str | None = None,
    project: str | None = None,
    build: bool = False,
) -> list[str]:
    assert_positional_args(services, "services")
    args = _compose_prefix(file, project)
    args.extend(["up", "-d"])
    if build:
        args.append("--build")
    args.extend(services)
    return args


def build_down_args(
    *,
    file: str | None = None,
    project: str | None = None,
    volumes: bool = False,
) -> list[str]:
    args = _compose_prefix(file, project)
    args.append("down")
    if volumes:
        args.append("--volumes")
    return args
