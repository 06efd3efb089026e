"""Argument guards and command-vector builders for ``docker``.

Each ``build_*_args`` function validates every caller-supplied value
before returning the argument list, so a returned vector is always safe
to hand to the process runner.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from clishape.core.guards import (
    assert_no_flag_injection,
    assert_positional_args,
    assert_safe_volume_mount,
    assert_valid_port_mapping,
)
from clishape.exceptions import FlagInjectionError
from clishape.utils.limits import ARRAY_MAX, PATH_MAX, SHORT_STRING_MAX, assert_max_length


def validate_image(image: str) -> None:
    assert_max_length(image, SHORT_STRING_MAX, "image")
    assert_no_flag_injection(image, "image")


def validate_container(container: str) -> None:
    assert_max_length(container, SHORT_STRING_MAX, "container")
    assert_no_flag_injection(container, "container")


def validate_env_key(key: str) -> None:
    """Environment keys must not be flags and must not embed ``=``."""
    assert_max_length(key, SHORT_STRING_MAX, "env")
    assert_no_flag_injection(key, "env")
    if "=" in key or not key.strip():
        raise FlagInjectionError(f'Invalid env key: "{key}".', param_name="env")


def build_run_args(
    image: str,
    *,
    name: str | None = None,
    ports: Sequence[str] = (),
    volumes: Sequence[str] = (),
    env: Mapping[str, str] | None = None,
    detach: bool = True,
    command: Sequence[str] = (),
) -> list[str]:
    """Validate and assemble ``docker run`` arguments."""
    validate_image(image)
    args = ["run"]
    if detach:
        args.append("-d")
    if name is not None:
        validate_container(name)
        args.extend(["--name", name])

    assert_max_length(ports, ARRAY_MAX, "ports")
    for mapping in ports:
        assert_valid_port_mapping(mapping)
        args.extend(["-p", mapping])

    assert_max_length(volumes, ARRAY_MAX, "volumes")
    for mount in volumes:
        assert_safe_volume_mount(mount)
        args.extend(["-v", mount])

    for key, value in (env or {}).items():
        validate_env_key(key)
        args.extend(["-e", f"{key}={value}"])

    args.append(image)
    assert_positional_args(command, "command")
    args.extend(command)
    return args


def build_ps_args(*, all_containers: bool = True) -> list[str]:
    args = ["ps", "--format", "json"]
    if all_containers:
        args.insert(1, "-a")
    return args


def build_images_args(repository: str | None = None) -> list[str]:
    args = ["images", "--format", "json"]
    if repository:
        validate_image(repository)
        args.append(repository)
    return args


def build_build_args(
    context: str,
    *,
    tag: str | None = None,
    file: str | None = None,
) -> list[str]:
    assert_max_length(context, PATH_MAX, "context")
    assert_no_flag_injection(context, "context")
    args = ["build"]
    if tag is not None:
        validate_image(tag)
        args.extend(["-t", tag])
    if file is not None:
        assert_max_length(file, PATH_MAX, "file")
        assert_no_flag_injection(file, "file")
        args.extend(["-f", file])
    args.append(context)
    return args


def build_logs_args(container: str, *, tail: int | None = None) -> list[str]:
    validate_container(container)
    args = ["logs"]
    if tail is not None:
        args.extend(["--tail", str(max(tail, 0))])
    args.append(container)
    return args


def build_pull_args(image: str, *, platform: str | None = None) -> list[str]:
    validate_image(image)
    args = ["pull"]
    if platform is not None:
        assert_no_flag_injection(platform, "platform")
        args.extend(["--platform", platform])
    args.append(image)
    return args
