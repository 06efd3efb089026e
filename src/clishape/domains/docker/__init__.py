"""``docker`` domain: container, image, build, log, pull and run actions."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import (
    Action,
    Context,
    context_flag,
    context_int,
    context_list,
    require_operand,
    single_operand,
)
from clishape.core.models import RawInvocationResult
from clishape.core.normalize import parse_duration
from clishape.domains.docker import formatters, guards, parsers
from clishape.domains.docker.models import (
    DockerBuild,
    DockerImages,
    DockerLogs,
    DockerPs,
    DockerPull,
    DockerRun,
)
from clishape.exceptions import GuardError

# ---------------------------------------------------------------------------
# Argument builders
# ---------------------------------------------------------------------------

def _ps_args(args: Sequence[str], context: Context) -> list[str]:
    if args:
        raise GuardError("docker ps takes no arguments.", param_name="args")
    return guards.build_ps_args(all_containers=context_flag(context, "all", default=True))


def _images_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_images_args(single_operand(args, context, "repository"))


def _build_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_build_args(
        single_operand(args, context, "path") or ".",
        tag=context.get("tag") or None,
        file=context.get("file") or None,
    )


def _logs_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_logs_args(
        require_operand(args, context, "container"),
        tail=context_int(context, "tail"),
    )


def _pull_args(args: Sequence[str], context: Context) -> list[str]:
    return guards.build_pull_args(
        require_operand(args, context, "image"),
        platform=context.get("platform") or None,
    )


def _env(context: Context) -> dict[str, str]:
    env: dict[str, str] = {}
    for item in context_list(context, "env"):
        key, sep, value = item.partition("=")
        if not sep:
            raise GuardError(f'Invalid env entry: "{item}". Expected KEY=VALUE.', param_name="env")
        env[key] = value
    return env


def _run_args(args: Sequence[str], context: Context) -> list[str]:
    """``run [IMAGE [COMMAND...]]``; options come from the context."""
    image = args[0] if args else context.get("image", "")
    if not image:
        raise GuardError(
            "Missing image.",
            param_name="image",
            hint="Pass it as an argument or with --context image=...",
        )
    return guards.build_run_args(
        image,
        name=context.get("name") or None,
        ports=context_list(context, "ports"),
        volumes=context_list(context, "volumes"),
        env=_env(context),
        detach=context_flag(context, "detach", default=True),
        command=list(args[1:]),
    )


# ---------------------------------------------------------------------------
# Parser adapters
# ---------------------------------------------------------------------------

def _ps(raw: RawInvocationResult, _context: Context) -> DockerPs:
    return parsers.parse_ps(raw.stdout, raw.stderr, raw.exit_code)


def _images(raw: RawInvocationResult, _context: Context) -> DockerImages:
    return parsers.parse_images(raw.stdout, raw.stderr, raw.exit_code)


def _build(raw: RawInvocationResult, context: Context) -> DockerBuild:
    return parsers.parse_build(
        raw.stdout,
        raw.stderr,
        raw.exit_code,
        duration_seconds=parse_duration(context.get("duration")),
    )


def _logs(raw: RawInvocationResult, context: Context) -> DockerLogs:
    return parsers.parse_logs(
        raw.stdout,
        raw.stderr,
        raw.exit_code,
        container=context.get("container", "unknown"),
        limit=context_int(context, "limit"),
    )


def _pull(raw: RawInvocationResult, context: Context) -> DockerPull:
    return parsers.parse_pull(raw.stdout, raw.stderr, raw.exit_code, image=context.get("image", ""))


def _run(raw: RawInvocationResult, context: Context) -> DockerRun:
    # Parsers never raise, so an unrecognised value reads as detached.
    detach = context.get("detach", "").strip().lower()
    return parsers.parse_run(
        raw.stdout,
        raw.stderr,
        raw.exit_code,
        image=context.get("image", ""),
        detached=detach not in {"0", "false", "no", "off"},
        name=context.get("name") or None,
    )


ACTIONS: tuple[Action, ...] = (
    Action("docker", "ps", "docker", _ps_args, _ps, formatters.PS_RENDERER,
           description="List containers (context: all)"),
    Action("docker", "images", "docker", _images_args, _images, formatters.IMAGES_RENDERER,
           description="List images [REPOSITORY]"),
    Action("docker", "build", "docker", _build_args, _build, formatters.BUILD_RENDERER,
           description="Build an image [PATH] (context: tag, file, duration)"),
    Action("docker", "logs", "docker", _logs_args, _logs, formatters.LOGS_RENDERER,
           description="Container logs CONTAINER (context: container, limit, tail)"),
    Action("docker", "pull", "docker", _pull_args, _pull, formatters.PULL_RENDERER,
           description="Pull an image IMAGE (context: image, platform)"),
    Action("docker", "run", "docker", _run_args, _run, formatters.RUN_RENDERER,
           description="Run a container IMAGE [COMMAND...] "
                       "(context: image, name, ports, volumes, env, detach)"),
)

__all__: list[str] = ["ACTIONS"]
