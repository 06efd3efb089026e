"""Full and compact renderings of ``docker`` results."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, more_line, preview
from clishape.domains.docker.models import (
    ContainerSummary,
    DockerBuild,
    DockerBuildCompact,
    DockerImages,
    DockerImagesCompact,
    DockerLogs,
    DockerLogsCompact,
    DockerPs,
    DockerPsCompact,
    DockerPull,
    DockerPullCompact,
    DockerRun,
    DockerRunCompact,
    ImageSummary,
    PortBinding,
    PullStatus,
)

LOG_EDGE_LINES: int = 5
"""Lines kept at each end of a compact log view."""


def _port(binding: PortBinding) -> str:
    container = "?" if binding.container_port is None else str(binding.container_port)
    if binding.host_port is None:
        return f"{container}/{binding.protocol}"
    return f"{binding.host_port}->{container}/{binding.protocol}"


# ---------------------------------------------------------------------------
# ps
# ---------------------------------------------------------------------------

def format_ps(data: DockerPs) -> str:
    if not data.success:
        return failure_line("docker ps", data.error_type, data.error_message)
    lines = [f"{data.total} containers ({data.running} running, {data.stopped} stopped)"]
    for c in data.containers:
        ports = f" [{', '.join(_port(p) for p in c.ports)}]" if c.ports else ""
        lines.append(f"  {c.state:<10} {c.name} ({c.image}) {c.status}{ports}")
    return "\n".join(lines)


def compact_ps(data: DockerPs) -> DockerPsCompact:
    return DockerPsCompact(
        success=data.success,
        containers=cap(
            ContainerSummary(id=c.id[:12], name=c.name, image=c.image, status=c.status)
            for c in data.containers
        ),
        total=data.total,
        running=data.running,
        stopped=data.stopped,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_ps_compact(data: DockerPsCompact) -> str:
    if not data.success:
        return failure_line("docker ps", data.error_type, data.error_message)
    lines = [f"{data.total} containers ({data.running} running, {data.stopped} stopped)"]
    lines.extend(f"  {c.id} {c.name} ({c.image}) {c.status}" for c in data.containers)
    extra = more_line(data.total, len(data.containers))
    if extra:
        lines.append(extra)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# images
# ---------------------------------------------------------------------------

def format_images(data: DockerImages) -> str:
    if not data.success:
        return failure_line("docker images", data.error_type, data.error_message)
    lines = [f"{data.total} images"]
    for image in data.images:
        lines.append(f"  {image.id} {image.repository}:{image.tag} {image.size} ({image.created})")
    return "\n".join(lines)


def compact_images(data: DockerImages) -> DockerImagesCompact:
    return DockerImagesCompact(
        success=data.success,
        images=cap(
            ImageSummary(id=i.id, repository=i.repository, tag=i.tag, size=i.size)
            for i in data.images
        ),
        total=data.total,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_images_compact(data: DockerImagesCompact) -> str:
    if not data.success:
        return failure_line("docker images", data.error_type, data.error_message)
    lines = [f"{data.total} images"]
    lines.extend(f"  {i.id} {i.repository}:{i.tag} {i.size}" for i in data.images)
    extra = more_line(data.total, len(data.images))
    if extra:
        lines.append(extra)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# build
# ---------------------------------------------------------------------------

def _build_summary(success: bool, image_id: str | None, duration: float | None,
                   steps: int, cached_steps: int) -> str:
    head = "Build succeeded" if success else "Build failed"
    parts = [head]
    if image_id:
        parts.append(image_id)
    if duration is not None:
        parts.append(f"{duration:g}s")
    parts.append(f"{steps} steps, {cached_steps} cached")
    return " | ".join(parts)


def format_build(data: DockerBuild) -> str:
    lines = [_build_summary(data.success, data.image_id, data.duration_seconds,
                            data.steps, data.cached_steps)]
    if not data.success and data.error_type is not None:
        lines.append(f"  error type: {data.error_type.value}")
    lines.extend(f"  {error}" for error in data.errors)
    return "\n".join(lines)


def compact_build(data: DockerBuild) -> DockerBuildCompact:
    return DockerBuildCompact(
        success=data.success,
        image_id=data.image_id,
        duration_seconds=data.duration_seconds,
        steps=data.steps,
        cached_steps=data.cached_steps,
        errors=cap(data.errors),
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_build_compact(data: DockerBuildCompact) -> str:
    line = _build_summary(data.success, data.image_id, data.duration_seconds,
                          data.steps, data.cached_steps)
    if data.success:
        return line
    kind = data.error_type.value if data.error_type is not None else "unknown"
    return f"{line} [{kind}] {data.error_message or ''}".rstrip()


# ---------------------------------------------------------------------------
# logs
# ---------------------------------------------------------------------------

def format_logs(data: DockerLogs) -> str:
    if not data.success:
        return failure_line(f"docker logs {data.container}", data.error_type, data.error_message)
    header = f"{data.container} ({len(data.lines)} lines"
    header += f", truncated from {data.total_lines})" if data.is_truncated else ")"
    return "\n".join([header, *data.lines])


def compact_logs(data: DockerLogs) -> DockerLogsCompact:
    lines = data.lines
    if len(lines) > 2 * LOG_EDGE_LINES:
        head, tail = lines[:LOG_EDGE_LINES], lines[-LOG_EDGE_LINES:]
    else:
        head, tail = lines, ()
    return DockerLogsCompact(
        success=data.success,
        container=data.container,
        head=head,
        tail=tail,
        total_lines=data.total_lines,
        is_truncated=data.is_truncated,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_logs_compact(data: DockerLogsCompact) -> str:
    if not data.success:
        return failure_line(f"docker logs {data.container}", data.error_type, data.error_message)
    lines = [f"{data.container} ({data.total_lines} lines)", *data.head]
    if data.tail:
        lines.append("  ...")
        lines.extend(data.tail)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# pull
# ---------------------------------------------------------------------------

def _pull_line(image: str, tag: str, digest: str | None, status: PullStatus) -> str:
    reference = f"{image}:{tag}"
    if status is PullStatus.ERROR:
        return f"Pull failed for {reference}"
    suffix = f" ({digest[:19]}...)" if digest else ""
    if status is PullStatus.UP_TO_DATE:
        return f"{reference} is up to date{suffix}"
    return f"Pulled {reference}{suffix}"


def format_pull(data: DockerPull) -> str:
    line = _pull_line(data.image, data.tag, data.digest, data.status)
    if data.success:
        if data.digest:
            return f"{line}\n  digest: {data.digest}"
        return line
    kind = data.error_type.value if data.error_type is not None else "unknown"
    return f"{line} [{kind}]\n  {data.error_message or ''}".rstrip()


def compact_pull(data: DockerPull) -> DockerPullCompact:
    return DockerPullCompact(
        success=data.success,
        image=data.image,
        tag=data.tag,
        digest=data.digest,
        status=data.status,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_pull_compact(data: DockerPullCompact) -> str:
    line = _pull_line(data.image, data.tag, data.digest, data.status)
    if data.success:
        return line
    kind = data.error_type.value if data.error_type is not None else "unknown"
    return f"{line} [{kind}]"


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

def _run_line(image: str, container_id: str | None, name: str | None, detached: bool) -> str:
    label = container_id[:12] if container_id else image
    named = f" ({name})" if name else ""
    mode = "detached" if detached else "attached"
    return f"Container {label}{named} started from {image} [{mode}]"


def format_run(data: DockerRun) -> str:
    if not data.success:
        line = failure_line(f"docker run {data.image}", data.error_type, data.error_message)
        return f"{line}\n  exit code: {data.exit_code}"
    lines = [_run_line(data.image, data.container_id, data.name, data.detached)]
    if data.container_id:
        lines.append(f"  id: {data.container_id}")
    lines.extend(data.output)
    return "\n".join(lines)


def compact_run(data: DockerRun) -> DockerRunCompact:
    return DockerRunCompact(
        success=data.success,
        image=data.image,
        detached=data.detached,
        container_id=data.container_id[:12] if data.container_id else None,
        name=data.name,
        exit_code=data.exit_code,
        output=cap(data.output),
        total_output_lines=len(data.output),
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_run_compact(data: DockerRunCompact) -> str:
    if not data.success:
        line = failure_line(f"docker run {data.image}", data.error_type, data.error_message)
        return f"{line} (exit {data.exit_code})"
    lines = [_run_line(data.image, data.container_id, data.name, data.detached), *data.output]
    extra = more_line(data.total_output_lines, len(data.output), "more lines")
    if extra:
        lines.append(extra)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

PS_RENDERER = Renderer(format_ps, compact_ps, format_ps_compact)
IMAGES_RENDERER = Renderer(format_images, compact_images, format_images_compact)
BUILD_RENDERER = Renderer(format_build, compact_build, format_build_compact)
LOGS_RENDERER = Renderer(format_logs, compact_logs, format_logs_compact)
PULL_RENDERER = Renderer(format_pull, compact_pull, format_pull_compact)
RUN_RENDERER = Renderer(format_run, compact_run, format_run_compact)
