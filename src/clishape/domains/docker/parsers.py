"""Parsers for ``docker ps``, ``images``, ``build``, ``logs``, ``pull`` and ``run``.

``ps`` and ``images`` accept either ``--format json`` output (one JSON
object per line) or the default table; the JSON form is tried first.
All parsers are total: malformed input degrades to ``success=False`` or
an empty result, never an exception.
"""

from __future__ import annotations

import logging
import re

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import (
    always,
    has_json_object,
    iter_json_lines,
    parse_duration,
    parse_size,
    run_strategies,
    short_id,
    split_columns,
    to_str,
)
from clishape.domains.docker.models import (
    BuildErrorType,
    Container,
    DockerBuild,
    DockerErrorType,
    DockerImages,
    DockerLogs,
    DockerPs,
    DockerPull,
    DockerRun,
    Image,
    PortBinding,
    PullErrorType,
    PullStatus,
    RunErrorType,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error rules
# ---------------------------------------------------------------------------

_DOCKER_RULES: tuple[ErrorRule[DockerErrorType], ...] = (
    rule(r"timed out", DockerErrorType.TIMEOUT),
    rule(r"cannot connect to the docker daemon|is the docker daemon running|error during connect", DockerErrorType.DAEMON_UNAVAILABLE),
    rule(r"permission denied", DockerErrorType.PERMISSION_DENIED),
    rule(r"no such (?:container|image|object)|not found", DockerErrorType.NOT_FOUND),
)

_BUILD_RULES: tuple[ErrorRule[BuildErrorType], ...] = (
    rule(r"timed out", BuildErrorType.TIMEOUT),
    rule(r"cannot connect to the docker daemon|is the docker daemon running", BuildErrorType.DAEMON_UNAVAILABLE),
    rule(r"failed to read dockerfile|dockerfile: no such file|cannot locate specified dockerfile|unable to prepare context", BuildErrorType.DOCKERFILE_NOT_FOUND),
    rule(r"did not complete successfully|returned a non-zero code|failed to solve|executor failed running", BuildErrorType.STEP_FAILED),
)

# Rate limiting before not-found: registries answer "toomanyrequests" with
# text that may also mention the repository.
_PULL_RULES: tuple[ErrorRule[PullErrorType], ...] = (
    rule(r"toomanyrequests|rate limit", PullErrorType.RATE_LIMIT),
    rule(r"unauthorized|authentication required|denied: requested access|no basic auth credentials", PullErrorType.AUTH),
    rule(r"manifest unknown|repository does not exist|not found|no such image", PullErrorType.NOT_FOUND),
    rule(r"timed out|timeout|request canceled while waiting for connection|i/o timeout|connection refused|no such host|temporary failure in name resolution", PullErrorType.NETWORK_TIMEOUT),
)


_RUN_RULES: tuple[ErrorRule[RunErrorType], ...] = (
    rule(r"timed out", RunErrorType.TIMEOUT),
    rule(r"is already in use by container|conflict", RunErrorType.CONFLICT),
    rule(r"pull access denied|manifest unknown|repository does not exist|no such image", RunErrorType.IMAGE_NOT_FOUND),
    rule(r"cannot connect to the docker daemon|is the docker daemon running", RunErrorType.DAEMON_UNAVAILABLE),
    rule(r"permission denied", RunErrorType.PERMISSION_DENIED),
)


def _failure_message(stdout: str, stderr: str) -> str:
    return first_error_line(stderr or stdout)


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------

_PUBLISHED_PORT = re.compile(r"^(?:(?P<ip>.*):)?(?P<host>[^:]+)->(?P<container>[^/]+)(?:/(?P<proto>\w+))?$")
_EXPOSED_PORT = re.compile(r"^(?P<container>[^/]+)(?:/(?P<proto>\w+))?$")
_PORT_RANGE = re.compile(r"^(?P<start>[0-9]+)-(?P<end>[0-9]+)$")


def _port_numbers(text: str) -> list[int | None]:
    """``"80"`` -> ``[80]``, ``"8000-8002"`` -> ``[8000, 8001, 8002]``.

    Non-numeric text yields ``[None]`` so the entry is still reported.
    """
    text = text.strip()
    if text.isascii() and text.isdigit():
        return [int(text)]
    span = _PORT_RANGE.match(text)
    if span is not None:
        start, end = int(span.group("start")), int(span.group("end"))
        if start <= end:
            return list(range(start, end + 1))
    return [None]


def parse_ports(text: str) -> tuple[PortBinding, ...]:
    """Parse docker's ``Ports`` column.

    ``"0.0.0.0:8080->80/tcp, :::8080->80/tcp"`` yields one binding per
    entry, in order.  ``"443->443/tcp"`` has no host address.  A range
    such as ``"0.0.0.0:8000-8001->8000-8001/tcp"`` yields one binding per
    port.  ``"53/udp"`` is an exposed-only port.  Protocol defaults to
    ``tcp``.
    """
    bindings: list[PortBinding] = []
    for entry in (part.strip() for part in text.split(",")):
        if not entry:
            continue
        published = _PUBLISHED_PORT.match(entry)
        if published is not None:
            protocol = published.group("proto") or "tcp"
            host_ip = published.group("ip") or None
            hosts = _port_numbers(published.group("host"))
            containers = _port_numbers(published.group("container"))
            if len(hosts) != len(containers):
                # Mismatched spans: keep the first port of each side.
                hosts, containers = hosts[:1], containers[:1]
            bindings.extend(
                PortBinding(
                    container_port=container,
                    protocol=protocol,
                    host_port=host,
                    host_ip=host_ip,
                )
                for host, container in zip(hosts, containers)
            )
            continue
        exposed = _EXPOSED_PORT.match(entry)
        if exposed is not None:
            protocol = exposed.group("proto") or "tcp"
            bindings.extend(
                PortBinding(container_port=container, protocol=protocol)
                for container in _port_numbers(exposed.group("container"))
            )
    return tuple(bindings)


# ---------------------------------------------------------------------------
# docker ps
# ---------------------------------------------------------------------------

_STATE_FROM_STATUS = (
    (re.compile(r"^up\b.*\(paused\)", re.IGNORECASE), "paused"),
    (re.compile(r"^up\b", re.IGNORECASE), "running"),
    (re.compile(r"^exited\b", re.IGNORECASE), "exited"),
    (re.compile(r"^created\b", re.IGNORECASE), "created"),
    (re.compile(r"^restarting\b", re.IGNORECASE), "restarting"),
    (re.compile(r"^removal in progress", re.IGNORECASE), "removing"),
    (re.compile(r"^dead\b", re.IGNORECASE), "dead"),
)


def _state_from_status(status: str) -> str:
    for pattern, state in _STATE_FROM_STATUS:
        if pattern.search(status):
            return state
    return "unknown"


def _containers_from_json(text: str) -> tuple[Container, ...] | None:
    records = list(iter_json_lines(text))
    if not records:
        return None
    containers = []
    for record in records:
        status = to_str(record.get("Status"), "")
        state = to_str(record.get("State"), "") or _state_from_status(status)
        containers.append(
            Container(
                id=to_str(record.get("ID")),
                name=to_str(record.get("Names")),
                image=to_str(record.get("Image")),
                status=status or "unknown",
                state=state.lower(),
                ports=parse_ports(to_str(record.get("Ports"), "")),
                created=to_str(record.get("RunningFor") or record.get("CreatedAt")),
            )
        )
    return tuple(containers)


def _containers_from_table(text: str) -> tuple[Container, ...] | None:
    if not text.lstrip().startswith("CONTAINER ID"):
        return None
    containers = []
    for row in split_columns(text):
        status = row.get("STATUS", "")
        containers.append(
            Container(
                id=row.get("CONTAINER ID") or "unknown",
                name=row.get("NAMES") or "unknown",
                image=row.get("IMAGE") or "unknown",
                status=status or "unknown",
                state=_state_from_status(status),
                ports=parse_ports(row.get("PORTS", "")),
                created=row.get("CREATED") or "unknown",
            )
        )
    return tuple(containers)


def parse_ps(stdout: str, stderr: str, exit_code: int) -> DockerPs:
    """Parse ``docker ps -a`` output (JSON lines or table)."""
    if exit_code != 0:
        return DockerPs(
            success=False,
            containers=(),
            total=0,
            running=0,
            stopped=0,
            error_type=classify(f"{stdout}\n{stderr}", _DOCKER_RULES, DockerErrorType.UNKNOWN),
            error_message=_failure_message(stdout, stderr),
        )

    containers = run_strategies(
        stdout,
        (
            (has_json_object, _containers_from_json),
            (always, _containers_from_table),
        ),
    ) or ()
    running = sum(1 for c in containers if c.state == "running")
    return DockerPs(
        success=True,
        containers=containers,
        total=len(containers),
        running=running,
        stopped=len(containers) - running,
    )


# ---------------------------------------------------------------------------
# docker images
# ---------------------------------------------------------------------------

def _image(id_: str, repository: str, tag: str, size: str, created: str) -> Image:
    return Image(
        id=short_id(id_) or "unknown",
        repository=repository or "<none>",
        tag=tag or "<none>",
        size=size or "unknown",
        size_bytes=parse_size(size),
        created=created or "unknown",
    )


def _images_from_json(text: str) -> tuple[Image, ...] | None:
    records = list(iter_json_lines(text))
    if not records:
        return None
    return tuple(
        _image(
            to_str(record.get("ID"), ""),
            to_str(record.get("Repository"), ""),
            to_str(record.get("Tag"), ""),
            to_str(record.get("Size"), ""),
            to_str(record.get("CreatedSince") or record.get("CreatedAt"), ""),
        )
        for record in records
    )


def _images_from_table(text: str) -> tuple[Image, ...] | None:
    if not text.lstrip().startswith("REPOSITORY"):
        return None
    return tuple(
        _image(
            row.get("IMAGE ID", ""),
            row.get("REPOSITORY", ""),
            row.get("TAG", ""),
            row.get("SIZE", ""),
            row.get("CREATED", ""),
        )
        for row in split_columns(text)
    )


def parse_images(stdout: str, stderr: str, exit_code: int) -> DockerImages:
    """Parse ``docker images`` output (JSON lines or table)."""
    if exit_code != 0:
        return DockerImages(
            success=False,
            images=(),
            total=0,
            error_type=classify(f"{stdout}\n{stderr}", _DOCKER_RULES, DockerErrorType.UNKNOWN),
            error_message=_failure_message(stdout, stderr),
        )
    images = run_strategies(
        stdout,
        (
            (has_json_object, _images_from_json),
            (always, _images_from_table),
        ),
    ) or ()
    return DockerImages(success=True, images=images, total=len(images))


# ---------------------------------------------------------------------------
# docker build
# ---------------------------------------------------------------------------

_BUILDKIT_STEP = re.compile(r"^#(\d+)\s")
_BUILDKIT_CACHED = re.compile(r"^#(\d+)\s+CACHED\b")
_CLASSIC_STEP = re.compile(r"^Step\s+(\d+)/\d+\s*:")
_CLASSIC_CACHED = re.compile(r"^\s*--->\s+Using cache")
_IMAGE_ID = re.compile(r"writing image (sha256:[0-9a-f]+)|Successfully built ([0-9a-f]+)", re.IGNORECASE)
_BUILD_TIME = re.compile(r"^\[\+\]\s+Building\s+([\d.]+s)")
_BUILD_ERROR = re.compile(r"^(?:#\d+\s+)?(?:ERROR|error)(?:\b|:)")


def parse_build(
    stdout: str,
    stderr: str,
    exit_code: int,
    *,
    duration_seconds: float | None = None,
) -> DockerBuild:
    """Parse ``docker build`` output (BuildKit or classic builder).

    BuildKit writes progress to stderr, so both streams are scanned.
    *duration_seconds*, when the caller measured it, overrides the
    ``[+] Building 12.5s`` line.
    """
    text = f"{stdout}\n{stderr}"
    step_ids: set[str] = set()
    cached_ids: set[str] = set()
    classic_cached = 0
    image_id: str | None = None
    reported_duration: float | None = None
    errors: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        timing = _BUILD_TIME.match(line)
        if timing is not None:
            reported_duration = parse_duration(timing.group(1))
        cached = _BUILDKIT_CACHED.match(line)
        if cached is not None:
            cached_ids.add(cached.group(1))

        step = _BUILDKIT_STEP.match(line)
        classic = _CLASSIC_STEP.match(line)
        if step is not None:
            step_ids.add(f"#{step.group(1)}")
        elif classic is not None:
            step_ids.add(f"step{classic.group(1)}")
        elif _CLASSIC_CACHED.match(line):
            classic_cached += 1

        found = _IMAGE_ID.search(line)
        if found is not None:
            image_id = short_id(found.group(1) or found.group(2))
        if _BUILD_ERROR.match(line) and line not in errors:
            errors.append(line)

    success = exit_code == 0
    duration = duration_seconds if duration_seconds is not None else reported_duration
    if success:
        return DockerBuild(
            success=True,
            image_id=image_id,
            duration_seconds=duration,
            steps=len(step_ids),
            cached_steps=len(cached_ids) + classic_cached,
            errors=tuple(errors),
        )

    if not errors:
        errors.append(_failure_message(stdout, stderr))
    return DockerBuild(
        success=False,
        image_id=None,
        duration_seconds=duration,
        steps=len(step_ids),
        cached_steps=len(cached_ids) + classic_cached,
        errors=tuple(errors),
        error_type=classify(text, _BUILD_RULES, BuildErrorType.UNKNOWN),
        error_message=errors[0],
    )


# ---------------------------------------------------------------------------
# docker logs
# ---------------------------------------------------------------------------

def parse_logs(
    stdout: str,
    stderr: str,
    exit_code: int,
    *,
    container: str,
    limit: int | None = None,
) -> DockerLogs:
    """Parse ``docker logs`` output.

    Containers log to both streams, so stdout and stderr lines are both
    kept (stdout first).  With *limit*, only the first *limit* lines are
    kept and :attr:`DockerLogs.is_truncated` is set.
    """
    if exit_code != 0:
        return DockerLogs(
            success=False,
            container=container,
            lines=(),
            total_lines=0,
            is_truncated=False,
            error_type=classify(f"{stdout}\n{stderr}", _DOCKER_RULES, DockerErrorType.UNKNOWN),
            error_message=_failure_message(stdout, stderr),
        )

    lines = [line for line in f"{stdout}\n{stderr}".splitlines() if line.strip()]
    total = len(lines)
    truncated = limit is not None and 0 <= limit < total
    if truncated:
        lines = lines[:limit]
    return DockerLogs(
        success=True,
        container=container,
        lines=tuple(lines),
        total_lines=total,
        is_truncated=truncated,
    )


# ---------------------------------------------------------------------------
# docker pull
# ---------------------------------------------------------------------------

_DIGEST = re.compile(r"Digest:\s*(sha256:[0-9a-f]+)", re.IGNORECASE)


def split_image_reference(reference: str) -> tuple[str, str]:
    """Split ``[registry[:port]/]name[:tag][@digest]`` into ``(image, tag)``.

    A colon inside the registry host (``localhost:5000/app``) is not a
    tag separator.  The tag defaults to ``latest``.
    """
    ref = reference.strip().split("@", 1)[0]
    last_slash = ref.rfind("/")
    colon = ref.rfind(":")
    if colon > last_slash:
        return ref[:colon], ref[colon + 1:] or "latest"
    return ref, "latest"


def parse_pull(stdout: str, stderr: str, exit_code: int, *, image: str) -> DockerPull:
    """Parse ``docker pull <image>`` output."""
    name, tag = split_image_reference(image)
    text = f"{stdout}\n{stderr}"
    digest_match = _DIGEST.search(text)
    digest = digest_match.group(1) if digest_match else None

    if exit_code != 0:
        return DockerPull(
            success=False,
            image=name,
            tag=tag,
            digest=digest,
            status=PullStatus.ERROR,
            error_type=classify(text, _PULL_RULES, PullErrorType.UNKNOWN),
            error_message=_failure_message(stdout, stderr),
        )

    status = PullStatus.UP_TO_DATE if "image is up to date" in text.lower() else PullStatus.PULLED
    return DockerPull(success=True, image=name, tag=tag, digest=digest, status=status)


# ---------------------------------------------------------------------------
# docker run
# ---------------------------------------------------------------------------

_CONTAINER_ID = re.compile(r"^[0-9a-f]{12,64}$")

# docker's own failures; any other non-zero code belongs to the container.
_DOCKER_RUN_EXIT_CODES = frozenset({125, 126, 127})


def parse_run(
    stdout: str,
    stderr: str,
    exit_code: int,
    *,
    image: str,
    detached: bool = True,
    name: str | None = None,
) -> DockerRun:
    """Parse ``docker run`` output.

    A detached run prints the new container id as its last stdout line.
    An attached run prints whatever the container writes; those lines are
    kept in :attr:`DockerRun.output`.
    """
    lines = [line for line in stdout.splitlines() if line.strip()]
    last = lines[-1].strip() if lines else ""
    container_id = last if detached and _CONTAINER_ID.match(last) else None
    output = () if detached else tuple(lines)

    if exit_code != 0:
        fallback = (
            RunErrorType.UNKNOWN if exit_code in _DOCKER_RUN_EXIT_CODES else RunErrorType.COMMAND_FAILED
        )
        return DockerRun(
            success=False,
            image=image,
            detached=detached,
            container_id=container_id,
            name=name,
            exit_code=exit_code,
            output=output,
            error_type=classify(f"{stdout}\n{stderr}", _RUN_RULES, fallback),
            error_message=_failure_message(stdout, stderr),
        )

    return DockerRun(
        success=True,
        image=image,
        detached=detached,
        container_id=container_id,
        name=name,
        output=output,
    )
