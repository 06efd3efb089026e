"""Result records for ``docker`` actions.

Every full result carries ``success``, ``error_type`` and
``error_message``; ``error_type`` is set whenever ``success`` is
``False``.  Compact records keep every scalar of their source and only
reduce lists and blobs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Error taxonomies
# ---------------------------------------------------------------------------

class DockerErrorType(str, Enum):
    """Failures shared by ``ps``, ``images`` and ``logs``."""

    DAEMON_UNAVAILABLE = "daemon-unavailable"
    PERMISSION_DENIED = "permission-denied"
    NOT_FOUND = "not-found"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class BuildErrorType(str, Enum):
    DOCKERFILE_NOT_FOUND = "dockerfile-not-found"
    STEP_FAILED = "step-failed"
    DAEMON_UNAVAILABLE = "daemon-unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class PullErrorType(str, Enum):
    AUTH = "auth"
    NOT_FOUND = "not-found"
    NETWORK_TIMEOUT = "network-timeout"
    RATE_LIMIT = "rate-limit"
    UNKNOWN = "unknown"


class PullStatus(str, Enum):
    PULLED = "pulled"
    UP_TO_DATE = "up-to-date"
    ERROR = "error"


class RunErrorType(str, Enum):
    IMAGE_NOT_FOUND = "image-not-found"
    CONFLICT = "conflict"
    DAEMON_UNAVAILABLE = "daemon-unavailable"
    PERMISSION_DENIED = "permission-denied"
    COMMAND_FAILED = "command-failed"
    """The container started and its command exited non-zero."""

    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# docker ps
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PortBinding:
    """One published or exposed port of a container."""

    container_port: int | None
    """Port inside the container; ``None`` if the text was not numeric."""

    protocol: str
    """``tcp`` (default), ``udp`` or ``sctp``."""

    host_port: int | None = None
    """Published host port; ``None`` for exposed-only ports."""

    host_ip: str | None = None
    """Bound host address (``0.0.0.0``, ``::``) when published."""


@dataclass(frozen=True, slots=True)
class Container:
    id: str
    name: str
    image: str
    status: str
    """Human status text, e.g. ``Up 2 hours``."""

    state: str
    """Machine state: ``running``, ``exited``, ``created``, ``paused`` …"""

    ports: tuple[PortBinding, ...]
    created: str


@dataclass(frozen=True, slots=True)
class DockerPs:
    success: bool
    containers: tuple[Container, ...]
    total: int
    running: int
    stopped: int
    error_type: DockerErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class ContainerSummary:
    id: str
    """12-character container id."""

    name: str
    image: str
    status: str


@dataclass(frozen=True, slots=True)
class DockerPsCompact:
    success: bool
    containers: tuple[ContainerSummary, ...]
    total: int
    running: int
    stopped: int
    error_type: DockerErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# docker images
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Image:
    id: str
    """12-character image id."""

    repository: str
    tag: str
    size: str
    """Size as printed by docker, e.g. ``187MB``."""

    size_bytes: int | None
    """:attr:`size` converted to bytes."""

    created: str


@dataclass(frozen=True, slots=True)
class DockerImages:
    success: bool
    images: tuple[Image, ...]
    total: int
    error_type: DockerErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class ImageSummary:
    id: str
    repository: str
    tag: str
    size: str


@dataclass(frozen=True, slots=True)
class DockerImagesCompact:
    success: bool
    images: tuple[ImageSummary, ...]
    total: int
    error_type: DockerErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# docker build
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DockerBuild:
    success: bool
    image_id: str | None
    """12-character id of the built image, when reported."""

    duration_seconds: float | None
    steps: int
    """Distinct build steps observed (BuildKit ``#N`` or classic ``Step N/M``)."""

    cached_steps: int
    errors: tuple[str, ...]
    error_type: BuildErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class DockerBuildCompact:
    success: bool
    image_id: str | None
    duration_seconds: float | None
    steps: int
    cached_steps: int
    errors: tuple[str, ...]
    error_type: BuildErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# docker logs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DockerLogs:
    success: bool
    container: str
    lines: tuple[str, ...]
    total_lines: int
    """Lines produced before any limit was applied."""

    is_truncated: bool
    error_type: DockerErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class DockerLogsCompact:
    success: bool
    container: str
    head: tuple[str, ...]
    tail: tuple[str, ...]
    total_lines: int
    is_truncated: bool
    error_type: DockerErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# docker pull
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DockerPull:
    success: bool
    image: str
    """Image reference without tag (registry and port kept)."""

    tag: str
    digest: str | None
    status: PullStatus
    error_type: PullErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class DockerPullCompact:
    success: bool
    image: str
    tag: str
    digest: str | None
    status: PullStatus
    error_type: PullErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# docker run
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DockerRun:
    success: bool
    image: str
    detached: bool
    container_id: str | None
    """Full id printed by a detached run; ``None`` when none was printed."""

    name: str | None = None
    exit_code: int = 0
    output: tuple[str, ...] = ()
    """Non-blank stdout lines of an attached run."""

    error_type: RunErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class DockerRunCompact:
    success: bool
    image: str
    detached: bool
    container_id: str | None
    """Short (12 character) id."""

    name: str | None
    exit_code: int
    output: tuple[str, ...]
    total_output_lines: int
    error_type: RunErrorType | None = None
    error_message: str | None = None
