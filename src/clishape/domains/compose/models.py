"""Result records for ``docker compose up`` / ``down``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ComposeErrorType(str, Enum):
    NO_CONFIG = "no-config"
    PORT_CONFLICT = "port-conflict"
    IMAGE_NOT_FOUND = "image-not-found"
    DAEMON_UNAVAILABLE = "daemon-unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ComposeEntity:
    """One container, network or volume and its most-advanced phase."""

    kind: str
    """``container``, ``network``, ``volume`` or ``image``."""

    name: str
    phase: str
    """Most-advanced lifecycle phase observed, e.g. ``Started``."""


@dataclass(frozen=True, slots=True)
class ComposeUp:
    success: bool
    services: tuple[str, ...]
    """Container names, each listed once, in first-seen order."""

    entities: tuple[ComposeEntity, ...]
    started: int
    networks_created: int
    volumes_created: int
    error_type: ComposeErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class ComposeUpCompact:
    success: bool
    services: tuple[str, ...]
    started: int
    networks_created: int
    volumes_created: int
    error_type: ComposeErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class ComposeDown:
    success: bool
    entities: tuple[ComposeEntity, ...]
    stopped: int
    """Containers that reached ``Stopped`` (or a later phase)."""

    removed: int
    """Containers, networks and volumes that reached ``Removed``."""

    error_type: ComposeErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class ComposeDownCompact:
    success: bool
    stopped: int
    removed: int
    error_type: ComposeErrorType | None = None
    error_message: str | None = None
