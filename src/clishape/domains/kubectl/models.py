"""Result records for ``kubectl get``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class KubectlErrorType(str, Enum):
    NOT_FOUND = "not-found"
    FORBIDDEN = "forbidden"
    CONNECTION_REFUSED = "connection-refused"
    UNKNOWN_RESOURCE = "unknown-resource"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class K8sResource:
    """One object returned by ``kubectl get``."""

    kind: str
    name: str
    namespace: str | None = None
    status: str | None = None
    """``status.phase`` for JSON output, the ``STATUS`` column for tables."""

    created: str | None = None
    """``metadata.creationTimestamp``; tables only carry a relative age."""

    age: str | None = None
    labels: Mapping[str, str] = field(default_factory=dict)
    """Read-only; the mapping passed in is copied."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))


@dataclass(frozen=True, slots=True)
class KubectlGet:
    success: bool
    resource: str
    namespace: str | None
    items: tuple[K8sResource, ...]
    total: int
    error_type: KubectlErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class KubectlGetCompact:
    success: bool
    resource: str
    namespace: str | None
    names: tuple[str, ...]
    total: int
    error_type: KubectlErrorType | None = None
    error_message: str | None = None
