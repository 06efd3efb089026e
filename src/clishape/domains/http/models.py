"""Result records for HTTP requests made with ``curl -i``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class HttpErrorType(str, Enum):
    DNS = "dns"
    CONNECTION_REFUSED = "connection-refused"
    TIMEOUT = "timeout"
    SSL = "ssl"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class RedirectHop:
    status: int
    location: str


@dataclass(frozen=True, slots=True)
class TimingDetails:
    """Seconds from the start of the request until each transfer phase ended."""

    namelookup: float
    connect: float
    appconnect: float | None = None
    """TLS handshake done; ``None`` for plain HTTP."""

    pretransfer: float | None = None
    starttransfer: float | None = None


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """The final response of a request, after any redirects."""

    success: bool
    """``True`` when curl completed the exchange; 4xx/5xx statuses still succeed."""

    status: int | None
    status_text: str
    http_version: str | None
    headers: Mapping[str, str] = field(default_factory=dict)
    """Read-only; names are lower-cased and a repeated header keeps its last value."""

    body: str | None = None
    size: int = 0
    """Body size in bytes."""

    content_type: str | None = None
    content_length: int | None = None
    elapsed_seconds: float | None = None
    timing: TimingDetails | None = None
    redirects: tuple[RedirectHop, ...] = ()
    final_url: str | None = None
    upload_size: int | None = None
    """Bytes sent; ``None`` when nothing was uploaded."""

    scheme: str | None = None
    tls_verify_result: int | None = None
    """curl's ``ssl_verify_result``; ``0`` means the certificate verified."""

    error_type: HttpErrorType | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True, slots=True)
class HttpResponseCompact:
    success: bool
    status: int | None
    status_text: str
    http_version: str | None
    header_count: int
    body_preview: str | None
    size: int
    content_type: str | None
    content_length: int | None
    elapsed_seconds: float | None
    redirects: tuple[RedirectHop, ...]
    final_url: str | None
    error_type: HttpErrorType | None = None
    error_message: str | None = None
