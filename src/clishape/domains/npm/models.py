"""Result records for ``npm install`` and ``npm audit``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NpmErrorType(str, Enum):
    ERESOLVE = "eresolve"
    ENOENT = "enoent"
    E404 = "e404"
    EACCES = "eacces"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class VulnerabilityCounts:
    total: int = 0
    critical: int = 0
    high: int = 0
    moderate: int = 0
    low: int = 0
    info: int = 0


# ---------------------------------------------------------------------------
# npm install
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PackageChange:
    name: str
    version: str
    action: str
    """``added``, ``removed`` or ``updated``."""


@dataclass(frozen=True, slots=True)
class NpmInstall:
    success: bool
    added: int
    removed: int
    changed: int
    audited: int
    duration_seconds: float | None
    vulnerabilities: VulnerabilityCounts | None
    """``None`` when npm printed no audit summary."""

    funding: int | None
    packages: tuple[PackageChange, ...] = ()
    """Per-package changes, when npm reported them."""

    error_type: NpmErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class NpmInstallCompact:
    success: bool
    added: int
    removed: int
    changed: int
    audited: int
    duration_seconds: float | None
    vulnerabilities: VulnerabilityCounts | None
    funding: int | None
    error_type: NpmErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# npm audit
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Vulnerability:
    name: str
    severity: str
    title: str
    url: str | None = None
    range: str | None = None
    fix_available: bool = False
    cve: str | None = None


@dataclass(frozen=True, slots=True)
class NpmAudit:
    success: bool
    vulnerabilities: tuple[Vulnerability, ...]
    summary: VulnerabilityCounts
    error_type: NpmErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class VulnerabilitySummary:
    name: str
    severity: str


@dataclass(frozen=True, slots=True)
class NpmAuditCompact:
    success: bool
    vulnerabilities: tuple[VulnerabilitySummary, ...]
    summary: VulnerabilityCounts
    error_type: NpmErrorType | None = None
    error_message: str | None = None
