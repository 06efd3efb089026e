"""Result records for ``helm``.

Each helm action has its own record carrying a literal ``action`` tag,
and :data:`HelmResult` is their union.  A list result therefore never
has a ``notes`` field and an uninstall never has ``releases``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union


class HelmErrorType(str, Enum):
    RELEASE_NOT_FOUND = "release-not-found"
    ALREADY_EXISTS = "already-exists"
    CHART_NOT_FOUND = "chart-not-found"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HelmRelease:
    name: str
    namespace: str
    revision: int
    status: str
    chart: str
    app_version: str | None = None
    updated: str | None = None


@dataclass(frozen=True, slots=True)
class HelmList:
    action: Literal["list"] = field(default="list", init=False)
    success: bool = True
    namespace: str | None = None
    releases: tuple[HelmRelease, ...] = ()
    total: int = 0
    error_type: HelmErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class HelmListCompact:
    action: Literal["list"] = field(default="list", init=False)
    success: bool = True
    namespace: str | None = None
    names: tuple[str, ...] = ()
    total: int = 0
    error_type: HelmErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# status / install / upgrade
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HelmStatus:
    action: Literal["status"] = field(default="status", init=False)
    success: bool = True
    name: str = ""
    namespace: str | None = None
    revision: int | None = None
    status: str | None = None
    description: str | None = None
    chart: str | None = None
    """``<name>-<version>`` of the deployed chart."""

    app_version: str | None = None
    notes: str | None = None
    """Rendered ``NOTES.txt``."""

    error_type: HelmErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class HelmInstall:
    action: Literal["install"] = field(default="install", init=False)
    success: bool = True
    name: str = ""
    namespace: str | None = None
    revision: int | None = None
    status: str | None = None
    chart: str | None = None
    app_version: str | None = None
    notes: str | None = None
    error_type: HelmErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class HelmUpgrade:
    action: Literal["upgrade"] = field(default="upgrade", init=False)
    success: bool = True
    name: str = ""
    namespace: str | None = None
    revision: int | None = None
    status: str | None = None
    chart: str | None = None
    app_version: str | None = None
    notes: str | None = None
    error_type: HelmErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class HelmReleaseCompact:
    """Compact form shared by ``status``, ``install`` and ``upgrade``; notes and description are dropped."""

    action: str
    success: bool
    name: str
    namespace: str | None
    revision: int | None
    status: str | None
    chart: str | None
    app_version: str | None
    error_type: HelmErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# uninstall
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HelmUninstall:
    action: Literal["uninstall"] = field(default="uninstall", init=False)
    success: bool = True
    name: str = ""
    namespace: str | None = None
    status: str | None = None
    error_type: HelmErrorType | None = None
    error_message: str | None = None


HelmResult = Union[HelmList, HelmStatus, HelmInstall, HelmUpgrade, HelmUninstall]
HelmCompact = Union[HelmListCompact, HelmReleaseCompact, HelmUninstall]
