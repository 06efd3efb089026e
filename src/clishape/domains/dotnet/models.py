"""Result records for ``dotnet build``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DotnetErrorType(str, Enum):
    COMPILATION_ERROR = "compilation-error"
    PROJECT_NOT_FOUND = "project-not-found"
    RESTORE_FAILED = "restore-failed"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One MSBuild ``error`` or ``warning`` line."""

    file: str
    """Source path, or ``(build)`` for diagnostics without a location."""

    line: int
    column: int | None
    severity: str
    """``error`` or ``warning``."""

    code: str
    message: str
    project: str | None = None
    """Project file from the trailing ``[...]`` annotation."""


@dataclass(frozen=True, slots=True)
class DotnetBuild:
    success: bool
    diagnostics: tuple[Diagnostic, ...]
    total: int
    errors: int
    warnings: int
    outputs: tuple[str, ...]
    """Build outputs from ``Project -> path`` lines."""

    elapsed_seconds: float | None
    error_type: DotnetErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class DiagnosticSummary:
    file: str
    line: int
    severity: str
    code: str


@dataclass(frozen=True, slots=True)
class DotnetBuildCompact:
    success: bool
    diagnostics: tuple[DiagnosticSummary, ...]
    """Errors before warnings, capped."""

    total: int
    errors: int
    warnings: int
    elapsed_seconds: float | None
    error_type: DotnetErrorType | None = None
    error_message: str | None = None
