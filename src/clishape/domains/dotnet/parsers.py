"""Parser for ``dotnet build``.

MSBuild prints each diagnostic as it happens and again in the summary
after ``Build FAILED.``, so diagnostics are de-duplicated before they are
counted.  The ``N Warning(s)`` / ``N Error(s)`` footer is only consulted
when no itemized diagnostic was recognised.
"""

from __future__ import annotations

import re

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import grammar, parse_duration, scan_lines
from clishape.domains.dotnet.models import Diagnostic, DotnetBuild, DotnetErrorType

BUILD_LEVEL_FILE: str = "(build)"

_PROJECT = r"(?:\s+\[(?P<project>[^\]]+)\])?\s*$"

_GRAMMARS = (
    grammar(
        "located",
        r"^\s*(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)(?:,\d+,\d+)?\):\s+(?P<severity>error|warning)\s+(?P<code>[A-Z]{1,3}\d+):\s+(?P<message>.+?)" + _PROJECT,
    ),
    grammar(
        "line-only",
        r"^\s*(?P<file>.+?)\((?P<line>\d+)\):\s+(?P<severity>error|warning)\s+(?P<code>[A-Z]{1,3}\d+):\s+(?P<message>.+?)" + _PROJECT,
    ),
    grammar(
        "build-level",
        r"^\s*(?:[^\s(:][^(:]*?\s*:\s+)?(?P<severity>error|warning)\s+(?P<code>[A-Z]{1,6}\d+):\s+(?P<message>.+?)" + _PROJECT,
    ),
    grammar("warnings-footer", r"^\s*(?P<count>\d+) Warning\(s\)\s*$"),
    grammar("errors-footer", r"^\s*(?P<count>\d+) Error\(s\)\s*$"),
    grammar("elapsed", r"^\s*Time Elapsed (?P<elapsed>[\d:.]+)"),
    grammar("output", r"^\s+(?P<project>[\w.-]+) -> (?P<path>\S.*)$"),
)

_RULES: tuple[ErrorRule[DotnetErrorType], ...] = (
    rule(r"timed out", DotnetErrorType.TIMEOUT),
    rule(r"\bMSB1009\b|\bMSB1003\b|project file does not exist|couldn't find a project", DotnetErrorType.PROJECT_NOT_FOUND),
    rule(r"\bNU1\d{3}\b|restore failed|unable to load the service index", DotnetErrorType.RESTORE_FAILED),
    rule(r"error [A-Z]{2}\d{4}|build failed", DotnetErrorType.COMPILATION_ERROR),
)


def _diagnostic(kind: str, match: re.Match[str]) -> Diagnostic:
    groups = match.groupdict()
    file = groups.get("file")
    return Diagnostic(
        file=file.strip() if file else BUILD_LEVEL_FILE,
        line=int(groups["line"]) if groups.get("line") else 0,
        column=int(groups["column"]) if kind == "located" else None,
        severity=groups["severity"],
        code=groups["code"],
        message=groups["message"].strip(),
        project=groups.get("project"),
    )


def parse_build(stdout: str, stderr: str, exit_code: int) -> DotnetBuild:
    """Parse ``dotnet build`` output."""
    text = f"{stdout}\n{stderr}"
    diagnostics: list[Diagnostic] = []
    seen: set[Diagnostic] = set()
    outputs: list[str] = []
    footer_warnings = footer_errors = 0
    elapsed: float | None = None

    for kind, match in scan_lines(text, _GRAMMARS):
        if kind in ("located", "line-only", "build-level"):
            diagnostic = _diagnostic(kind, match)
            if diagnostic not in seen:
                seen.add(diagnostic)
                diagnostics.append(diagnostic)
        elif kind == "warnings-footer":
            footer_warnings = int(match.group("count"))
        elif kind == "errors-footer":
            footer_errors = int(match.group("count"))
        elif kind == "elapsed":
            elapsed = parse_duration(match.group("elapsed"))
        else:
            outputs.append(match.group("path").strip())

    if diagnostics:
        errors = sum(1 for d in diagnostics if d.severity == "error")
        warnings = len(diagnostics) - errors
    else:
        errors, warnings = footer_errors, footer_warnings

    fields = dict(
        diagnostics=tuple(diagnostics),
        total=errors + warnings,
        errors=errors,
        warnings=warnings,
        outputs=tuple(outputs),
        elapsed_seconds=elapsed,
    )
    if exit_code != 0:
        first_error = next((d for d in diagnostics if d.severity == "error"), None)
        message = (
            f"{first_error.code}: {first_error.message}"
            if first_error is not None
            else first_error_line(text, "dotnet build failed")
        )
        return DotnetBuild(
            success=False,
            error_type=classify(text, _RULES, DotnetErrorType.UNKNOWN),
            error_message=message,
            **fields,
        )
    return DotnetBuild(success=True, **fields)
