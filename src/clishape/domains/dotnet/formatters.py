"""Full and compact renderings of ``dotnet build`` results."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, more_line, preview
from clishape.domains.dotnet.models import DiagnosticSummary, DotnetBuild, DotnetBuildCompact


def _headline(success: bool, errors: int, warnings: int, elapsed: float | None) -> str:
    line = f"Build {'succeeded' if success else 'failed'}: {errors} error(s), {warnings} warning(s)"
    if elapsed is not None:
        line += f" in {elapsed:g}s"
    return line


def format_build(data: DotnetBuild) -> str:
    lines = [_headline(data.success, data.errors, data.warnings, data.elapsed_seconds)]
    if not data.success and data.error_type is not None:
        lines[0] += f" [{data.error_type.value}]"
        if not data.diagnostics and data.error_message:
            lines.append(f"  {data.error_message}")
    for d in data.diagnostics:
        location = f"({d.line},{d.column})" if d.column is not None else f"({d.line})" if d.line else ""
        lines.append(f"  {d.file}{location}: {d.severity} {d.code}: {d.message}")
    lines.extend(f"  -> {path}" for path in data.outputs)
    return "\n".join(lines)


def compact_build(data: DotnetBuild) -> DotnetBuildCompact:
    ordered = sorted(data.diagnostics, key=lambda d: d.severity != "error")
    return DotnetBuildCompact(
        success=data.success,
        diagnostics=cap(
            DiagnosticSummary(file=d.file, line=d.line, severity=d.severity, code=d.code) for d in ordered
        ),
        total=data.total,
        errors=data.errors,
        warnings=data.warnings,
        elapsed_seconds=data.elapsed_seconds,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_build_compact(data: DotnetBuildCompact) -> str:
    lines = [_headline(data.success, data.errors, data.warnings, data.elapsed_seconds)]
    if not data.success and data.error_type is not None:
        lines[0] += f" [{data.error_type.value}]"
    lines.extend(f"  {d.file}({d.line}): {d.severity} {d.code}" for d in data.diagnostics)
    extra = more_line(data.total, len(data.diagnostics))
    if extra:
        lines.append(extra)
    return "\n".join(lines)


BUILD_RENDERER = Renderer(format_build, compact_build, format_build_compact)
