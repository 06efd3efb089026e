"""Full and compact renderings of ``npm`` results."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, more_line, preview
from clishape.domains.npm.models import (
    NpmAudit,
    NpmAuditCompact,
    NpmInstall,
    NpmInstallCompact,
    VulnerabilityCounts,
    VulnerabilitySummary,
)


def _counts_line(counts: VulnerabilityCounts) -> str:
    if counts.total == 0:
        return "0 vulnerabilities"
    parts = [
        f"{value} {name}"
        for name, value in (
            ("critical", counts.critical),
            ("high", counts.high),
            ("moderate", counts.moderate),
            ("low", counts.low),
            ("info", counts.info),
        )
        if value
    ]
    return f"{counts.total} vulnerabilities ({', '.join(parts)})"


def _install_line(added: int, removed: int, changed: int, audited: int,
                  duration: float | None) -> str:
    line = f"added {added}, removed {removed}, changed {changed}, audited {audited}"
    if duration is not None:
        line += f" in {duration:g}s"
    return line


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------

def format_install(data: NpmInstall) -> str:
    if not data.success:
        return failure_line("npm install", data.error_type, data.error_message)
    lines = [_install_line(data.added, data.removed, data.changed, data.audited, data.duration_seconds)]
    lines.extend(f"  {p.action} {p.name}@{p.version}" for p in data.packages)
    if data.vulnerabilities is not None:
        lines.append(f"  {_counts_line(data.vulnerabilities)}")
    if data.funding:
        lines.append(f"  {data.funding} packages looking for funding")
    return "\n".join(lines)


def compact_install(data: NpmInstall) -> NpmInstallCompact:
    return NpmInstallCompact(
        success=data.success,
        added=data.added,
        removed=data.removed,
        changed=data.changed,
        audited=data.audited,
        duration_seconds=data.duration_seconds,
        vulnerabilities=data.vulnerabilities,
        funding=data.funding,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_install_compact(data: NpmInstallCompact) -> str:
    if not data.success:
        return failure_line("npm install", data.error_type, data.error_message)
    line = _install_line(data.added, data.removed, data.changed, data.audited, data.duration_seconds)
    if data.vulnerabilities is not None and data.vulnerabilities.total:
        line += f"; {_counts_line(data.vulnerabilities)}"
    return line


# ---------------------------------------------------------------------------
# audit
# ---------------------------------------------------------------------------

def format_audit(data: NpmAudit) -> str:
    if not data.success:
        return failure_line("npm audit", data.error_type, data.error_message)
    lines = [_counts_line(data.summary)]
    for v in data.vulnerabilities:
        fix = " (fix available)" if v.fix_available else ""
        cve = f" {v.cve}" if v.cve else ""
        lines.append(f"  [{v.severity}] {v.name}: {v.title}{cve}{fix}")
    return "\n".join(lines)


def compact_audit(data: NpmAudit) -> NpmAuditCompact:
    return NpmAuditCompact(
        success=data.success,
        vulnerabilities=cap(VulnerabilitySummary(name=v.name, severity=v.severity) for v in data.vulnerabilities),
        summary=data.summary,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_audit_compact(data: NpmAuditCompact) -> str:
    if not data.success:
        return failure_line("npm audit", data.error_type, data.error_message)
    lines = [_counts_line(data.summary)]
    lines.extend(f"  [{v.severity}] {v.name}" for v in data.vulnerabilities)
    extra = more_line(data.summary.total, len(data.vulnerabilities))
    if extra:
        lines.append(extra)
    return "\n".join(lines)


INSTALL_RENDERER = Renderer(format_install, compact_install, format_install_compact)
AUDIT_RENDERER = Renderer(format_audit, compact_audit, format_audit_compact)
