"""Parsers for ``npm install`` and ``npm audit``.

``npm install --json`` changed shape between npm 6 (arrays of package
actions plus ``elapsed`` milliseconds) and npm 7+ (plain counts with a
nested ``audit`` block); both are read, and the human summary line
(``added 12 packages, and audited 13 packages in 2s``) is the fallback.

``npm audit`` exits non-zero whenever it finds vulnerabilities, so a
decoded report counts as success regardless of the exit code.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import (
    always,
    as_dict,
    as_list,
    extract_json,
    has_json_object,
    parse_duration,
    run_strategies,
    to_int,
    to_str,
)
from clishape.domains.npm.models import (
    NpmAudit,
    NpmErrorType,
    NpmInstall,
    PackageChange,
    Vulnerability,
    VulnerabilityCounts,
)

logger = logging.getLogger(__name__)

SEVERITIES: tuple[str, ...] = ("critical", "high", "moderate", "low", "info")

_RULES: tuple[ErrorRule[NpmErrorType], ...] = (
    rule(r"timed out", NpmErrorType.TIMEOUT),
    rule(r"\bERESOLVE\b|unable to resolve dependency tree", NpmErrorType.ERESOLVE),
    rule(r"\bE404\b|404 not found", NpmErrorType.E404),
    rule(r"\bEACCES\b|\bEPERM\b|permission denied", NpmErrorType.EACCES),
    rule(r"\bECONNREFUSED\b|\bETIMEDOUT\b|\bENOTFOUND\b|\bEAI_AGAIN\b|\bECONNRESET\b|network", NpmErrorType.NETWORK),
    rule(r"\bENOENT\b|no such file or directory", NpmErrorType.ENOENT),
)


def _error_fields(stdout: str, stderr: str, fallback: str) -> dict[str, Any]:
    text = f"{stdout}\n{stderr}"
    message = first_error_line(stderr, "") or _json_error_summary(stdout) or first_error_line(stdout, fallback)
    return {
        "success": False,
        "error_type": classify(text, _RULES, NpmErrorType.UNKNOWN),
        "error_message": message,
    }


def _json_error_summary(text: str) -> str | None:
    document = extract_json(text) if has_json_object(text) else None
    error = as_dict(as_dict(document).get("error"))
    summary = to_str(error.get("summary"), "")
    return summary.splitlines()[0] if summary else None


def _counts(source: dict[str, Any]) -> VulnerabilityCounts:
    values = {severity: to_int(source.get(severity)) for severity in SEVERITIES}
    total = to_int(source.get("total"), sum(values.values()))
    return VulnerabilityCounts(total=total, **values)


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------

def _install_from_json(text: str) -> dict[str, Any] | None:
    document = extract_json(text)
    if not isinstance(document, dict) or "error" in document:
        return None
    if not any(key in document for key in ("added", "removed", "changed", "audited", "updated")):
        return None

    packages: list[PackageChange] = []
    counts: dict[str, int] = {}
    for key, action in (("added", "added"), ("removed", "removed"), ("updated", "updated")):
        value = document.get(key)
        if isinstance(value, list):
            for item in value:
                entry = as_dict(item)
                packages.append(
                    PackageChange(
                        name=to_str(entry.get("name")),
                        version=to_str(entry.get("version")),
                        action=action,
                    )
                )
            counts[key] = len(value)
        else:
            counts[key] = to_int(value)

    audit = as_dict(document.get("audit"))
    severity = as_dict(as_dict(audit.get("metadata")).get("vulnerabilities")) or as_dict(audit.get("vulnerabilities"))
    elapsed = document.get("elapsed")
    return {
        "added": counts["added"],
        "removed": counts["removed"],
        "changed": to_int(document.get("changed"), counts["updated"]),
        "audited": to_int(document.get("audited")),
        "duration_seconds": to_int(elapsed) / 1000 if elapsed is not None else None,
        "vulnerabilities": _counts(severity) if severity else None,
        "funding": to_int(document.get("funding")) if "funding" in document else None,
        "packages": tuple(packages),
    }


_COUNT_PATTERNS = {
    "added": re.compile(r"\badded (\d+) packages?"),
    "removed": re.compile(r"\bremoved (\d+) packages?"),
    "changed": re.compile(r"\bchanged (\d+) packages?"),
    "audited": re.compile(r"\baudited (\d+) packages?"),
}
_SUMMARY_DURATION = re.compile(r"packages? in (\d+(?:\.\d+)?\s*(?:ms|s|m|h))\b")
_VULNERABILITY_TOTAL = re.compile(r"(?:found )?(\d+) vulnerabilit(?:y|ies)")
_FUNDING = re.compile(r"(\d+) packages? (?:is|are) looking for funding")
_PACKAGE_LINE = re.compile(r"^(?P<verb>add|remove|change)\s+(?P<name>\S+)\s+(?P<version>\S+)\s*$")
_VERB_ACTIONS = {"add": "added", "remove": "removed", "change": "updated"}


def _install_from_text(text: str) -> dict[str, Any] | None:
    fields: dict[str, Any] = {}
    for key, pattern in _COUNT_PATTERNS.items():
        match = pattern.search(text)
        fields[key] = int(match.group(1)) if match else 0

    duration = _SUMMARY_DURATION.search(text)
    fields["duration_seconds"] = parse_duration(duration.group(1)) if duration else None

    total = _VULNERABILITY_TOTAL.search(text)
    if total is not None:
        severities = {}
        for severity in SEVERITIES:
            found = re.search(rf"(\d+) {severity}\b", text)
            severities[severity] = int(found.group(1)) if found else 0
        fields["vulnerabilities"] = VulnerabilityCounts(total=int(total.group(1)), **severities)
    else:
        fields["vulnerabilities"] = None

    funding = _FUNDING.search(text)
    fields["funding"] = int(funding.group(1)) if funding else None
    fields["packages"] = tuple(
        PackageChange(name=m.group("name"), version=m.group("version"), action=_VERB_ACTIONS[m.group("verb")])
        for m in (_PACKAGE_LINE.match(line) for line in text.splitlines())
        if m is not None
    )
    return fields


def parse_install(
    stdout: str,
    stderr: str,
    exit_code: int,
    *,
    duration_seconds: float | None = None,
) -> NpmInstall:
    """Parse ``npm install`` output (``--json`` or the human summary).

    *duration_seconds* is used when npm's own output carries no timing.
    """
    fields = run_strategies(
        stdout,
        [(has_json_object, _install_from_json), (always, _install_from_text)],
    ) or _install_from_text(stdout)
    if fields["duration_seconds"] is None:
        fields["duration_seconds"] = duration_seconds

    if exit_code != 0:
        return NpmInstall(**fields, **_error_fields(stdout, stderr, "npm install failed"))
    return NpmInstall(success=True, **fields)


# ---------------------------------------------------------------------------
# audit
# ---------------------------------------------------------------------------

def _first_cve(*candidates: object) -> str | None:
    for candidate in candidates:
        match = re.search(r"CVE-\d{4}-\d+", to_str(candidate, ""), re.IGNORECASE)
        if match:
            return match.group(0).upper()
    return None


def _v7_vulnerabilities(document: dict[str, Any]) -> list[Vulnerability]:
    """``{"vulnerabilities": {name: {severity, via, range, fixAvailable}}}``."""
    found = []
    for name, raw in as_dict(document.get("vulnerabilities")).items():
        entry = as_dict(raw)
        advisories = [as_dict(via) for via in as_list(entry.get("via")) if isinstance(via, dict)]
        first = advisories[0] if advisories else {}
        found.append(
            Vulnerability(
                name=str(name),
                severity=to_str(entry.get("severity"), "info"),
                title=to_str(entry.get("title") or first.get("title"), "Unknown"),
                url=to_str(first.get("url"), "") or None,
                range=to_str(entry.get("range"), "") or None,
                fix_available=bool(entry.get("fixAvailable")),
                cve=_first_cve(*(advisory.get("url") for advisory in advisories)),
            )
        )
    return found


def _v6_vulnerabilities(document: dict[str, Any]) -> list[Vulnerability]:
    """``{"advisories": {id: {module_name, severity, title, url, ...}}}``."""
    found = []
    for raw in as_dict(document.get("advisories")).values():
        entry = as_dict(raw)
        patched = to_str(entry.get("patched_versions"), "")
        cves = as_list(entry.get("cves"))
        found.append(
            Vulnerability(
                name=to_str(entry.get("module_name") or entry.get("name")),
                severity=to_str(entry.get("severity"), "info"),
                title=to_str(entry.get("title"), "Unknown"),
                url=to_str(entry.get("url"), "") or None,
                range=to_str(entry.get("vulnerable_versions") or entry.get("range"), "") or None,
                fix_available=bool(patched) and patched != "<0.0.0",
                cve=_first_cve(*cves, entry.get("url")),
            )
        )
    return found


def parse_audit(stdout: str, stderr: str, exit_code: int) -> NpmAudit:
    """Parse ``npm audit --json``."""
    document = extract_json(stdout) if has_json_object(stdout) else None
    if not isinstance(document, dict) or "error" in document or not (
        "vulnerabilities" in document or "advisories" in document
    ):
        logger.debug("npm audit produced no report")
        if exit_code == 0:
            return NpmAudit(success=True, vulnerabilities=(), summary=VulnerabilityCounts())
        return NpmAudit(
            vulnerabilities=(),
            summary=VulnerabilityCounts(),
            **_error_fields(stdout, stderr, "npm audit failed"),
        )

    if "advisories" in document and "vulnerabilities" not in document:
        vulnerabilities = _v6_vulnerabilities(document)
    else:
        vulnerabilities = _v7_vulnerabilities(document)

    metadata = as_dict(as_dict(document.get("metadata")).get("vulnerabilities"))
    if metadata:
        summary = _counts(metadata)
    else:
        by_severity = {
            severity: sum(1 for v in vulnerabilities if v.severity == severity) for severity in SEVERITIES
        }
        summary = VulnerabilityCounts(total=len(vulnerabilities), **by_severity)
    return NpmAudit(success=True, vulnerabilities=tuple(vulnerabilities), summary=summary)
