"""Parsers for ``helm list``, ``status``, ``install``, ``upgrade`` and ``uninstall``.

``-o json`` is preferred for every action that supports it; the text
layouts helm prints without it are read as a fallback.  :func:`parse_helm`
dispatches on the action name and always returns the record matching
that action.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import (
    always,
    as_dict,
    extract_json,
    run_strategies,
    split_columns,
    to_int,
    to_str,
)
from clishape.domains.helm.models import (
    HelmErrorType,
    HelmInstall,
    HelmList,
    HelmRelease,
    HelmResult,
    HelmStatus,
    HelmUninstall,
    HelmUpgrade,
)
from clishape.exceptions import UnknownActionError

logger = logging.getLogger(__name__)

_RULES: tuple[ErrorRule[HelmErrorType], ...] = (
    rule(r"timed out", HelmErrorType.TIMEOUT),
    rule(r"cannot re-use a name that is still in use|already exists", HelmErrorType.ALREADY_EXISTS),
    rule(r"release: not found|release not found|has no deployed releases", HelmErrorType.RELEASE_NOT_FOUND),
    rule(r"chart .*not found|failed to download|repo .*not found|no chart (?:name|version) found|path \S+ not found", HelmErrorType.CHART_NOT_FOUND),
)


def _error_fields(stdout: str, stderr: str, title: str) -> dict[str, Any]:
    return {
        "success": False,
        "error_type": classify(f"{stdout}\n{stderr}", _RULES, HelmErrorType.UNKNOWN),
        "error_message": first_error_line(stderr or stdout, f"helm {title} failed"),
    }


def _optional(value: object) -> str | None:
    text = to_str(value, "")
    return text or None


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

def _releases_from_json(text: str) -> list[HelmRelease] | None:
    document = extract_json(text, "[{")
    if not isinstance(document, list):
        return None
    releases = []
    for item in document:
        if not isinstance(item, dict):
            continue
        releases.append(
            HelmRelease(
                name=to_str(item.get("name"), ""),
                namespace=to_str(item.get("namespace"), ""),
                revision=to_int(item.get("revision")),
                status=to_str(item.get("status")),
                chart=to_str(item.get("chart")),
                app_version=_optional(item.get("app_version")),
                updated=_optional(item.get("updated")),
            )
        )
    return releases


def _releases_from_table(text: str) -> list[HelmRelease] | None:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines or not lines[0].startswith("NAME"):
        return None
    releases = []
    for row in split_columns("\n".join(lines), delimiter="\t"):
        if not row.get("NAME"):
            continue
        releases.append(
            HelmRelease(
                name=row["NAME"],
                namespace=row.get("NAMESPACE", ""),
                revision=to_int(row.get("REVISION")),
                status=row.get("STATUS") or "unknown",
                chart=row.get("CHART") or "unknown",
                app_version=row.get("APP VERSION") or None,
                updated=row.get("UPDATED") or None,
            )
        )
    return releases


def parse_list(stdout: str, stderr: str, exit_code: int, *, namespace: str | None = None) -> HelmList:
    releases = run_strategies(
        stdout,
        [
            (lambda text: "[" in text, _releases_from_json),
            (always, _releases_from_table),
        ],
    ) or []
    fields = dict(namespace=namespace, releases=tuple(releases), total=len(releases))
    if exit_code != 0:
        return HelmList(**fields, **_error_fields(stdout, stderr, "list"))
    return HelmList(**fields)


# ---------------------------------------------------------------------------
# status / install / upgrade
# ---------------------------------------------------------------------------

_TEXT_FIELD = re.compile(r"^(?P<key>[A-Z][A-Z ]*):\s*(?P<value>.*)$")


def _release_from_json(text: str) -> dict[str, Any] | None:
    document = extract_json(text)
    if not isinstance(document, dict) or "name" not in document:
        return None
    info = as_dict(document.get("info"))
    metadata = as_dict(as_dict(document.get("chart")).get("metadata"))
    chart_name, chart_version = _optional(metadata.get("name")), _optional(metadata.get("version"))
    return {
        "name": to_str(document.get("name"), ""),
        "namespace": _optional(document.get("namespace")),
        "revision": to_int(document.get("version"), 0) or None,
        "status": _optional(info.get("status")),
        "description": _optional(info.get("description")),
        "chart": f"{chart_name}-{chart_version}" if chart_name and chart_version else chart_name,
        "app_version": _optional(metadata.get("appVersion")),
        "notes": _optional(to_str(info.get("notes"), "").strip()),
    }


def _release_from_text(text: str) -> dict[str, Any] | None:
    values: dict[str, str] = {}
    notes: list[str] | None = None
    for line in text.splitlines():
        if notes is not None:
            notes.append(line)
            continue
        if line.strip() == "NOTES:":
            notes = []
            continue
        match = _TEXT_FIELD.match(line)
        if match is not None:
            values[match.group("key")] = match.group("value").strip()
    if "NAME" not in values:
        return None
    notes_text = "\n".join(notes).strip() if notes is not None else ""
    return {
        "name": values["NAME"],
        "namespace": values.get("NAMESPACE") or None,
        "revision": to_int(values.get("REVISION"), 0) or None,
        "status": values.get("STATUS") or None,
        "description": values.get("DESCRIPTION") or None,
        "chart": values.get("CHART") or None,
        "app_version": values.get("APP VERSION") or None,
        "notes": notes_text or None,
    }


def _release_fields(stdout: str, name: str, namespace: str | None) -> dict[str, Any]:
    fields = run_strategies(stdout, [(lambda text: "{" in text, _release_from_json), (always, _release_from_text)])
    if fields is None:
        logger.debug("No release details in helm output")
        fields = {}
    fields.setdefault("name", name)
    if not fields["name"]:
        fields["name"] = name
    if fields.get("namespace") is None:
        fields["namespace"] = namespace
    return fields


def parse_status(stdout: str, stderr: str, exit_code: int, *, name: str = "",
                 namespace: str | None = None) -> HelmStatus:
    fields = _release_fields(stdout, name, namespace)
    if exit_code != 0:
        return HelmStatus(**fields, **_error_fields(stdout, stderr, "status"))
    return HelmStatus(**fields)


def parse_install(stdout: str, stderr: str, exit_code: int, *, name: str = "",
                  namespace: str | None = None) -> HelmInstall:
    fields = _release_fields(stdout, name, namespace)
    fields.pop("description", None)
    if exit_code != 0:
        return HelmInstall(**fields, **_error_fields(stdout, stderr, "install"))
    return HelmInstall(**fields)


def parse_upgrade(stdout: str, stderr: str, exit_code: int, *, name: str = "",
                  namespace: str | None = None) -> HelmUpgrade:
    fields = _release_fields(stdout, name, namespace)
    fields.pop("description", None)
    if exit_code != 0:
        return HelmUpgrade(**fields, **_error_fields(stdout, stderr, "upgrade"))
    return HelmUpgrade(**fields)


# ---------------------------------------------------------------------------
# uninstall
# ---------------------------------------------------------------------------

_UNINSTALLED = re.compile(r'release "(?P<name>[^"]+)" uninstalled')


def parse_uninstall(stdout: str, stderr: str, exit_code: int, *, name: str = "",
                    namespace: str | None = None) -> HelmUninstall:
    match = _UNINSTALLED.search(stdout)
    fields = dict(
        name=match.group("name") if match else name,
        namespace=namespace,
        status="uninstalled" if match else None,
    )
    if exit_code != 0:
        return HelmUninstall(**fields, **_error_fields(stdout, stderr, "uninstall"))
    return HelmUninstall(**fields)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

HELM_PARSERS: Mapping[str, Callable[..., HelmResult]] = {
    "list": lambda stdout, stderr, exit_code, *, name="", namespace=None: parse_list(
        stdout, stderr, exit_code, namespace=namespace
    ),
    "status": parse_status,
    "install": parse_install,
    "upgrade": parse_upgrade,
    "uninstall": parse_uninstall,
}


def parse_helm(
    stdout: str,
    stderr: str,
    exit_code: int,
    *,
    action: str,
    name: str = "",
    namespace: str | None = None,
) -> HelmResult:
    """Parse output of ``helm <action>`` into the record for that action."""
    try:
        parser = HELM_PARSERS[action]
    except KeyError:
        raise UnknownActionError(
            f"No helm parser for action '{action}'.",
            hint=f"Supported: {', '.join(HELM_PARSERS)}",
        ) from None
    return parser(stdout, stderr, exit_code, name=name, namespace=namespace)
