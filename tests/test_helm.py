"""Tests for the ``helm`` domain.

Each action yields its own tagged record; the dispatch tests make sure
fields of one action never leak into another.
"""

from __future__ import annotations

import json

import pytest

from clishape.domains.helm import formatters, guards, parsers
from clishape.domains.helm.models import (
    HelmErrorType,
    HelmInstall,
    HelmList,
    HelmRelease,
    HelmReleaseCompact,
    HelmStatus,
    HelmUninstall,
    HelmUpgrade,
)
from clishape.exceptions import FlagInjectionError, GuardError, UnknownActionError

_LIST_JSON = json.dumps([
    {
        "name": "web",
        "namespace": "prod",
        "revision": "3",
        "updated": "2024-05-01 10:00:00.0 +0000 UTC",
        "status": "deployed",
        "chart": "nginx-15.1.0",
        "app_version": "1.25.3",
    },
    {"name": "db", "namespace": "prod", "revision": 1, "status": "failed", "chart": "postgresql-13.2.0"},
])

_RELEASE_JSON = json.dumps({
    "name": "web",
    "namespace": "prod",
    "version": 4,
    "info": {
        "status": "deployed",
        "description": "Upgrade complete",
        "notes": "Visit http://web.example.com\n",
    },
    "chart": {"metadata": {"name": "nginx", "version": "15.1.0", "appVersion": "1.25.3"}},
})

_STATUS_TEXT = """\
NAME: web
LAST DEPLOYED: Wed May  1 10:00:00 2024
NAMESPACE: prod
STATUS: deployed
REVISION: 2
TEST SUITE: None
NOTES:
1. Get the application URL:
   kubectl port-forward svc/web 8080:80
"""


class TestHelmList:
    def test_json(self) -> None:
        result = parsers.parse_list(_LIST_JSON, "", 0, namespace="prod")
        assert isinstance(result, HelmList)
        assert result.action == "list"
        assert result.total == 2
        assert result.releases[0] == HelmRelease(
            name="web",
            namespace="prod",
            revision=3,
            status="deployed",
            chart="nginx-15.1.0",
            app_version="1.25.3",
            updated="2024-05-01 10:00:00.0 +0000 UTC",
        )
        assert result.releases[1].app_version is None

    def test_empty_json(self) -> None:
        result = parsers.parse_list("[]\n", "", 0)
        assert result.success is True
        assert result.releases == ()

    def test_table_fallback(self) -> None:
        stdout = (
            "NAME\tNAMESPACE\tREVISION\tUPDATED                        \tSTATUS  \tCHART       \tAPP VERSION\n"
            "web \tprod     \t3       \t2024-05-01 10:00:00 +0000 UTC\tdeployed\tnginx-15.1.0\t1.25.3     \n"
        )
        result = parsers.parse_list(stdout, "", 0)
        release = result.releases[0]
        assert (release.name, release.revision, release.status) == ("web", 3, "deployed")
        assert release.app_version == "1.25.3"

    def test_compact(self) -> None:
        full = parsers.parse_list(_LIST_JSON, "", 0)
        compact = formatters.compact_helm(full)
        assert compact.names == ("web", "db")
        assert formatters.format_helm_compact(compact) == "2 releases\n  web, db"


class TestHelmRelease:
    def test_status_json(self) -> None:
        result = parsers.parse_status(_RELEASE_JSON, "", 0)
        assert isinstance(result, HelmStatus)
        assert result.name == "web"
        assert result.revision == 4
        assert result.chart == "nginx-15.1.0"
        assert result.app_version == "1.25.3"
        assert result.description == "Upgrade complete"
        assert result.notes == "Visit http://web.example.com"

    def test_status_text(self) -> None:
        result = parsers.parse_status(_STATUS_TEXT, "", 0)
        assert result.name == "web"
        assert result.namespace == "prod"
        assert result.revision == 2
        assert result.status == "deployed"
        assert result.notes is not None
        assert result.notes.startswith("1. Get the application URL:")

    def test_install_has_no_description(self) -> None:
        result = parsers.parse_install(_RELEASE_JSON, "", 0)
        assert isinstance(result, HelmInstall)
        assert not hasattr(result, "description")
        assert result.status == "deployed"

    def test_context_fills_missing_name(self) -> None:
        result = parsers.parse_upgrade("", "", 0, name="web", namespace="prod")
        assert isinstance(result, HelmUpgrade)
        assert (result.name, result.namespace) == ("web", "prod")

    def test_compact_drops_notes(self) -> None:
        compact = formatters.compact_helm(parsers.parse_status(_RELEASE_JSON, "", 0))
        assert isinstance(compact, HelmReleaseCompact)
        assert not hasattr(compact, "notes")
        assert formatters.format_helm_compact(compact) == (
            "Release web | namespace prod | revision 4 | deployed | nginx-15.1.0"
        )


class TestHelmUninstall:
    def test_uninstalled(self) -> None:
        result = parsers.parse_uninstall('release "web" uninstalled\n', "", 0)
        assert isinstance(result, HelmUninstall)
        assert result.name == "web"
        assert result.status == "uninstalled"
        assert formatters.format_helm(result) == "Uninstalled web"

    def test_not_found(self) -> None:
        result = parsers.parse_uninstall("", "Error: uninstall: Release not loaded: web: release: not found", 1, name="web")
        assert result.success is False
        assert result.error_type is HelmErrorType.RELEASE_NOT_FOUND
        assert result.name == "web"


class TestHelmErrors:
    @pytest.mark.parametrize(
        ("stderr", "kind"),
        [
            ("Error: INSTALLATION FAILED: cannot re-use a name that is still in use", HelmErrorType.ALREADY_EXISTS),
            ('Error: UPGRADE FAILED: "web" has no deployed releases', HelmErrorType.RELEASE_NOT_FOUND),
            ('Error: INSTALLATION FAILED: repo bitnamii not found', HelmErrorType.CHART_NOT_FOUND),
            ("Error: INSTALLATION FAILED: path ./charts/web not found", HelmErrorType.CHART_NOT_FOUND),
            ("Error: INSTALLATION FAILED: context deadline exceeded: timed out waiting", HelmErrorType.TIMEOUT),
            ("Error: something else", HelmErrorType.UNKNOWN),
        ],
    )
    def test_taxonomy(self, stderr: str, kind: HelmErrorType) -> None:
        result = parsers.parse_install("", stderr, 1, name="web")
        assert result.success is False
        assert result.error_type is kind
        assert result.error_message == stderr


class TestParseHelmDispatch:
    @pytest.mark.parametrize(
        ("action", "record"),
        [
            ("list", HelmList),
            ("status", HelmStatus),
            ("install", HelmInstall),
            ("upgrade", HelmUpgrade),
            ("uninstall", HelmUninstall),
        ],
    )
    def test_record_matches_action(self, action: str, record: type) -> None:
        result = parsers.parse_helm("", "", 0, action=action, name="web")
        assert isinstance(result, record)
        assert result.action == action

    def test_unknown_action(self) -> None:
        with pytest.raises(UnknownActionError) as exc_info:
            parsers.parse_helm("", "", 0, action="rollback")
        assert exc_info.value.hint is not None
        assert "uninstall" in exc_info.value.hint


class TestHelmGuards:
    def test_uninstall_args(self) -> None:
        assert guards.build_uninstall_args("web") == ["uninstall", "web"]
        assert guards.build_uninstall_args("web", namespace="prod") == [
            "uninstall", "web", "--namespace", "prod",
        ]
        with pytest.raises(FlagInjectionError):
            guards.build_uninstall_args("--no-hooks")

    def test_install_args(self) -> None:
        args = guards.build_install_args(
            "web",
            "bitnami/nginx",
            namespace="prod",
            version="15.1.0",
            values_files=["values.yaml"],
            set_values=["replicaCount=2"],
            wait=True,
        )
        assert args == [
            "install", "web", "bitnami/nginx", "-o", "json", "--namespace", "prod",
            "--version", "15.1.0", "-f", "values.yaml", "--set", "replicaCount=2", "--wait",
        ]

    def test_list_args(self) -> None:
        assert guards.build_list_args(all_namespaces=True) == ["list", "-o", "json", "--all-namespaces"]
        assert guards.build_list_args(namespace="prod") == ["list", "-o", "json", "--namespace", "prod"]

    @pytest.mark.parametrize("release", ["Web", "web_1", "-web", "x" * 54, ""])
    def test_bad_release(self, release: str) -> None:
        with pytest.raises(GuardError):
            guards.validate_release(release)

    def test_set_requires_assignment(self) -> None:
        with pytest.raises(GuardError):
            guards.build_upgrade_args("web", "./chart", set_values=["replicaCount"])

    def test_flag_chart(self) -> None:
        with pytest.raises(FlagInjectionError):
            guards.build_install_args("web", "--post-renderer=/bin/sh")
