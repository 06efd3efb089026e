"""Tests for the ``clishape doctor`` command (cli/doctor.py).

Executable detection is mocked — no wrapped CLI needs to be installed.

Coverage:
* Individual check functions return correct tuples.
* A missing executable is a WARN; doctor still succeeds.
* Plain (no Rich) output carries install guidance.
* CLI routing dispatches to ``run_doctor``.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from clishape.cli import exit_codes
from clishape.infra.tool_detector import ToolStatus


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _found(command: str) -> ToolStatus:
    return ToolStatus(
        command=command,
        found=True,
        path=Path(f"/usr/bin/{command}"),
        version_hint=f"found at /usr/bin/{command}",
        install_commands=(),
    )


def _missing(command: str, *install: str) -> ToolStatus:
    return ToolStatus(
        command=command,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=install,
    )


def _all_found() -> dict[str, ToolStatus]:
    commands = ("docker", "git", "kubectl", "helm", "npm", "dotnet", "curl")
    return {command: _found(command) for command in commands}


# ---------------------------------------------------------------------------
# Individual check functions
# ---------------------------------------------------------------------------

class TestPythonVersionCheck:
    def test_returns_tuple(self) -> None:
        from clishape.cli.doctor import _python_version_check

        label, value, status = _python_version_check()
        assert label == "Python"
        assert isinstance(value, str)
        assert "OK" in status


class TestClishapeVersionCheck:
    def test_returns_current_version(self) -> None:
        from clishape.cli.doctor import _clishape_version_check
        from clishape.version import __version__

        label, value, status = _clishape_version_check()
        assert label == "clishape"
        assert value == __version__
        assert "OK" in status


class TestOsCheck:
    def test_returns_tuple(self) -> None:
        from clishape.cli.doctor import _os_check

        label, value, status = _os_check()
        assert label == "OS"
        assert isinstance(value, str)
        assert "OK" in status

    @patch("clishape.cli.doctor.platform.machine", return_value="arm64")
    @patch("clishape.cli.doctor.platform.release", return_value="23.4.0")
    @patch("clishape.cli.doctor.platform.system", return_value="Darwin")
    def test_darwin_is_displayed_as_macos(
        self,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
    ) -> None:
        from clishape.cli.doctor import _os_check

        _label, value, _status = _os_check()
        assert value == "macOS 23.4.0 (arm64)"


class TestToolCheck:
    def test_found_lists_domains(self) -> None:
        from clishape.cli.doctor import _tool_check

        label, value, status = _tool_check(_found("docker"))
        assert label == "docker (docker, compose)"
        assert value == str(Path("/usr/bin/docker"))
        assert "OK" in status

    def test_missing_is_a_warning(self) -> None:
        from clishape.cli.doctor import _tool_check

        label, value, status = _tool_check(_missing("curl"))
        assert label == "curl (http)"
        assert value == "not found"
        assert "WARN" in status


# ---------------------------------------------------------------------------
# run_doctor integration
# ---------------------------------------------------------------------------

class TestRunDoctor:
    @patch("clishape.cli.doctor.detect_tools")
    def test_all_pass_returns_success(self, mock_detect: MagicMock) -> None:
        from clishape.cli.doctor import run_doctor

        mock_detect.return_value = _all_found()
        assert run_doctor() == exit_codes.SUCCESS

    @patch("clishape.cli.doctor.detect_tools")
    def test_missing_tool_still_succeeds(self, mock_detect: MagicMock) -> None:
        """A missing executable is a WARN, not a FAIL."""
        from clishape.cli.doctor import run_doctor

        statuses = _all_found()
        statuses["helm"] = _missing("helm", "brew install helm")
        mock_detect.return_value = statuses
        assert run_doctor() == exit_codes.SUCCESS

    @patch("clishape.cli.doctor.platform.machine", return_value="arm64")
    @patch("clishape.cli.doctor.platform.release", return_value="23.4.0")
    @patch("clishape.cli.doctor.platform.system", return_value="Darwin")
    @patch("clishape.cli.doctor.detect_tools")
    @patch.dict("sys.modules", {"rich": None, "rich.console": None, "rich.table": None})
    def test_plain_output_shows_install_guidance(
        self,
        mock_detect: MagicMock,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        from clishape.cli.doctor import run_doctor

        statuses = _all_found()
        statuses["kubectl"] = _missing("kubectl", "brew install kubectl")
        mock_detect.return_value = statuses

        code = run_doctor()
        captured = capsys.readouterr()
        assert code == exit_codes.SUCCESS
        assert captured.out == ""
        assert "macOS" in captured.err
        assert "kubectl is not installed. Install with:" in captured.err
        assert "  brew install kubectl" in captured.err
        assert "All checks passed." in captured.err

    @patch("clishape.cli.doctor.detect_tools")
    @patch.dict("sys.modules", {"rich": None, "rich.console": None, "rich.table": None})
    def test_plain_table_has_one_row_per_executable(
        self,
        mock_detect: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        from clishape.cli.doctor import run_doctor

        mock_detect.return_value = _all_found()
        run_doctor()

        err = capsys.readouterr().err
        assert "clishape doctor" in err
        assert "curl (http)" in err
        assert "WARN" not in err


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestDoctorRouting:
    @patch("clishape.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_dispatches(self, mock_run: MagicMock) -> None:
        from clishape.cli.app import main

        code = main(["doctor"])
        assert code == exit_codes.SUCCESS
        mock_run.assert_called_once()

    @patch("clishape.cli.doctor.run_doctor", return_value=exit_codes.GENERAL_ERROR)
    def test_doctor_failure_propagates(self, mock_run: MagicMock) -> None:
        from clishape.cli.app import main

        code = main(["doctor"])
        assert code == exit_codes.GENERAL_ERROR
