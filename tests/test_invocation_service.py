"""Tests for the core invocation service (core/invocation_service.py).

The process runner is mocked; no external process is ever started.
Coverage:

* Guards and policy run before the runner; rejected input never spawns.
* Runner arguments come from the action builder; timeout defaults from settings.
* Foreign runner exceptions are wrapped in ``ProcessSpawnError``.
* Stderr is sanitized before parsing and classification.
* A tool failure is a parsed result, not an exception.
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from clishape.config import Settings
from clishape.core.invocation_service import InvocationService
from clishape.core.models import RawInvocationResult
from clishape.domains.docker.models import DockerErrorType
from clishape.domains.registry import get_action
from clishape.exceptions import (
    CommandNotAllowedError,
    ExecutableNotFoundError,
    FlagInjectionError,
    GuardError,
    PolicyViolationError,
    ProcessSpawnError,
    UnsafeUrlError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _runner(stdout: str = "", stderr: str = "", exit_code: int = 0, timed_out: bool = False) -> MagicMock:
    runner = MagicMock()
    runner.invoke.return_value = RawInvocationResult(
        stdout=stdout, stderr=stderr, exit_code=exit_code, timed_out=timed_out,
    )
    return runner


_PS_LINE = '{"ID":"abc123def4567890","Names":"web","Image":"nginx","Status":"Up 2 hours","State":"running","Ports":""}'


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:
    def test_runs_validated_argv(self) -> None:
        runner = _runner(stdout='{"ID":"1","Names":"api"}')
        service = InvocationService(runner, Settings(timeout_ms=5_000))

        service.run(get_action("docker", "logs"), ["api"], context={"container": "api"}, cwd="/work")

        runner.invoke.assert_called_once_with(
            "docker", ["logs", "api"], cwd="/work", timeout_ms=5_000, stdin=None,
        )

    def test_explicit_timeout_wins(self) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings(timeout_ms=5_000))
        service.run(get_action("git", "status"), timeout_ms=250)
        assert runner.invoke.call_args.kwargs["timeout_ms"] == 250

    def test_returns_parsed_result_and_presentation(self) -> None:
        service = InvocationService(_runner(stdout=_PS_LINE), Settings())
        invocation = service.run(get_action("docker", "ps"))

        assert invocation.success is True
        assert invocation.result.total == 1
        assert invocation.result.containers[0].name == "web"
        assert invocation.presentation.text

    def test_tool_failure_is_a_result(self) -> None:
        runner = _runner(stderr="Cannot connect to the Docker daemon at unix:///var/run/docker.sock.", exit_code=1)
        invocation = InvocationService(runner, Settings()).run(get_action("docker", "ps"))

        assert invocation.success is False
        assert invocation.result.error_type is DockerErrorType.DAEMON_UNAVAILABLE

    def test_timed_out_run_is_folded(self) -> None:
        runner = _runner(stdout="partial", exit_code=124, timed_out=True)
        invocation = InvocationService(runner, Settings()).run(get_action("git", "pull"))
        assert invocation.success is False
        assert invocation.result.error_type.value == "timeout"

    def test_default_settings_come_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLISHAPE_TIMEOUT_MS", "777")
        service = InvocationService(_runner())
        assert service.settings.timeout_ms == 777


class TestPreRunChecks:
    def test_flag_argument_never_reaches_runner(self) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings())
        with pytest.raises(FlagInjectionError):
            service.run(get_action("docker", "logs"), ["--since=1h"])
        runner.invoke.assert_not_called()

    def test_domain_validator_runs(self) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings())
        with pytest.raises(GuardError):
            service.run(get_action("helm", "status"), ["Not_A_Release"])
        runner.invoke.assert_not_called()

    def test_build_action_command_must_be_a_build_tool(self) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings())
        action = replace(get_action("npm", "install"), command="rm")
        with pytest.raises(CommandNotAllowedError):
            service.run(action, ["lodash"])
        runner.invoke.assert_not_called()

    def test_build_action_runs_allowed_tool(self) -> None:
        runner = _runner()
        InvocationService(runner, Settings()).run(get_action("dotnet", "build"), ["App.sln"])
        runner.invoke.assert_called_once()
        assert runner.invoke.call_args.args == ("dotnet", ["build", "App.sln"])

    def test_domain_guard_runs(self) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings())
        with pytest.raises(UnsafeUrlError):
            service.run(get_action("http", "request"), ["file:///etc/passwd"])
        runner.invoke.assert_not_called()

    def test_policy_blocks_command(self) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings(allowed_commands=("git",)))
        with pytest.raises(PolicyViolationError):
            service.run(get_action("docker", "ps"))
        runner.invoke.assert_not_called()

    def test_root_policy_blocks_cwd(self, tmp_path: Path) -> None:
        runner = _runner()
        service = InvocationService(runner, Settings(allowed_roots=(str(tmp_path),)))
        service.run(get_action("git", "status"), cwd=os.path.join(str(tmp_path), "repo"))
        with pytest.raises(PolicyViolationError):
            service.run(get_action("git", "status"), cwd=os.path.dirname(str(tmp_path)))
        assert runner.invoke.call_count == 1


class TestRunnerBoundary:
    def test_clishape_errors_pass_through(self) -> None:
        runner = MagicMock()
        runner.invoke.side_effect = ExecutableNotFoundError("Command not found: helm")
        service = InvocationService(runner, Settings())
        with pytest.raises(ExecutableNotFoundError):
            service.run(get_action("helm", "list"))

    def test_foreign_errors_are_wrapped(self) -> None:
        runner = MagicMock()
        runner.invoke.side_effect = RuntimeError("kaboom")
        service = InvocationService(runner, Settings())
        with pytest.raises(ProcessSpawnError, match="kaboom") as exc_info:
            service.run(get_action("helm", "list"))
        assert isinstance(exc_info.value.__cause__, RuntimeError)


# ---------------------------------------------------------------------------
# interpret()
# ---------------------------------------------------------------------------

class TestInterpret:
    def test_sanitizes_stderr_before_parsing(self) -> None:
        raw = RawInvocationResult(
            stdout="",
            stderr="Error response from daemon: open /home/alice/secret/Dockerfile: no such file",
            exit_code=1,
        )
        service = InvocationService(MagicMock(), Settings())
        invocation = service.interpret(get_action("docker", "images"), raw)

        assert invocation.raw.stderr == "Error response from daemon: open ~/secret/Dockerfile: no such file"
        assert invocation.result.error_message is not None
        assert "alice" not in invocation.result.error_message

    def test_never_touches_runner(self) -> None:
        runner = MagicMock()
        service = InvocationService(runner, Settings())
        service.interpret(get_action("git", "status"), RawInvocationResult("## main\n", "", 0))
        runner.invoke.assert_not_called()

    def test_force_full(self) -> None:
        raw = RawInvocationResult("\n".join([_PS_LINE] * 3), "", 0)
        service = InvocationService(MagicMock(), Settings())

        full = service.interpret(get_action("docker", "ps"), raw, force_full=True)
        assert full.presentation.compact is False
        assert full.presentation.structured is full.result

    def test_context_reaches_parser(self) -> None:
        raw = RawInvocationResult("a\nb\nc\n", "", 0)
        service = InvocationService(MagicMock(), Settings())
        invocation = service.interpret(
            get_action("docker", "logs"), raw, context={"container": "api", "limit": "2"}, force_full=True,
        )
        assert invocation.result.container == "api"
        assert invocation.result.lines == ("a", "b")
        assert invocation.result.is_truncated is True
