"""``subprocess`` backed implementation of :class:`~clishape.core.protocols.ProcessRunner`.

This module is the **only** place in the codebase that starts external
processes.  OS-level failures are caught here and re-raised as
:class:`~clishape.exceptions.RunnerError` subclasses.

Rules
-----
* Arguments are passed as a vector, never through a shell.
* Output is decoded as UTF-8 with replacement and stripped of ANSI
  escape sequences before it leaves this module.
* A timed-out process keeps whatever output it produced.
* The executable is resolved on the runner's PATH before spawning, so a
  missing tool fails with install hints and no process is started.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from clishape.core.models import TIMEOUT_EXIT_CODE, RawInvocationResult
from clishape.core.sanitize import strip_ansi
from clishape.exceptions import ExecutableNotFoundError, ProcessSpawnError
from clishape.infra.tool_detector import require_tool

logger = logging.getLogger(__name__)


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class SubprocessRunner:
    """Concrete :class:`ProcessRunner` backed by :func:`subprocess.run`.

    This class satisfies the :class:`~clishape.core.protocols.ProcessRunner`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self._env = env

    def invoke(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        timeout_ms: int | None = None,
        stdin: str | None = None,
    ) -> RawInvocationResult:
        """Run *command* with *args* and capture its output.

        Raises
        ------
        ExecutableNotFoundError
            If *command* is not on PATH.  The hint lists install commands.
        ProcessSpawnError
            If the operating system refuses to start the process.
        """
        search_path = self._env.get("PATH") if self._env is not None else None
        executable = require_tool(command, search_path)
        argv = [str(executable), *args]
        timeout = timeout_ms / 1000 if timeout_ms is not None else None
        logger.debug("exec %r (cwd=%s, timeout=%s)", argv, cwd, timeout)

        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                env=self._env,
                input=stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return RawInvocationResult(
                stdout=strip_ansi(_as_text(exc.stdout)),
                stderr=strip_ansi(_as_text(exc.stderr)),
                exit_code=TIMEOUT_EXIT_CODE,
                timed_out=True,
            )
        except FileNotFoundError as exc:
            raise ExecutableNotFoundError(
                f"Command not found: {command}",
                hint=f"Install {command} or make sure it is on PATH.",
            ) from exc
        except OSError as exc:
            raise ProcessSpawnError(
                f"Could not start {command}: {exc}",
            ) from exc

        return RawInvocationResult(
            stdout=strip_ansi(completed.stdout or ""),
            stderr=strip_ansi(completed.stderr or ""),
            exit_code=completed.returncode,
        )
