"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from clishape.core.models import RawInvocationResult


class ProcessRunner(Protocol):
    """Contract for anything that can execute an external command.

    Any object that implements :meth:`invoke` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).  Test doubles only need to return canned
    :class:`RawInvocationResult` values.
    """

    def invoke(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        timeout_ms: int | None = None,
        stdin: str | None = None,
    ) -> RawInvocationResult:
        """Run *command* with *args* and return its captured output.

        A command that runs and exits non-zero is NOT an error at this
        level; it is reported through ``exit_code``.  A run stopped at
        its deadline is reported with ``timed_out=True`` and exit code
        ``124``.

        Raises
        ------
        ExecutableNotFoundError
            When *command* cannot be found.
        ProcessSpawnError
            When the operating system refuses to start the process.
        """
        ...  # pragma: no cover
