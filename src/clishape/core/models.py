"""Shared value objects for the core layer.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  Domain-specific result records live in
``clishape.domains.<tool>.models``; this module only holds the shapes
every domain shares.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

TIMEOUT_EXIT_CODE: int = 124
"""Sentinel exit code used by process runners for a killed-on-timeout run."""

TIMEOUT_MARKER: str = "process timed out"
"""Appended to stderr when a timed-out run is folded into a parse."""


# ---------------------------------------------------------------------------
# Process output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RawInvocationResult:
    """Everything a process runner reports about one finished command."""

    stdout: str
    """Captured standard output, decoded as text."""

    stderr: str
    """Captured standard error, decoded as text."""

    exit_code: int
    """Process exit status.  ``124`` when the runner killed it on timeout."""

    timed_out: bool = False
    """``True`` when the runner stopped the process at its deadline."""

    @property
    def combined(self) -> str:
        """``stdout`` and ``stderr`` joined for error classification."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


def fold_timeout(raw: RawInvocationResult) -> RawInvocationResult:
    """Turn a timed-out run into an ordinary failed run.

    Parsers never special-case timeouts.  They see exit code ``124`` and a
    ``process timed out`` line on stderr, which each domain's error rules
    classify like any other failure text.
    """
    if not raw.timed_out:
        return raw
    stderr = raw.stderr.rstrip("\n")
    stderr = f"{stderr}\n{TIMEOUT_MARKER}" if stderr else TIMEOUT_MARKER
    exit_code = raw.exit_code if raw.exit_code != 0 else TIMEOUT_EXIT_CODE
    return replace(raw, stderr=stderr, exit_code=exit_code)
