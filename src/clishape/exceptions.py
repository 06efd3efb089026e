"""Custom exception hierarchy for clishape.

Besides configuration and registry lookups, only two kinds of failure
escape as exceptions: input rejected by a guard before any process runs,
and failures of the process runner itself.  A wrapped tool failing on
its own terms (a rejected push, a broken build) is never an exception;
it is a parsed result with ``success=False``.

Raw OS / subprocess exceptions must NEVER propagate beyond the
infrastructure layer.  They are caught there and re-raised as a typed
subclass defined here.

Hierarchy
---------
ClishapeError
├── GuardError
│   ├── FlagInjectionError
│   ├── InvalidPortMappingError
│   ├── UnsafeVolumeMountError
│   ├── UnsafeUrlError
│   ├── UnsafeHeaderError
│   ├── InputTooLongError
│   ├── CommandNotAllowedError
│   └── PolicyViolationError
├── RunnerError
│   ├── ExecutableNotFoundError
│   └── ProcessSpawnError
├── UnknownActionError
├── ConfigurationError
└── DependencyMissingError
"""

from __future__ import annotations


class ClishapeError(Exception):
    """Base exception for all clishape errors.

    Every caller-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input guards ----------------------------------------------------------

class GuardError(ClishapeError, ValueError):
    """Raised when caller input is rejected before any command runs."""

    def __init__(
        self,
        message: str,
        *,
        param_name: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.param_name: str | None = param_name
        """Name of the offending parameter, when known."""


class FlagInjectionError(GuardError):
    """Raised when a positional value would be read as an option flag."""


class InvalidPortMappingError(GuardError):
    """Raised for a malformed or unsafe ``host:container`` port mapping."""


class UnsafeVolumeMountError(GuardError):
    """Raised when a volume mount exposes a sensitive host path."""


class UnsafeUrlError(GuardError):
    """Raised for empty URLs or URLs outside the http/https schemes."""


class UnsafeHeaderError(GuardError):
    """Raised when a header key or value could split the request."""


class InputTooLongError(GuardError):
    """Raised when an input exceeds its length limit."""


class CommandNotAllowedError(GuardError):
    """Raised when a build command is outside the fixed allowlist."""


class PolicyViolationError(GuardError):
    """Raised when a command or directory is blocked by the configured policy."""


# --- Process runner --------------------------------------------------------

class RunnerError(ClishapeError):
    """Raised when the external command could not be executed at all."""


class ExecutableNotFoundError(RunnerError):
    """Raised when the requested executable is not on PATH."""


class ProcessSpawnError(RunnerError):
    """Raised when the operating system refuses to start the process."""


# --- Registry / environment ------------------------------------------------

class UnknownActionError(ClishapeError):
    """Raised when no parser is registered for a ``(tool, action)`` pair."""


class DependencyMissingError(ClishapeError):
    """Raised when an optional runtime dependency is not available."""


class ConfigurationError(ClishapeError):
    """Raised when a ``CLISHAPE_*`` environment variable holds an invalid value."""
