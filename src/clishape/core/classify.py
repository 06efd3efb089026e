"""Error classification by ordered ``(pattern, kind)`` rule tables.

Each domain declares a tuple of :class:`ErrorRule` entries; the first
rule whose pattern matches the combined process output decides the
error kind, and no match yields the domain's ``unknown`` kind.  Order
is part of the table: where messages overlap, the more specific rule
must come first (a ``hook declined`` rejection is a rejection too).

The module also carries a generic, tool-independent failure taxonomy
with recovery suggestions, used to attach a hint to any failed result.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

E = TypeVar("E", bound=Enum)


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ErrorRule(Generic[E]):
    """Map output matching :attr:`pattern` to :attr:`kind`."""

    pattern: re.Pattern[str]
    kind: E


def rule(pattern: str, kind: E) -> ErrorRule[E]:
    """Build a case-insensitive :class:`ErrorRule`."""
    return ErrorRule(pattern=re.compile(pattern, re.IGNORECASE), kind=kind)


def classify(text: str, rules: Sequence[ErrorRule[E]], default: E) -> E:
    """Return the kind of the first rule matching *text*, else *default*."""
    for candidate in rules:
        if candidate.pattern.search(text):
            return candidate.kind
    return default


def first_error_line(text: str, fallback: str = "Command failed") -> str:
    """Pick the most informative line of failure output for a message.

    Prefers lines that mention ``error``/``fatal``; otherwise the first
    non-blank line.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines:
        if re.search(r"\b(error|fatal)\b", line, re.IGNORECASE):
            return line
    return lines[0] if lines else fallback


# ---------------------------------------------------------------------------
# Generic failure taxonomy
# ---------------------------------------------------------------------------

class FailureCategory(str, Enum):
    """Tool-independent failure categories."""

    COMMAND_NOT_FOUND = "command-not-found"
    PERMISSION_DENIED = "permission-denied"
    TIMEOUT = "timeout"
    INVALID_INPUT = "invalid-input"
    NOT_FOUND = "not-found"
    NETWORK_ERROR = "network-error"
    AUTHENTICATION_ERROR = "authentication-error"
    CONFLICT = "conflict"
    CONFIGURATION_ERROR = "configuration-error"
    ALREADY_EXISTS = "already-exists"
    COMMAND_FAILED = "command-failed"


# Authentication precedes permission ("403 Forbidden" is an auth problem,
# not a file mode problem); conflict precedes not-found.
_GENERIC_RULES: tuple[ErrorRule[FailureCategory], ...] = (
    rule(r"timed out|\btimeout\b|deadline exceeded", FailureCategory.TIMEOUT),
    rule(r"command not found|not recognized as an internal or external command|\bENOENT\b.*spawn|executable file not found", FailureCategory.COMMAND_NOT_FOUND),
    rule(r"authentication (?:failed|required)|unauthori[sz]ed|\b401\b|\b403\b|forbidden|invalid credentials|bad credentials|could not read username", FailureCategory.AUTHENTICATION_ERROR),
    rule(r"permission denied|\bEACCES\b|\bEPERM\b|operation not permitted|access is denied", FailureCategory.PERMISSION_DENIED),
    rule(r"could not resolve host|connection refused|network is unreachable|\bECONNREFUSED\b|\bENOTFOUND\b|\bETIMEDOUT\b|\bECONNRESET\b|no such host|temporary failure in name resolution", FailureCategory.NETWORK_ERROR),
    rule(r"already exists|\bEEXIST\b", FailureCategory.ALREADY_EXISTS),
    rule(r"invalid configuration|config(?:uration)? (?:file )?(?:error|not found|missing)|malformed config", FailureCategory.CONFIGURATION_ERROR),
    rule(r"\bconflict\b|merge conflict|CONFLICT \(", FailureCategory.CONFLICT),
    rule(r"not found|no such file|does not exist|\b404\b", FailureCategory.NOT_FOUND),
    rule(r"invalid (?:argument|option|value|input)|unknown (?:flag|option|command)|usage:", FailureCategory.INVALID_INPUT),
)

_SUGGESTIONS: dict[FailureCategory, str] = {
    FailureCategory.COMMAND_NOT_FOUND: "Ensure '{command}' is installed and available on PATH.",
    FailureCategory.PERMISSION_DENIED: "Check file/directory permissions or run with elevated privileges.",
    FailureCategory.TIMEOUT: "The command timed out. Try a longer timeout or check for hanging processes.",
    FailureCategory.INVALID_INPUT: "Check the arguments passed to '{command}'.",
    FailureCategory.NOT_FOUND: "Verify that the referenced file, resource, or path exists.",
    FailureCategory.NETWORK_ERROR: "Check network connectivity and that the remote endpoint is reachable.",
    FailureCategory.AUTHENTICATION_ERROR: "Check credentials or re-authenticate with '{command}'.",
    FailureCategory.CONFLICT: "Resolve the conflicting state before retrying.",
    FailureCategory.CONFIGURATION_ERROR: "Review the configuration files used by '{command}'.",
    FailureCategory.ALREADY_EXISTS: "The target already exists. Choose a different name or remove it first.",
    FailureCategory.COMMAND_FAILED: "'{command}' failed. Inspect its error output for details.",
}


def classify_failure(text: str, exit_code: int | None = None) -> FailureCategory:
    """Classify failure output into a :class:`FailureCategory`.

    Exit code ``124`` always means timeout and ``127`` always means the
    command was not found, regardless of the text.
    """
    if exit_code == 124:
        return FailureCategory.TIMEOUT
    if exit_code == 127:
        return FailureCategory.COMMAND_NOT_FOUND
    return classify(text, _GENERIC_RULES, FailureCategory.COMMAND_FAILED)


def suggest_recovery(category: FailureCategory, command: str) -> str:
    """Return a one-line recovery suggestion for *category*."""
    return _SUGGESTIONS[category].format(command=command)
