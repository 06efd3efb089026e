"""The unit of registration: one parser + renderer per (tool, action).

An :class:`Action` knows which executable to run, how to turn caller
input into a validated argument vector, how to parse the raw output,
and how to present the parsed result.  Domains declare their actions as
module-level tuples; :mod:`clishape.domains.registry` collects them.

Caller input
------------
* Positional *args* are the action's operands (an image, a ref, a URL).
* The *context* mapping carries named options (``namespace``,
  ``ports``) and is also handed to the parser.

Argument builders validate both before returning the vector, so a
rejected value never reaches the process runner.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from clishape.core.guards import assert_positional_args
from clishape.core.models import RawInvocationResult, fold_timeout
from clishape.core.presentation import Presentation, Renderer
from clishape.exceptions import GuardError

F = TypeVar("F")

Context = Mapping[str, str]
"""Call context handed to builders and parsers (requested image, namespace, …)."""

ArgBuilder = Callable[[Sequence[str], Context], list[str]]
"""``(args, context) -> argv`` without the executable; raises ``GuardError``."""

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


# ---------------------------------------------------------------------------
# Builder helpers
# ---------------------------------------------------------------------------

def fixed_args(*base: str) -> ArgBuilder:
    """Builder for actions that append plain positional values to *base*."""

    def build(args: Sequence[str], _context: Context) -> list[str]:
        assert_positional_args(args)
        return [*base, *args]

    return build


def single_operand(args: Sequence[str], context: Context, key: str) -> str | None:
    """Return the one positional operand, falling back to ``context[key]``.

    Raises
    ------
    GuardError
        If more than one positional value was supplied.
    """
    if len(args) > 1:
        raise GuardError(
            f"Expected at most one {key}, got {len(args)} arguments.",
            param_name=key,
        )
    if args:
        return args[0]
    return context.get(key) or None


def require_operand(args: Sequence[str], context: Context, key: str) -> str:
    value = single_operand(args, context, key)
    if value is None:
        raise GuardError(
            f"Missing {key}.",
            param_name=key,
            hint=f"Pass it as an argument or with --context {key}=...",
        )
    return value


def context_int(context: Context, key: str) -> int | None:
    """Read an optional non-negative integer from *context*."""
    value = context.get(key, "").strip()
    return int(value) if value.isascii() and value.isdigit() else None


def context_flag(context: Context, key: str, default: bool = False) -> bool:
    """Read a boolean option; anything but a recognised word is rejected."""
    value = context.get(key, "").strip().lower()
    if not value:
        return default
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise GuardError(f'Invalid {key}: "{context[key]}". Expected true or false.', param_name=key)


def context_list(context: Context, key: str) -> list[str]:
    """Split a comma-separated option; blank items are dropped."""
    return [item.strip() for item in context.get(key, "").split(",") if item.strip()]


# ---------------------------------------------------------------------------
# Action
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Action(Generic[F]):
    """A registered (tool, action) pair."""

    tool: str
    """Domain name, e.g. ``docker``."""

    name: str
    """Action name within the domain, e.g. ``ps``."""

    command: str
    """Executable to run."""

    arguments: ArgBuilder
    """Validates caller input and returns the argument vector."""

    parser: Callable[[RawInvocationResult, Context], F]
    renderer: Renderer[F, Any]
    description: str = ""

    is_build: bool = False
    """Runs a build tool; the executable must be in the build allowlist."""

    @property
    def key(self) -> str:
        return f"{self.tool} {self.name}"

    def argv(self, args: Sequence[str] = (), context: Context | None = None) -> list[str]:
        """Return the validated arguments for one run (executable excluded)."""
        return self.arguments(args, context or {})

    def parse(self, raw: RawInvocationResult, context: Context | None = None) -> F:
        """Parse *raw*, folding a timed-out run into an ordinary failure."""
        return self.parser(fold_timeout(raw), context or {})

    def present(self, result: F, raw_text: str, force_full: bool = False) -> Presentation[Any]:
        return self.renderer.present(result, raw_text, force_full=force_full)
