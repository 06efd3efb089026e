"""Core invocation service: guard, run, sanitize, parse, present.

This is the central service class consumed by the CLI layer.  It
depends on a :class:`~clishape.core.protocols.ProcessRunner` injected at
construction time (dependency inversion), keeping the core free of any
subprocess imports.  Actions are resolved by the caller (normally via
:mod:`clishape.domains.registry`) and handed in.

Guarantees
----------
* Guards and policy checks run before the runner is touched.  A rejected
  input never spawns a process.
* Only :class:`~clishape.exceptions.ClishapeError` subclasses escape.
* A tool that runs and fails is a parsed result, not an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

from clishape.config import Settings, get_settings
from clishape.core.actions import Action, Context
from clishape.core.guards import assert_allowed_by_policy, assert_allowed_command, assert_allowed_root
from clishape.core.models import RawInvocationResult
from clishape.core.presentation import Presentation
from clishape.core.protocols import ProcessRunner
from clishape.core.sanitize import sanitize_error_output
from clishape.exceptions import ClishapeError, ProcessSpawnError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Invocation:
    """Outcome of one guarded run (or one replayed capture)."""

    action: Action[Any]
    raw: RawInvocationResult
    """Runner output after stderr sanitization."""

    result: Any
    """Full parsed record."""

    presentation: Presentation[Any]
    """Structured and text views chosen by the selection policy."""

    @property
    def success(self) -> bool:
        return bool(getattr(self.result, "success", self.raw.exit_code == 0))


class InvocationService:
    """Runs registered actions through an injected process runner.

    Parameters
    ----------
    runner:
        Any object satisfying the :class:`ProcessRunner` protocol.
    settings:
        Invocation policy.  Defaults to :func:`~clishape.config.get_settings`.
    """

    def __init__(self, runner: ProcessRunner, settings: Settings | None = None) -> None:
        self._runner: ProcessRunner = runner
        self._settings: Settings = settings if settings is not None else get_settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        action: Action[Any],
        args: Sequence[str] = (),
        *,
        context: Context | None = None,
        cwd: str | None = None,
        timeout_ms: int | None = None,
        stdin: str | None = None,
        force_full: bool = False,
    ) -> Invocation:
        """Screen *args*, run *action*, and return its parsed outcome.

        Raises
        ------
        GuardError
            If an argument, the command or *cwd* is rejected.
        ExecutableNotFoundError
            If the action's executable is not on PATH.
        ProcessSpawnError
            If the process could not be started.
        """
        ctx = dict(context or {})
        argv = self._check(action, args, ctx, cwd)
        raw = self._invoke(
            action,
            argv,
            cwd=cwd,
            timeout_ms=timeout_ms if timeout_ms is not None else self._settings.timeout_ms,
            stdin=stdin,
        )
        return self.interpret(action, raw, context=ctx, force_full=force_full)

    def interpret(
        self,
        action: Action[Any],
        raw: RawInvocationResult,
        *,
        context: Context | None = None,
        force_full: bool = False,
    ) -> Invocation:
        """Parse and present output that was captured elsewhere.

        Pure: no guard, no runner.  Used for replaying recorded output
        and as the second half of :meth:`run`.
        """
        cleaned = replace(
            raw,
            stderr=sanitize_error_output(raw.stderr, all_paths=self._settings.sanitize_all_paths),
        )
        result = action.parse(cleaned, context)
        presentation = action.present(result, cleaned.combined, force_full=force_full)
        logger.debug(
            "%s parsed (exit=%d, compact=%s)", action.key, cleaned.exit_code, presentation.compact,
        )
        return Invocation(action=action, raw=cleaned, result=result, presentation=presentation)

    # ------------------------------------------------------------------
    # Pre-run checks
    # ------------------------------------------------------------------

    def _check(
        self,
        action: Action[Any],
        args: Sequence[str],
        context: Context,
        cwd: str | None,
    ) -> list[str]:
        """Validate every input and return the argument vector to run."""
        argv = action.argv(args, context)
        if action.is_build:
            assert_allowed_command(action.command)
        assert_allowed_by_policy(action.command, action.tool, self._settings)
        if cwd is not None:
            assert_allowed_root(cwd, self._settings)
        return argv

    # ------------------------------------------------------------------
    # Runner delegation (safe boundary)
    # ------------------------------------------------------------------

    def _invoke(
        self,
        action: Action[Any],
        argv: list[str],
        *,
        cwd: str | None,
        timeout_ms: int,
        stdin: str | None,
    ) -> RawInvocationResult:
        """Call the runner and ensure only our exceptions escape."""
        logger.info("Running %s %s", action.command, " ".join(argv))
        try:
            raw = self._runner.invoke(
                action.command, argv, cwd=cwd, timeout_ms=timeout_ms, stdin=stdin,
            )
        except ClishapeError:
            raise
        except Exception as exc:
            raise ProcessSpawnError(
                f"Unexpected runner error: {exc}",
            ) from exc
        if raw.timed_out:
            logger.warning("%s timed out after %d ms", action.key, timeout_ms)
        return raw
