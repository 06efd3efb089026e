"""``git`` domain: status, log, push and pull."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import Action, Context, context_flag, context_int, single_operand
from clishape.core.models import RawInvocationResult
from clishape.domains.git import formatters, guards, parsers
from clishape.domains.git.models import GitLog, GitPull, GitPush, GitStatus
from clishape.exceptions import GuardError

# ---------------------------------------------------------------------------
# Argument builders
# ---------------------------------------------------------------------------

def _status_args(args: Sequence[str], _context: Context) -> list[str]:
    if args:
        raise GuardError("git status takes no arguments.", param_name="args")
    return guards.build_status_args()


def _log_args(args: Sequence[str], context: Context) -> list[str]:
    max_count = context_int(context, "max_count")
    return guards.build_log_args(
        max_count=max_count if max_count is not None else guards.DEFAULT_LOG_COUNT,
        ref=single_operand(args, context, "ref"),
    )


def _remote_and_branch(args: Sequence[str], context: Context) -> tuple[str | None, str | None]:
    """``[REMOTE [BRANCH]]`` operands, each falling back to the context."""
    if len(args) > 2:
        raise GuardError(
            f"Expected at most a remote and a branch, got {len(args)} arguments.",
            param_name="args",
        )
    remote = args[0] if args else context.get("remote") or None
    branch = args[1] if len(args) > 1 else context.get("branch") or None
    return remote, branch


def _push_args(args: Sequence[str], context: Context) -> list[str]:
    remote, branch = _remote_and_branch(args, context)
    return guards.build_push_args(
        remote or "origin",
        branch,
        set_upstream=context_flag(context, "set_upstream"),
        force_with_lease=context_flag(context, "force_with_lease"),
    )


def _pull_args(args: Sequence[str], context: Context) -> list[str]:
    remote, branch = _remote_and_branch(args, context)
    if branch and remote is None:
        remote = "origin"
    return guards.build_pull_args(remote, branch, rebase=context_flag(context, "rebase"))


# ---------------------------------------------------------------------------
# Parser adapters
# ---------------------------------------------------------------------------

def _status(raw: RawInvocationResult, _context: Context) -> GitStatus:
    return parsers.parse_status(raw.stdout, raw.stderr, raw.exit_code)


def _log(raw: RawInvocationResult, _context: Context) -> GitLog:
    return parsers.parse_log(raw.stdout, raw.stderr, raw.exit_code)


def _push(raw: RawInvocationResult, context: Context) -> GitPush:
    return parsers.parse_push(
        raw.stdout,
        raw.stderr,
        raw.exit_code,
        remote=context.get("remote", "origin"),
        branch=context.get("branch", ""),
    )


def _pull(raw: RawInvocationResult, _context: Context) -> GitPull:
    return parsers.parse_pull(raw.stdout, raw.stderr, raw.exit_code)


ACTIONS: tuple[Action, ...] = (
    Action("git", "status", "git", _status_args, _status, formatters.STATUS_RENDERER,
           description="Working tree status"),
    Action("git", "log", "git", _log_args, _log, formatters.LOG_RENDERER,
           description="Commit history [REF] (context: ref, max_count)"),
    Action("git", "push", "git", _push_args, _push, formatters.PUSH_RENDERER,
           description="Push commits [REMOTE [BRANCH]] "
                       "(context: remote, branch, set_upstream, force_with_lease)"),
    Action("git", "pull", "git", _pull_args, _pull, formatters.PULL_RENDERER,
           description="Pull and integrate remote changes [REMOTE [BRANCH]] "
                       "(context: remote, branch, rebase)"),
)

__all__: list[str] = ["ACTIONS"]
