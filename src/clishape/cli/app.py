"""CLI application entry point and command routing for clishape.

This module is the **sole error boundary** for the entire application.
It catches :class:`~clishape.exceptions.ClishapeError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — guarding, running, parsing and
  presenting are delegated to :class:`~clishape.core.InvocationService`.
* Results go to stdout; diagnostics, errors and hints go to stderr
  through the console proxy.
* This module is the only place that configures logging and the only
  place that translates between the domain world and the OS process
  exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from clishape.cli import exit_codes
from clishape.cli.console import console, escape
from clishape.exceptions import ClishapeError
from clishape.version import __version__

if TYPE_CHECKING:
    from clishape.core.invocation_service import Invocation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _context_pair(value: str) -> tuple[str, str]:
    """``argparse`` type for ``--context key=value``."""
    key, sep, item = value.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected key=value, got {value!r}")
    return key.strip(), item


def _add_selection_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("tool", help="Wrapped tool, e.g. docker, git, helm.")
    parser.add_argument("action", help="Action within the tool, e.g. ps, status, list.")
    parser.add_argument(
        "--context",
        action="append",
        type=_context_pair,
        default=[],
        metavar="KEY=VALUE",
        help="Call context handed to the parser (repeatable).",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Always return the full result, never the compact projection.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the structured payload as JSON instead of text.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``clishape parse <tool> <action> [FILE]`` — parse recorded output
    * ``clishape run [OPTS] <tool> <action> [-- ARGS]`` — guard, run, parse
    * ``clishape actions``                     — list registered actions
    * ``clishape doctor``                      — environment diagnostics
    """
    parser = argparse.ArgumentParser(
        prog="clishape",
        description="Structured results from external command-line tools.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log to stderr (-v info, -vv debug).",
    )
    sub = parser.add_subparsers(dest="command")

    parse_cmd = sub.add_parser("parse", help="Parse output captured from a tool.")
    _add_selection_flags(parse_cmd)
    parse_cmd.add_argument(
        "file",
        nargs="?",
        default="-",
        help="File holding the tool's stdout ('-' or omitted reads stdin).",
    )
    parse_cmd.add_argument("--stderr-file", default=None, help="File holding the tool's stderr.")
    parse_cmd.add_argument("--exit-code", type=int, default=0, help="The tool's exit status.")
    parse_cmd.add_argument(
        "--timed-out",
        action="store_true",
        help="The captured run was stopped at its deadline.",
    )

    run_cmd = sub.add_parser("run", help="Guard, run and parse a tool invocation.")
    _add_selection_flags(run_cmd)
    run_cmd.add_argument("--cwd", default=None, help="Working directory for the tool.")
    run_cmd.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help="Runner timeout (defaults to CLISHAPE_TIMEOUT_MS).",
    )
    run_cmd.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Extra arguments after '--'.  Options must come before TOOL.",
    )

    sub.add_parser("actions", help="List registered (tool, action) pairs.")
    sub.add_parser("doctor", help="Check which wrapped tools are installed.")
    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.DEBUG if verbosity > 1 else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _emit(invocation: Invocation, as_json: bool) -> int:
    """Print the selected rendering and map the result to an exit code."""
    from clishape.core.classify import classify_failure, suggest_recovery
    from clishape.core.presentation import to_json

    presentation = invocation.presentation
    if as_json:
        print(to_json(presentation.structured, indent=2))
    else:
        print(presentation.text)

    if invocation.success:
        return exit_codes.SUCCESS

    category = classify_failure(invocation.raw.combined, invocation.raw.exit_code)
    console.print(f"[yellow]Hint:[/yellow] {escape(suggest_recovery(category, invocation.action.command))}")
    return exit_codes.GENERAL_ERROR


def _read_text(path: str) -> str:
    """Read *path* as UTF-8 text; ``-`` is stdin."""
    if path == "-":
        return sys.stdin.read()
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError as exc:
        raise ClishapeError(
            f"Cannot read {path}: {exc.strerror or exc}",
        ) from exc


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_parse(args: argparse.Namespace) -> int:
    """Replay captured output through the registered parser."""
    from clishape.core.invocation_service import InvocationService
    from clishape.core.models import RawInvocationResult
    from clishape.domains.registry import get_action
    from clishape.infra.subprocess_runner import SubprocessRunner

    action = get_action(args.tool, args.action)
    raw = RawInvocationResult(
        stdout=_read_text(args.file),
        stderr=_read_text(args.stderr_file) if args.stderr_file else "",
        exit_code=args.exit_code,
        timed_out=args.timed_out,
    )
    logger.debug("Replaying %s (%d bytes of stdout)", action.key, len(raw.stdout))
    service = InvocationService(SubprocessRunner())
    invocation = service.interpret(
        action, raw, context=dict(args.context), force_full=args.full,
    )
    return _emit(invocation, args.json)


def _handle_run(args: argparse.Namespace) -> int:
    """Guard, run and present one tool invocation."""
    from clishape.core.invocation_service import InvocationService
    from clishape.domains.registry import get_action
    from clishape.infra.subprocess_runner import SubprocessRunner

    extra: list[str] = list(args.args)
    if extra and extra[0] == "--":
        extra = extra[1:]

    action = get_action(args.tool, args.action)
    service = InvocationService(SubprocessRunner())
    invocation = service.run(
        action,
        extra,
        context=dict(args.context),
        cwd=args.cwd,
        timeout_ms=args.timeout_ms,
        force_full=args.full,
    )
    return _emit(invocation, args.json)


def _handle_actions() -> int:
    """Print every registered action, one per line."""
    from clishape.domains.registry import iter_actions

    actions = list(iter_actions())
    width = max(len(action.key) for action in actions)
    for action in actions:
        print(f"{action.key:<{width}}  {action.description}".rstrip())
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from clishape.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the clishape CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS
    if args.command == "parse":
        return _handle_parse(args)
    if args.command == "run":
        return _handle_run(args)
    if args.command == "actions":
        return _handle_actions()
    return _handle_doctor()


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except ClishapeError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
