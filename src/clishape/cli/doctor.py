"""``clishape doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising which
of the wrapped executables are available on PATH.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from clishape.cli import exit_codes
from clishape.cli.console import console, rich_available
from clishape.infra.tool_detector import TOOL_COMMANDS, ToolStatus, detect_tools
from clishape.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _clishape_version_check() -> tuple[str, str, str]:
    return "clishape", __version__, "[green]OK[/green]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _tool_check(status: ToolStatus) -> tuple[str, str, str]:
    """Return (label, value, status) for one executable row.

    A missing executable is a warning, not a failure: ``parse`` works
    without any of them.
    """
    domains = [tool for tool, command in TOOL_COMMANDS.items() if command == status.command]
    label = f"{status.command} ({', '.join(domains)})"
    if status.found:
        return label, str(status.path) if status.path else "found", "[green]OK[/green]"
    return label, "not found", "[yellow]WARN[/yellow]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nclishape doctor", file=sys.stderr)
    print("=" * 72, file=sys.stderr)
    print(f"{'Component':<24} {'Value':<38} {'Status':<8}", file=sys.stderr)
    print("-" * 72, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<24} {value:<38} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def _print_rich_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    from rich.table import Table

    table = Table(
        title="clishape doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=16)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    tools = detect_tools()
    checks = [
        _clishape_version_check(),
        _python_version_check(),
        _os_check(),
        *(_tool_check(status) for status in tools.values()),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)
    use_rich = rich_available()

    if use_rich:
        _print_rich_doctor_table(checks)
    else:
        _print_plain_doctor_table(checks)

    missing = [status for status in tools.values() if not status.found and status.install_commands]
    for status in missing:
        if use_rich:
            console.print(f"[yellow]{status.command} is not installed.[/yellow] Install with:")
            for cmd in status.install_commands:
                console.print(f"  [bold]{cmd}[/bold]")
        else:
            print(f"{status.command} is not installed. Install with:", file=sys.stderr)
            for cmd in status.install_commands:
                print(f"  {cmd}", file=sys.stderr)
    if missing:
        console.print()

    if has_failure:
        if use_rich:
            console.print("[bold red]Some checks failed.[/bold red]")
        else:
            print("Some checks failed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    if use_rich:
        console.print("[bold green]All checks passed.[/bold green]")
    else:
        print("All checks passed.", file=sys.stderr)
    return exit_codes.SUCCESS
