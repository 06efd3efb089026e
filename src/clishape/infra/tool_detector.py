"""Infrastructure: detection of the wrapped executables.

Locates each CLI that clishape knows how to drive and provides
platform-specific installation guidance for the ones that are missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No permanent PATH modification.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from clishape.exceptions import ExecutableNotFoundError

TOOL_COMMANDS: dict[str, str] = {
    "docker": "docker",
    "compose": "docker",
    "git": "git",
    "kubectl": "kubectl",
    "helm": "helm",
    "npm": "npm",
    "dotnet": "dotnet",
    "http": "curl",
}
"""Executable backing each domain."""


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of one executable lookup.

    Attributes
    ----------
    command : str
        Executable name that was looked up.
    found : bool
        Whether it was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    version_hint : str
        Human-readable status string (``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested install commands for the current platform.  Empty when
        the executable is already present.
    """

    command: str
    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(command: str, path: str | None = None) -> ToolStatus:
    """Search PATH (or the explicit search *path*) for *command*.

    Returns a :class:`ToolStatus` regardless of the outcome — the caller
    decides whether to abort or merely warn.
    """
    result = shutil.which(command, path=path)

    if result is not None:
        resolved = Path(result).resolve()
        return ToolStatus(
            command=command,
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return ToolStatus(
        command=command,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(command),
    )


def detect_tools() -> dict[str, ToolStatus]:
    """Look up every distinct executable in :data:`TOOL_COMMANDS`."""
    commands = dict.fromkeys(TOOL_COMMANDS.values())
    return {command: detect_tool(command) for command in commands}


def require_tool(command: str, path: str | None = None) -> Path:
    """Locate *command* or raise :class:`ExecutableNotFoundError`."""
    status = detect_tool(command, path)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append(f"Install {command} using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise ExecutableNotFoundError(
            f"{command} is not installed or not on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

_PACKAGES: dict[str, dict[str, tuple[str, ...]]] = {
    "windows": {
        "docker": ("winget install Docker.DockerDesktop",),
        "git": ("winget install Git.Git",),
        "kubectl": ("winget install Kubernetes.kubectl", "choco install kubernetes-cli"),
        "helm": ("winget install Helm.Helm", "choco install kubernetes-helm"),
        "npm": ("winget install OpenJS.NodeJS.LTS",),
        "dotnet": ("winget install Microsoft.DotNet.SDK.8",),
        "curl": ("winget install cURL.cURL",),
    },
    "linux": {
        "docker": ("sudo apt install docker.io docker-compose-plugin", "sudo dnf install moby-engine"),
        "git": ("sudo apt install git", "sudo dnf install git", "sudo pacman -S git"),
        "kubectl": ("sudo snap install kubectl --classic",),
        "helm": ("sudo snap install helm --classic",),
        "npm": ("sudo apt install nodejs npm", "sudo dnf install nodejs", "sudo pacman -S npm"),
        "dotnet": ("sudo apt install dotnet-sdk-8.0", "sudo dnf install dotnet-sdk-8.0"),
        "curl": ("sudo apt install curl", "sudo dnf install curl", "sudo pacman -S curl"),
    },
    "darwin": {
        "docker": ("brew install --cask docker",),
        "git": ("brew install git",),
        "kubectl": ("brew install kubectl",),
        "helm": ("brew install helm",),
        "npm": ("brew install node",),
        "dotnet": ("brew install --cask dotnet-sdk",),
        "curl": ("brew install curl",),
    },
}

_DOWNLOAD_PAGES: dict[str, str] = {
    "docker": "https://docs.docker.com/get-docker/",
    "git": "https://git-scm.com/downloads",
    "kubectl": "https://kubernetes.io/docs/tasks/tools/",
    "helm": "https://helm.sh/docs/intro/install/",
    "npm": "https://nodejs.org/en/download",
    "dotnet": "https://dotnet.microsoft.com/download",
    "curl": "https://curl.se/download.html",
}


def _platform_install_commands(command: str) -> tuple[str, ...]:
    """Return install commands for *command* on the current OS."""
    system = platform.system().lower()
    commands = _PACKAGES.get(system, {}).get(command)
    if commands:
        return commands
    page = _DOWNLOAD_PAGES.get(command)
    if page is None:
        return ()
    return (f"Please install {command} from {page}",)
