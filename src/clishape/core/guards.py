"""Input-safety guards run before any external command is executed.

Every guard takes one caller-supplied string, returns ``None`` when it is
safe to place on a command line, and raises a
:class:`~clishape.exceptions.GuardError` subclass otherwise.  Guards never
coerce or "fix" input.

Rules
-----
* Pure: no I/O, no shared state; safe to call from any thread.
* Must run strictly before :meth:`ProcessRunner.invoke` — a rejected
  value means no process is started for that call.
* Error messages name the offending parameter and echo the value.
"""

from __future__ import annotations

import logging
import ntpath
import os
import posixpath
import re
from collections.abc import Collection, Sequence

from clishape.config import Settings
from clishape.exceptions import (
    CommandNotAllowedError,
    FlagInjectionError,
    InvalidPortMappingError,
    PolicyViolationError,
    UnsafeHeaderError,
    UnsafeUrlError,
    UnsafeVolumeMountError,
)
from clishape.utils.limits import ARRAY_MAX, STRING_MAX, assert_max_length

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Flag injection
# ---------------------------------------------------------------------------

def assert_no_flag_injection(value: str, param_name: str) -> None:
    """Reject *value* if it would be parsed as an option flag.

    Leading whitespace is ignored, so ``"  --privileged"`` is rejected
    just like ``"--privileged"``.  The empty string is allowed.
    """
    if value.lstrip().startswith("-"):
        raise FlagInjectionError(
            f'Invalid {param_name}: "{value}". Values must not start with "-".',
            param_name=param_name,
        )


def assert_positional_args(args: Sequence[str], param_name: str = "args") -> None:
    """Apply :func:`assert_no_flag_injection` and length limits to every item.

    Used for caller-supplied values appended to a fixed command vector.
    """
    assert_max_length(args, ARRAY_MAX, param_name)
    for index, value in enumerate(args):
        label = f"{param_name}[{index}]"
        assert_max_length(value, STRING_MAX, label)
        assert_no_flag_injection(value, label)


# ---------------------------------------------------------------------------
# Port mappings
# ---------------------------------------------------------------------------

_SHELL_METACHARS = re.compile(r"[;|&`<>\s]|\$\(")
_IPV4 = r"\d{1,3}(?:\.\d{1,3}){3}"
_IPV6 = r"\[[0-9A-Fa-f:.]+\]"
_PORT_MAPPING = re.compile(
    rf"^(?:(?P<ip>{_IPV4}|{_IPV6}):)?"
    r"(?P<host>\d+(?:-\d+)?)"
    r":(?P<container>\d+(?:-\d+)?)"
    r"(?:/(?P<proto>tcp|udp|sctp))?$"
)

PORT_MIN: int = 1
PORT_MAX: int = 65_535


def _check_port_range(spec: str, label: str, value: str) -> None:
    bounds = [int(part) for part in spec.split("-")]
    for port in bounds:
        if not PORT_MIN <= port <= PORT_MAX:
            raise InvalidPortMappingError(
                f'Invalid port mapping "{value}": {label} port {port} is outside '
                f"{PORT_MIN}-{PORT_MAX}.",
                param_name="ports",
            )
    if len(bounds) == 2 and bounds[0] > bounds[1]:
        raise InvalidPortMappingError(
            f'Invalid port mapping "{value}": {label} port range {spec} is reversed.',
            param_name="ports",
        )


def assert_valid_port_mapping(value: str) -> None:
    """Validate ``[host_ip:]hostport[-hostport]:containerport[-containerport][/proto]``.

    ``proto`` is one of ``tcp``, ``udp`` or ``sctp``; every port must lie
    in ``1..65535``.

    Raises
    ------
    FlagInjectionError
        If the value starts with ``-``.
    InvalidPortMappingError
        For shell metacharacters, malformed specifiers, or bad ports.
    """
    assert_no_flag_injection(value, "ports")
    if _SHELL_METACHARS.search(value):
        raise InvalidPortMappingError(
            f'Invalid port mapping "{value}": contains shell metacharacters or whitespace.',
            param_name="ports",
        )
    match = _PORT_MAPPING.match(value)
    if match is None:
        raise InvalidPortMappingError(
            f'Invalid port mapping "{value}".',
            param_name="ports",
            hint="Expected [host_ip:]hostport[-hostport]:containerport[-containerport][/tcp|udp|sctp].",
        )

    host_ip = match.group("ip")
    if host_ip and not host_ip.startswith("["):
        if any(int(octet) > 255 for octet in host_ip.split(".")):
            raise InvalidPortMappingError(
                f'Invalid port mapping "{value}": bad host address {host_ip}.',
                param_name="ports",
            )

    _check_port_range(match.group("host"), "host", value)
    _check_port_range(match.group("container"), "container", value)


# ---------------------------------------------------------------------------
# Volume mounts
# ---------------------------------------------------------------------------

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:[\\/]")
_DRIVE_ROOT = re.compile(r"^[A-Za-z]:[\\/]*$")
_BARE_DRIVE = re.compile(r"^[A-Za-z]:(?=:|$)")

DENIED_MOUNT_PATHS: tuple[str, ...] = (
    "/etc",
    "/proc",
    "/sys",
    "/dev",
    "/root",
    "/var/run/docker.sock",
)
"""Host paths that may not be mounted, nor anything beneath them."""


def _split_mount(value: str) -> tuple[str, str]:
    """Split at the first unescaped ``:`` after any drive prefix.

    A backslash escapes a colon only in POSIX-style paths; after a drive
    prefix it is a path separator.  A bare drive (``C:``) is its own host
    side.
    """
    if _BARE_DRIVE.match(value):
        return value[:2], value[3:]

    windows = _DRIVE_PREFIX.match(value) is not None
    index = 3 if windows else 0
    while index < len(value):
        char = value[index]
        if not windows and char == "\\" and value[index + 1:index + 2] == ":":
            index += 2
            continue
        if char == ":":
            return value[:index], value[index + 1:]
        index += 1
    return value, ""


def _is_denied_host_path(host: str) -> bool:
    if _DRIVE_PREFIX.match(host) or _DRIVE_ROOT.match(host):
        return _DRIVE_ROOT.match(ntpath.normpath(host)) is not None

    if not host.startswith("/"):
        # Named volume or relative path.
        return False

    normalized = posixpath.normpath(host)
    # POSIX keeps a leading "//"; collapse it so "//etc" is caught.
    normalized = "/" + normalized.lstrip("/")
    if normalized == "/":
        return True
    return any(
        normalized == denied or normalized.startswith(denied + "/")
        for denied in DENIED_MOUNT_PATHS
    )


def assert_safe_volume_mount(value: str) -> None:
    """Reject mounts of ``/``, drive roots, or sensitive system paths.

    The host side is normalized first (``/tmp/../etc`` is ``/etc``), and
    matching is per path component, so ``/etcetera`` is allowed while
    ``/etc/shadow`` is not.  Named volumes are always allowed.
    """
    assert_no_flag_injection(value, "volumes")
    if not value.strip():
        raise UnsafeVolumeMountError("Volume mount must not be empty.", param_name="volumes")

    host, _container = _split_mount(value)
    if _is_denied_host_path(host):
        raise UnsafeVolumeMountError(
            f'Unsafe volume mount "{value}": host path "{host}" is not allowed.',
            param_name="volumes",
            hint="Mounting system directories or the Docker socket is blocked.",
        )


# ---------------------------------------------------------------------------
# URLs and headers
# ---------------------------------------------------------------------------

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
ALLOWED_URL_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def assert_safe_url(value: str, param_name: str = "url") -> None:
    """Allow only non-empty ``http``/``https`` URLs (scheme case-insensitive)."""
    stripped = value.strip()
    if not stripped:
        raise UnsafeUrlError(f"{param_name} must not be empty.", param_name=param_name)

    match = _SCHEME_RE.match(stripped)
    scheme = match.group(1).lower() if match else ""
    if scheme not in ALLOWED_URL_SCHEMES:
        raise UnsafeUrlError(
            f'Unsafe URL scheme "{scheme or "(none)"}" in {param_name}: {stripped}',
            param_name=param_name,
            hint="Only http:// and https:// URLs are allowed.",
        )


_HEADER_FORBIDDEN = ("\r", "\n", "\x00")


def assert_safe_header(key: str, value: str) -> None:
    """Reject header keys or values carrying CR, LF or NUL."""
    for part, label in ((key, "key"), (value, "value")):
        if any(char in part for char in _HEADER_FORBIDDEN):
            raise UnsafeHeaderError(
                f"Header {label} for {key!r} contains CR, LF or NUL characters.",
                param_name="headers",
            )


# ---------------------------------------------------------------------------
# Command allowlists
# ---------------------------------------------------------------------------

BUILD_COMMANDS: frozenset[str] = frozenset({
    "npm", "npx", "pnpm", "yarn", "bun", "bunx",
    "make", "cmake", "gradle", "gradlew", "mvn", "ant",
    "cargo", "go", "dotnet", "msbuild",
    "tsc", "esbuild", "vite", "webpack", "rollup",
    "turbo", "nx", "bazel",
})
"""Build tools a build action may execute."""

_EXECUTABLE_SUFFIX = re.compile(r"\.(?:exe|cmd|bat|sh)$", re.IGNORECASE)


def command_basename(command: str) -> str:
    """Return the executable name without directories or script suffix."""
    name = re.split(r"[\\/]", command.strip())[-1]
    return _EXECUTABLE_SUFFIX.sub("", name)


def assert_allowed_command(
    command: str,
    allowed: Collection[str] = BUILD_COMMANDS,
) -> str:
    """Check *command* against *allowed* and return its basename.

    A command given as a full path is reduced to its basename before the
    check.
    """
    assert_no_flag_injection(command, "command")
    if "/" in command or "\\" in command:
        logger.warning("Command given as a path, checking basename only: %s", command)
    base = command_basename(command)
    if base not in allowed:
        raise CommandNotAllowedError(
            f'Command "{base}" is not allowed. Allowed: {", ".join(sorted(allowed))}',
            param_name="command",
        )
    return base


def assert_allowed_by_policy(command: str, tool: str, settings: Settings) -> None:
    """Enforce the configured command allowlist for *tool*.

    No-op when neither ``CLISHAPE_ALLOWED_COMMANDS`` nor the per-tool
    variable is set.
    """
    allowed = settings.allowed_commands_for(tool)
    if allowed is None:
        return
    base = command_basename(command)
    if base not in {command_basename(entry) for entry in allowed}:
        raise PolicyViolationError(
            f'Command "{base}" is not allowed by policy. Allowed: {", ".join(allowed)}',
            param_name="command",
            hint=f"Adjust CLISHAPE_{tool.upper()}_ALLOWED_COMMANDS or CLISHAPE_ALLOWED_COMMANDS.",
        )


def assert_allowed_root(path: str, settings: Settings) -> None:
    """Require *path* to equal or fall under one of the configured roots."""
    roots = settings.allowed_roots
    if roots is None:
        return
    candidate = os.path.normpath(os.path.abspath(path))
    for root in roots:
        base = os.path.normpath(os.path.abspath(root))
        if candidate == base or candidate.startswith(base.rstrip(os.sep) + os.sep):
            return
    raise PolicyViolationError(
        f'Path "{path}" is outside the allowed roots. Allowed: {", ".join(roots)}',
        param_name="cwd",
        hint="Adjust CLISHAPE_ALLOWED_ROOTS.",
    )
