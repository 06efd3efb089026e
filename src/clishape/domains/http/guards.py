"""Request guards and the ``curl`` command-vector builder."""

from __future__ import annotations

from collections.abc import Mapping

from clishape.core.guards import assert_safe_header, assert_safe_url
from clishape.domains.http.parsers import WRITE_OUT
from clishape.exceptions import GuardError
from clishape.utils.limits import MESSAGE_MAX, STRING_MAX, assert_max_length

METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})

BASE_ARGS: tuple[str, ...] = ("-sS", "-i", "-w", WRITE_OUT)
"""Silent with errors, headers included, metadata footer appended."""


def validate_url(url: str) -> None:
    assert_max_length(url, STRING_MAX, "url")
    assert_safe_url(url)


def validate_method(method: str) -> str:
    normalized = method.strip().upper()
    if normalized not in METHODS:
        raise GuardError(
            f'Invalid HTTP method: "{method}".',
            param_name="method",
            hint=f"Allowed: {', '.join(sorted(METHODS))}",
        )
    return normalized


def build_curl_args(
    url: str,
    *,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    data: str | None = None,
    follow_redirects: bool = True,
    timeout_seconds: float | None = None,
) -> list[str]:
    """Validate a request and assemble the ``curl`` arguments for it."""
    validate_url(url)
    verb = validate_method(method)
    args = list(BASE_ARGS)
    if verb == "HEAD":
        args.append("-I")
    elif verb != "GET" or data is not None:
        args.extend(["-X", verb])
    if follow_redirects:
        args.append("-L")
    if timeout_seconds is not None:
        args.extend(["--max-time", f"{max(timeout_seconds, 0.1):g}"])
    for key, value in (headers or {}).items():
        assert_safe_header(key, value)
        args.extend(["-H", f"{key}: {value}"])
    if data is not None:
        assert_max_length(data, MESSAGE_MAX, "data")
        args.extend(["--data-raw", data])
    args.append(url.strip())
    return args
