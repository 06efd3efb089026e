"""``http`` domain: requests made through ``curl``."""

from __future__ import annotations

from collections.abc import Sequence

from clishape.core.actions import Action, Context, context_flag, require_operand
from clishape.core.models import RawInvocationResult
from clishape.domains.http import formatters, guards, parsers
from clishape.domains.http.models import HttpResponse
from clishape.exceptions import GuardError

HEADER_PREFIX: str = "header."
"""Context keys naming one request header each, e.g. ``header.Accept``."""


def _timeout(context: Context) -> float | None:
    value = context.get("max_time", "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise GuardError(
            f'Invalid max_time: "{value}". Expected seconds.',
            param_name="max_time",
        ) from exc


def _request_args(args: Sequence[str], context: Context) -> list[str]:
    headers = {
        key[len(HEADER_PREFIX):]: value
        for key, value in context.items()
        if key.startswith(HEADER_PREFIX)
    }
    return guards.build_curl_args(
        require_operand(args, context, "url"),
        method=context.get("method") or "GET",
        headers=headers,
        data=context.get("data"),
        follow_redirects=context_flag(context, "follow_redirects", default=True),
        timeout_seconds=_timeout(context),
    )


def _request(raw: RawInvocationResult, _context: Context) -> HttpResponse:
    return parsers.parse_response(raw.stdout, raw.stderr, raw.exit_code)


ACTIONS: tuple[Action, ...] = (
    Action("http", "request", "curl", _request_args, _request, formatters.RESPONSE_RENDERER,
           description="Request a URL and parse the response URL "
                       "(context: method, header.NAME, data, follow_redirects, max_time)"),
)

__all__: list[str] = ["ACTIONS"]
