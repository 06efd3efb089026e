"""Parser for ``curl -i`` output.

curl prints one status line and header block per response it receives:
interim ``100 Continue`` responses and, with ``-L``, every redirect.
The last block is the final response and everything after its blank
line is the body.  When the request was built by
:func:`clishape.domains.http.guards.build_curl_args`, a write-out footer
after :data:`META_SEPARATOR` carries timing, transfer sizes, the URL
scheme, the TLS verify result and the effective URL.
"""

from __future__ import annotations

import math
import re

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import to_int
from clishape.domains.http.models import HttpErrorType, HttpResponse, RedirectHop, TimingDetails

META_SEPARATOR: str = "---CLISHAPE_HTTP_META---"

_META_FIELDS: tuple[str, ...] = (
    "time_total",
    "size_download",
    "size_upload",
    "time_namelookup",
    "time_connect",
    "time_appconnect",
    "time_pretransfer",
    "time_starttransfer",
    "scheme",
    "ssl_verify_result",
    "url_effective",
)

WRITE_OUT: str = "\n" + META_SEPARATOR + "\n" + "\t".join(f"%{{{name}}}" for name in _META_FIELDS)
"""``curl -w`` format producing the footer :func:`parse_response` reads.

Fields are tab separated and any of them may be empty.
"""

_STATUS_LINE = re.compile(r"^(?P<version>HTTP/[\d.]+)\s+(?P<status>\d{3})(?:\s+(?P<text>.*))?$")
_BLANK_LINE = re.compile(r"\r?\n\r?\n")

_EXIT_CODES = {
    6: HttpErrorType.DNS,
    7: HttpErrorType.CONNECTION_REFUSED,
    28: HttpErrorType.TIMEOUT,
    35: HttpErrorType.SSL,
    51: HttpErrorType.SSL,
    58: HttpErrorType.SSL,
    60: HttpErrorType.SSL,
    124: HttpErrorType.TIMEOUT,
}

_RULES: tuple[ErrorRule[HttpErrorType], ...] = (
    rule(r"timed out", HttpErrorType.TIMEOUT),
    rule(r"could not resolve host|name or service not known", HttpErrorType.DNS),
    rule(r"connection refused|failed to connect", HttpErrorType.CONNECTION_REFUSED),
    rule(r"\bSSL\b|\bTLS\b|certificate", HttpErrorType.SSL),
)


def _seconds(text: str | None) -> float | None:
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) and value >= 0 else None


def _timing(meta: dict[str, str]) -> TimingDetails | None:
    """Per-phase timings, or ``None`` when curl reported no phases at all."""
    namelookup = _seconds(meta.get("time_namelookup"))
    connect = _seconds(meta.get("time_connect"))
    starttransfer = _seconds(meta.get("time_starttransfer"))
    if not namelookup and not connect and not starttransfer:
        return None
    return TimingDetails(
        namelookup=namelookup or 0.0,
        connect=connect or 0.0,
        appconnect=_seconds(meta.get("time_appconnect")) or None,
        pretransfer=_seconds(meta.get("time_pretransfer")) or None,
        starttransfer=starttransfer or None,
    )


def _split_meta(text: str) -> tuple[str, dict[str, str]]:
    """Separate the write-out footer from the response, keyed by field name."""
    index = text.rfind(META_SEPARATOR)
    if index == -1:
        return text, {}
    response = text[:index]
    if response.endswith("\n"):
        response = response[:-1]
    footer = text[index + len(META_SEPARATOR):].strip("\r\n")
    parts = [part.strip() for part in footer.split("\t")]
    return response, dict(zip(_META_FIELDS, parts))


def _meta_fields(meta: dict[str, str]) -> dict[str, object]:
    size_upload = to_int(meta.get("size_upload"), 0)
    verify = to_int(meta.get("ssl_verify_result"), -1)
    return dict(
        elapsed_seconds=_seconds(meta.get("time_total")),
        timing=_timing(meta),
        upload_size=size_upload if size_upload > 0 else None,
        scheme=(meta.get("scheme") or "").lower() or None,
        tls_verify_result=verify if verify >= 0 else None,
        final_url=meta.get("url_effective") or None,
    )


def _read_blocks(text: str) -> tuple[list[tuple[str, int, str, dict[str, str]]], str]:
    """Split *text* into ``(version, status, reason, headers)`` blocks and a body."""
    blocks = []
    rest = text
    while rest.startswith("HTTP/"):
        separator = _BLANK_LINE.search(rest)
        head, remaining = (rest[: separator.start()], rest[separator.end():]) if separator else (rest, "")
        lines = head.splitlines()
        status_line = _STATUS_LINE.match(lines[0].strip())
        if status_line is None:
            break
        rest = remaining
        headers: dict[str, str] = {}
        for line in lines[1:]:
            name, sep, value = line.partition(":")
            if sep and name.strip():
                headers[name.strip().lower()] = value.strip()
        blocks.append(
            (
                status_line.group("version"),
                int(status_line.group("status")),
                (status_line.group("text") or "").strip(),
                headers,
            )
        )
    return blocks, rest


def parse_response(stdout: str, stderr: str, exit_code: int) -> HttpResponse:
    """Parse ``curl -i`` output into the final response."""
    text, meta = _split_meta(stdout)
    blocks, body = _read_blocks(text.lstrip("\r\n"))

    redirects = tuple(
        RedirectHop(status=status, location=headers["location"])
        for _, status, _, headers in blocks[:-1]
        if "location" in headers
    )
    if blocks:
        version, status, reason, headers = blocks[-1]
    else:
        version, status, reason, headers = None, None, "", {}
        body = text

    content_length = to_int(headers.get("content-length"), -1)
    meta_size = to_int(meta.get("size_download"), -1)
    size = meta_size if meta_size >= 0 else len(body.encode("utf-8", errors="replace"))
    fields = dict(
        status=status,
        status_text=reason,
        http_version=version,
        headers=headers,
        body=body or None,
        size=size,
        content_type=headers.get("content-type"),
        content_length=content_length if content_length >= 0 else None,
        redirects=redirects,
        **_meta_fields(meta),
    )
    if exit_code != 0 or status is None:
        combined = f"{stderr}\n{stdout}"
        error_type = _EXIT_CODES.get(exit_code) or classify(combined, _RULES, HttpErrorType.UNKNOWN)
        return HttpResponse(
            success=False,
            error_type=error_type,
            error_message=first_error_line(stderr, "") or "No HTTP response received",
            **fields,
        )
    return HttpResponse(success=True, **fields)
