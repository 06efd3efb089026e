"""Full and compact renderings of HTTP responses."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, preview
from clishape.domains.http.models import HttpResponse, HttpResponseCompact, TimingDetails


def _status_line(version: str | None, status: int | None, text: str, size: int,
                 elapsed: float | None) -> str:
    line = f"{version or 'HTTP'} {status} {text}".rstrip()
    line += f" | {size} bytes"
    if elapsed is not None:
        line += f" | {elapsed:g}s"
    return line


def _timing_line(timing: TimingDetails) -> str:
    phases = [("dns", timing.namelookup), ("connect", timing.connect), ("tls", timing.appconnect),
              ("first byte", timing.starttransfer)]
    return "  timing: " + ", ".join(f"{name} {seconds:g}s" for name, seconds in phases if seconds is not None)


def format_response(data: HttpResponse) -> str:
    if not data.success:
        return failure_line("HTTP request", data.error_type, data.error_message)
    lines = [_status_line(data.http_version, data.status, data.status_text, data.size, data.elapsed_seconds)]
    if data.timing is not None:
        lines.append(_timing_line(data.timing))
    lines.extend(f"  redirect {hop.status} -> {hop.location}" for hop in data.redirects)
    lines.extend(f"  {name}: {value}" for name, value in data.headers.items())
    if data.body:
        lines.append("")
        lines.append(data.body)
    return "\n".join(lines)


def compact_response(data: HttpResponse) -> HttpResponseCompact:
    return HttpResponseCompact(
        success=data.success,
        status=data.status,
        status_text=data.status_text,
        http_version=data.http_version,
        header_count=len(data.headers),
        body_preview=preview(data.body),
        size=data.size,
        content_type=data.content_type,
        content_length=data.content_length,
        elapsed_seconds=data.elapsed_seconds,
        redirects=cap(data.redirects),
        final_url=data.final_url,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_response_compact(data: HttpResponseCompact) -> str:
    if not data.success:
        return failure_line("HTTP request", data.error_type, data.error_message)
    line = _status_line(data.http_version, data.status, data.status_text, data.size, data.elapsed_seconds)
    if data.content_type:
        line += f" | {data.content_type}"
    if data.redirects:
        line += f" | {len(data.redirects)} redirect(s)"
    if data.body_preview:
        return f"{line}\n{data.body_preview}"
    return line


RESPONSE_RENDERER = Renderer(format_response, compact_response, format_response_compact)
