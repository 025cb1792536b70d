"""Result builders for fetchbridge transports."""

from __future__ import annotations

import json
import re
from typing import Any

from .config import ResponseType
from .schemas import Headers, ProgressResult, ResponseResult

ERROR_STATUS = -1

# XMLHttpRequest.readyState values
UNSENT = 0
OPENED = 1
HEADERS_RECEIVED = 2
LOADING = 3
DONE = 4

_HEADER_LINE = re.compile(r"(.+): (.+)")
_CHARSET = re.compile(r';\s*charset\s*=\s*"?([^";\s]+)', re.IGNORECASE)


def parse_headers(blob: str) -> Headers:
    """Parse a raw header blob of ``Name: Value`` lines into a dict.

    Lines that do not contain a ``": "`` separator are skipped. A trailing
    carriage return is dropped from each line.

    Args:
        blob: Newline separated header lines.

    Returns:
        Header names mapped to their values.
    """
    headers: Headers = {}
    for line in blob.split("\n"):
        match = _HEADER_LINE.search(line.rstrip("\r"))
        if match:
            headers[match.group(1)] = match.group(2)
    return headers


def charset_from_content_type(content_type: str | None) -> str | None:
    """Return the charset declared by a Content-Type value, if any.

    Only an explicit ``charset`` parameter counts; no per-media-type default
    is assumed, so callers fall back to UTF-8.
    """
    if not content_type:
        return None
    match = _CHARSET.search(content_type)
    return match.group(1) if match else None


def decode_body(raw: bytes, response_type: ResponseType, encoding: str | None) -> Any:
    """Interpret a raw response body according to the requested type.

    ``json`` bodies that do not parse yield None, as a browser does for an
    XHR with ``responseType = "json"``.
    """
    if response_type is ResponseType.ARRAYBUFFER:
        return raw

    try:
        text = raw.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        # Unknown charset label
        text = raw.decode("utf-8", errors="replace")
    if response_type is ResponseType.JSON:
        try:
            return json.loads(text)
        except ValueError:
            return None
    return text


def build_response(status: int, status_text: str, data: Any, header_blob: str) -> ResponseResult:
    return {
        "status": status,
        "ok": 200 <= status < 300,
        "statusText": status_text,
        "data": data,
        "headers": parse_headers(header_blob),
    }


def build_progress(
    ready_state: int,
    status: int,
    length: int,
    total: int,
    status_text: str,
    header_blob: str,
) -> ProgressResult:
    return {
        "readyState": ready_state,
        "status": status,
        "length": length,
        "total": total,
        "statusText": status_text,
        "headers": parse_headers(header_blob),
    }


def error_response() -> ResponseResult:
    """Sentinel delivered when the HTTP transport fails before a response."""
    return {
        "status": ERROR_STATUS,
        "ok": False,
        "statusText": "",
        "data": "",
        "headers": {},
    }
