"""Validation and normalization of request options.

``normalize`` turns a loosely specified options mapping into a
:class:`NormalizedConfig`, filling defaults, case-normalizing the enumerated
fields and inferring the body encoding. It never raises for malformed input;
problems are returned as a :class:`ValidationFailure` value instead.
"""

from __future__ import annotations

import copy
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from .schemas import Headers, RequestOptions

TYPE_JSON = "application/json;charset=UTF-8"
TYPE_FORM = "application/x-www-form-urlencoded"

DEFAULT_TIMEOUT = 2500

# key=value pairs joined by "&", no empty keys or values
_FORM_PATTERN = re.compile(r"^(?:[^&=]+=[^&=]+)(?:&[^&=]+=[^&=]+)*$")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)
# Reserved characters kept verbatim when URI-encoding a form body
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    PATCH = "PATCH"


class Mode(str, Enum):
    CORS = "cors"
    NO_CORS = "no-cors"
    SAME_ORIGIN = "same-origin"
    NAVIGATE = "navigate"


class Strategy(Enum):
    """Transport family able to fulfil a request."""

    HTTP = "http"
    SCRIPT_INJECTION = "script_injection"


class ResponseType(str, Enum):
    """How the response body is interpreted.

    Also decides the transport: ``jsonp`` goes through script injection,
    everything else through plain HTTP.
    """

    TEXT = "text"
    JSON = "json"
    JSONP = "jsonp"
    ARRAYBUFFER = "arraybuffer"

    @property
    def strategy(self) -> Strategy:
        if self is ResponseType.JSONP:
            return Strategy.SCRIPT_INJECTION
        return Strategy.HTTP


DEFAULT_METHOD = Method.GET
DEFAULT_MODE = Mode.CORS
DEFAULT_TYPE = ResponseType.TEXT


class ErrorKind(Enum):
    INVALID_METHOD = "InvalidMethod"
    INVALID_MODE = "InvalidMode"
    INVALID_TYPE = "InvalidType"
    MISSING_URL = "MissingURL"
    # Absent headers default to an empty mapping; only a non-mapping fails.
    MISSING_HEADERS = "MissingHeaders"
    INVALID_BODY = "InvalidBody"
    TRANSPORT_ERROR = "TransportError"


@dataclass(frozen=True)
class ValidationFailure:
    """Why a set of request options was rejected."""

    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class NormalizedConfig:
    """A validated, defaulted copy of the caller's request options.

    Attributes:
        method: HTTP method.
        url: Target URL, never empty once produced by :func:`normalize`.
        mode: Fetch mode. Accepted for compatibility, no transport uses it.
        type: Response interpretation, also selecting the transport strategy.
        headers: Request headers, possibly with an inferred ``Content-Type``.
        body: Request body, re-serialized when its encoding was inferred.
        timeout: Timeout in milliseconds.
    """

    url: str
    method: Method = DEFAULT_METHOD
    mode: Mode = DEFAULT_MODE
    type: ResponseType = DEFAULT_TYPE
    headers: Headers = field(default_factory=dict)
    body: Any = None
    timeout: int = DEFAULT_TIMEOUT

    @property
    def strategy(self) -> Strategy:
        return self.type.strategy


def _choices(enum_cls: type[Enum]) -> str:
    return ",".join(member.value for member in enum_cls)


def _coerce(
    value: Any,
    enum_cls: type[Enum],
    default: Enum,
    upper: bool,
) -> Enum | None:
    """Map a raw option onto ``enum_cls``; None means the value is not allowed."""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    text = str(value)
    try:
        return enum_cls(text.upper() if upper else text.lower())
    except ValueError:
        return None


def _is_present(body: Any) -> bool:
    # Zero, False and "" mean no body; empty containers are still a body.
    if body is None:
        return False
    if isinstance(body, (str, int, float)):
        return bool(body)
    return True


def encode_body(body: Any, headers: Headers) -> tuple[Any, Headers]:
    """Infer the body encoding when no ``Content-Type`` was given.

    JSON is always tried first. The form-urlencoded branch is only reached
    when the JSON encoder itself fails.

    Args:
        body: The raw request body.
        headers: The request headers. Not modified.

    Returns:
        The body to send and the headers to send it with.
    """
    if headers.get("Content-Type") or not _is_present(body):
        return body, headers

    try:
        encoded = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        if isinstance(body, str) and _FORM_PATTERN.match(body):
            return quote(body, safe=_URI_SAFE), {**headers, "Content-Type": TYPE_FORM}
        return body, headers

    return encoded, {**headers, "Content-Type": TYPE_JSON}


def parse_timeout(value: Any) -> int:
    """Parse a timeout in milliseconds.

    A leading integer is extracted from the textual form of the value; zero,
    missing and unparseable values fall back to :data:`DEFAULT_TIMEOUT`.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_TIMEOUT
    match = _LEADING_INT.match(str(value))
    if not match:
        return DEFAULT_TIMEOUT
    return int(match.group(1)) or DEFAULT_TIMEOUT


def normalize(options: RequestOptions) -> NormalizedConfig | ValidationFailure:
    """Validate request options and fill in their defaults.

    The options are deep-copied first, so the caller's mapping is never
    modified. Fields are checked in the order method, url, mode, type and the
    first problem found is returned.

    Args:
        options: Raw request options (method, url, mode, type, headers, body,
            timeout). Missing or ``None`` fields take their defaults.

    Returns:
        The normalized config, or a ValidationFailure describing the first
        invalid field.
    """
    try:
        raw = copy.deepcopy(dict(options))
    except (TypeError, copy.Error) as e:
        return ValidationFailure(ErrorKind.INVALID_BODY, f"options could not be copied: {e}")

    method = _coerce(raw.get("method"), Method, DEFAULT_METHOD, upper=True)
    if method is None:
        return ValidationFailure(
            ErrorKind.INVALID_METHOD,
            f'options.method "{raw["method"]}" should be one of {_choices(Method)}.',
        )

    url = raw.get("url")
    if not url:
        return ValidationFailure(ErrorKind.MISSING_URL, "options.url should be set.")

    mode = _coerce(raw.get("mode"), Mode, DEFAULT_MODE, upper=False)
    if mode is None:
        return ValidationFailure(
            ErrorKind.INVALID_MODE,
            f'options.mode "{raw["mode"]}" should be one of {_choices(Mode)}.',
        )

    response_type = _coerce(raw.get("type"), ResponseType, DEFAULT_TYPE, upper=False)
    if response_type is None:
        return ValidationFailure(
            ErrorKind.INVALID_TYPE,
            f'options.type "{raw["type"]}" should be one of {_choices(ResponseType)}.',
        )

    headers = raw.get("headers") or {}
    if not isinstance(headers, Mapping):
        return ValidationFailure(
            ErrorKind.MISSING_HEADERS, "options.headers should be a mapping of names to values."
        )
    body, headers = encode_body(raw.get("body"), dict(headers))

    return NormalizedConfig(
        method=Method(method),
        url=str(url),
        mode=Mode(mode),
        type=ResponseType(response_type),
        headers=headers,
        body=body,
        timeout=parse_timeout(raw.get("timeout")),
    )
