"""Type definitions for fetchbridge."""

from collections.abc import Callable, Mapping
from typing import Any, TypedDict

Headers = dict[str, str]
CallbackId = str
RequestOptions = Mapping[str, Any]


class ResponseResult(TypedDict):
    """Terminal result handed to the completion callback.

    Keys mirror the shape a browser caller expects from ``fetch``.
    """

    status: int
    ok: bool
    statusText: str
    data: Any
    headers: Headers


class ProgressResult(TypedDict):
    """In-flight transfer state handed to the progress callback."""

    readyState: int
    status: int
    length: int
    total: int
    statusText: str
    headers: Headers


# Host bridge resolving a callback identifier to the caller-side handler.
# The last argument is True for non-terminal (progress) deliveries.
Deliver = Callable[[CallbackId, Any, bool], None]

CompletionHandler = Callable[[Any], None]
ProgressHandler = Callable[[ProgressResult], None]
