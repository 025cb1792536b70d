"""Transport strategies executing a normalized request."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

import requests

from .config import NormalizedConfig
from .injector import BrowserScriptInjector
from .response import (
    LOADING,
    build_progress,
    build_response,
    charset_from_content_type,
    decode_body,
    error_response,
)
from .schemas import CompletionHandler, ProgressHandler

logger = logging.getLogger(__name__)

# Loads a script-injection URL and returns the payload it calls back with.
ScriptInjector = Callable[[str], Any]


class Transport(Protocol):
    def execute(
        self,
        config: NormalizedConfig,
        on_complete: CompletionHandler,
        on_progress: ProgressHandler | None = None,
    ) -> None: ...


class HttpTransport:
    """Plain HTTP strategy built on a ``requests`` session.

    The response is streamed so that a progress event can be emitted for every
    chunk received. Exactly one of a load result or the error sentinel is
    handed to ``on_complete``.

    Attributes:
        session: The requests session used to send requests.
        chunk_size: Bytes read per progress step.
        enforce_timeout: Pass the normalized timeout on to requests. When False
            the timeout is accepted but has no effect.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        chunk_size: int = 8192,
        enforce_timeout: bool = False,
    ) -> None:
        self.session = session or requests.Session()
        self.chunk_size = chunk_size
        self.enforce_timeout = enforce_timeout

    def execute(
        self,
        config: NormalizedConfig,
        on_complete: CompletionHandler,
        on_progress: ProgressHandler | None = None,
    ) -> None:
        body = config.body
        if isinstance(body, str):
            body = body.encode("utf-8")

        try:
            with self.session.request(
                config.method.value,
                config.url,
                headers=config.headers,
                data=body,
                stream=True,
                timeout=config.timeout / 1000 if self.enforce_timeout else None,
            ) as resp:
                header_blob = "\n".join(f"{k}: {v}" for k, v in resp.headers.items())
                total = _content_length(resp.headers.get("Content-Length"))
                chunks = []
                for chunk in resp.iter_content(self.chunk_size):
                    chunks.append(chunk)
                    if on_progress:
                        # Wire bytes, same unit as Content-Length
                        loaded = resp.raw.tell()
                        on_progress(
                            build_progress(
                                LOADING, resp.status_code, loaded, total, resp.reason or "", header_blob
                            )
                        )
                charset = charset_from_content_type(resp.headers.get("Content-Type"))
                data = decode_body(b"".join(chunks), config.type, charset)
                result = build_response(resp.status_code, resp.reason or "", data, header_blob)
        except requests.RequestException as e:
            logger.error("Unexpected error while fetching %s: %s", config.url, e)
            on_complete(error_response())
            return

        on_complete(result)


class ScriptInjectionTransport:
    """JSONP strategy.

    Only the URL is used; method, mode, headers, body and timeout are ignored
    and no progress is ever reported. Failures of the injector are not turned
    into a result and propagate to the caller of :meth:`execute`.
    """

    def __init__(self, injector: ScriptInjector | None = None) -> None:
        self.injector = injector or BrowserScriptInjector()

    def execute(
        self,
        config: NormalizedConfig,
        on_complete: CompletionHandler,
        on_progress: ProgressHandler | None = None,
    ) -> None:
        if not config.url:
            logger.error("config.url should be set for a JSONP request.")
        on_complete(self.injector(config.url))

    def close(self) -> None:
        close = getattr(self.injector, "close", None)
        if close:
            close()


def _content_length(value: str | None) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return 0
