"""Request dispatcher: validate, pick a transport, deliver results."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from types import TracebackType
from typing import Any

from .config import Strategy, ValidationFailure, normalize
from .schemas import CallbackId, Deliver, ProgressResult, RequestOptions
from .transport import HttpTransport, ScriptInjectionTransport, Transport

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Executes request descriptions and reports back through callback ids.

    Results never come back as return values. Every result is passed to the
    injected ``deliver`` bridge together with the callback id the caller
    supplied, which resolves it to the actual handler.

    Attributes:
        deliver: Host bridge called as ``deliver(callback_id, result, is_progress)``.
        transports: Transport used for each strategy.
    """

    def __init__(
        self,
        deliver: Deliver,
        http_transport: Transport | None = None,
        script_transport: Transport | None = None,
        executor: Executor | None = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            deliver: Callback bridge receiving every result.
            http_transport: Strategy for text, json and arraybuffer requests.
            script_transport: Strategy for jsonp requests.
            executor: Optional executor running the transports (for testing/DI).
                When omitted a thread pool owned by the dispatcher is used.
            max_workers: Size of the owned thread pool.
        """
        self.deliver = deliver
        self.transports: dict[Strategy, Transport] = {
            Strategy.HTTP: http_transport or HttpTransport(),
            Strategy.SCRIPT_INJECTION: script_transport or ScriptInjectionTransport(),
        }
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="fetchbridge"
        )

    def dispatch(
        self,
        options: RequestOptions,
        completion_id: CallbackId,
        progress_id: CallbackId | None = None,
    ) -> None:
        """Validate ``options`` and start the request without blocking.

        Invalid options are logged and dropped: no transport is called and
        nothing is delivered, so ``completion_id`` is never resolved.

        Args:
            options: Raw request options.
            completion_id: Callback id receiving the single terminal result.
            progress_id: Optional callback id receiving progress results
                (HTTP requests only).
        """
        config = normalize(options)
        if isinstance(config, ValidationFailure):
            logger.error("Rejected request: %s", config.message)
            return

        def on_complete(result: Any) -> None:
            self.deliver(completion_id, result, False)

        def report_progress(result: ProgressResult) -> None:
            # Progress deliveries are repeatable, never final.
            self.deliver(progress_id, result, True)

        on_progress = report_progress if progress_id is not None else None

        transport = self.transports[config.strategy]
        logger.debug("Dispatching %s %s via %s", config.method.value, config.url, config.strategy.value)
        future = self._executor.submit(transport.execute, config, on_complete, on_progress)
        future.add_done_callback(self._report_failure)

    @staticmethod
    def _report_failure(future: Future[None]) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Request failed without a result", exc_info=error)

    def close(self) -> None:
        """Wait for pending requests and release owned resources."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        for transport in self.transports.values():
            close = getattr(transport, "close", None)
            if close:
                close()

    def __enter__(self) -> RequestDispatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
