"""Quick start example for fetchbridge.

This script demonstrates dispatching requests through a RequestDispatcher
with a small callback-id bridge, including progress reporting and an
invalid request that is rejected before anything is sent.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Any

# Ensure src is in python path for local testing
sys.path.append(str(Path(__file__).parent.parent / "src"))

from fetchbridge import RequestDispatcher, setup_logging

logger = logging.getLogger("fetchbridge.quick_start")


class PrintingBridge:
    """Resolves callback ids by logging the results they receive."""

    def __init__(self, expected: int) -> None:
        self._remaining = expected
        self._lock = threading.Lock()
        self.finished = threading.Event()

    def __call__(self, callback_id: str, result: Any, is_progress: bool) -> None:
        if is_progress:
            logger.info(f"⏳ [{callback_id}] {result['length']}/{result['total']} bytes")
            return

        if isinstance(result, dict) and "status" in result:
            logger.info(f"✅ [{callback_id}] status={result['status']} ok={result['ok']}")
        else:
            logger.info(f"✅ [{callback_id}] payload={result!r}")

        with self._lock:
            self._remaining -= 1
            if self._remaining == 0:
                self.finished.set()


def main() -> None:
    """Run the demonstration."""
    setup_logging(level=logging.DEBUG)

    bridge = PrintingBridge(expected=2)
    with RequestDispatcher(bridge) as dispatcher:
        # 1. GET with JSON interpretation and progress reporting
        dispatcher.dispatch(
            {"url": "https://httpbin.org/json", "type": "JSON"}, "get-json", "get-json-progress"
        )

        # 2. POST with an inferred JSON body
        dispatcher.dispatch(
            {"url": "https://httpbin.org/post", "method": "post", "body": {"mission": "bridge"}},
            "post",
        )

        # 3. Rejected: never delivered
        dispatcher.dispatch({"url": "https://httpbin.org/get", "method": "FETCH"}, "never")

        if not bridge.finished.wait(timeout=30):
            logger.warning("🛑 Gave up waiting for results")

    logger.info("👋 Done.")


if __name__ == "__main__":
    main()
