"""Logging utilities for fetchbridge.

Validation failures and transport errors are reported on the ``fetchbridge``
logger tree. This module provides a helper routing them, and optionally the
connection logs of the HTTP stack underneath ``HttpTransport``, to a
rich-formatted console handler.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOGGER_NAME = "fetchbridge"
# Logger used by requests for connection pool and retry messages.
HTTP_LOGGER_NAME = "urllib3"


def setup_logging(
    level: int = logging.INFO,
    format_string: str = "%(message)s",
    date_format: str = "[%X]",
    capture_http: bool = False,
) -> RichHandler:
    """Configures the fetchbridge logger with a RichHandler.

    It should typically be called by the application embedding the
    dispatcher, not by the library itself during import. Calling it again
    replaces the handler installed by the previous call.

    Args:
        level: The logging level to set (e.g., logging.DEBUG, logging.INFO).
            Defaults to logging.INFO.
        format_string: The log format string. Defaults to "%(message)s" as
            RichHandler handles the timestamp and level style automatically.
        date_format: The date format string. Defaults to "[%X]".
        capture_http: Also send the ``urllib3`` connection logs through the
            same handler, at the same level.

    Returns:
        The installed handler.
    """
    handler = RichHandler(
        rich_tracebacks=True,
        # URLs and payloads in messages are not rich markup.
        markup=False,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(fmt=format_string, datefmt=date_format))

    names = [LOGGER_NAME, HTTP_LOGGER_NAME] if capture_http else [LOGGER_NAME]
    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for existing in list(logger.handlers):
            if isinstance(existing, RichHandler):
                logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.propagate = False

    return handler
