import logging

from .config import ErrorKind, Method, Mode, NormalizedConfig, ResponseType, ValidationFailure, normalize
from .dispatcher import RequestDispatcher
from .exceptions import BrowserInitError, FetchBridgeError, ScriptInjectionError, TransportError
from .injector import BrowserScriptInjector
from .logger import setup_logging
from .response import parse_headers
from .transport import HttpTransport, ScriptInjectionTransport

__version__ = "1.0.0"

# Add NullHandler to prevent logging warnings if no handler is configured by the user.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BrowserInitError",
    "BrowserScriptInjector",
    "ErrorKind",
    "FetchBridgeError",
    "HttpTransport",
    "Method",
    "Mode",
    "NormalizedConfig",
    "RequestDispatcher",
    "ResponseType",
    "ScriptInjectionError",
    "ScriptInjectionTransport",
    "TransportError",
    "ValidationFailure",
    "normalize",
    "parse_headers",
    "setup_logging",
]
