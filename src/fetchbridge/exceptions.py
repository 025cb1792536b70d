"""Custom exceptions for fetchbridge module."""


class FetchBridgeError(Exception):
    """Base exception class for all fetchbridge exceptions.

    All custom exceptions in this library should inherit from this class.
    This allows users to catch all library-specific errors with a single except block.
    """


class BrowserInitError(FetchBridgeError):
    """Raised when the browser backing script injection fails to start.

    Common causes include:
    - Missing browser executable
    - Port conflicts
    - Invalid profile directory permissions
    """


class TransportError(FetchBridgeError):
    """Raised when a transport primitive cannot complete a request."""


class ScriptInjectionError(TransportError):
    """Raised when a JSONP script cannot be loaded or never calls back.

    The script-injection strategy has no error result of its own, so this
    exception travels out of the transport as is.
    """
