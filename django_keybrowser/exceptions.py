"""Exceptions for django-keybrowser.

The ``_main_exceptions`` tuple collects the store errors of whichever client
libraries are installed (redis-py / valkey-py); the request boundary catches
exactly these and reports them as HTTP 500 envelopes. The ``KeyBrowserError``
hierarchy covers everything the browser itself rejects.
"""

import socket

# Build exception tuples from available libraries (redis-py / valkey-py).
_exception_list: list[type[Exception]] = [socket.timeout, ConnectionRefusedError]
_RedisResponseError: type[Exception] | None = None
_ValkeyResponseError: type[Exception] | None = None

try:
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import ResponseError as RedisResponseError
    from redis.exceptions import TimeoutError as RedisTimeoutError

    _RedisResponseError = RedisResponseError
    _exception_list.extend([RedisConnectionError, RedisTimeoutError, RedisResponseError])
except ImportError:
    pass

try:
    from valkey.exceptions import ConnectionError as ValkeyConnectionError
    from valkey.exceptions import ResponseError as ValkeyResponseError
    from valkey.exceptions import TimeoutError as ValkeyTimeoutError

    _ValkeyResponseError = ValkeyResponseError
    _exception_list.extend([ValkeyConnectionError, ValkeyTimeoutError, ValkeyResponseError])
except ImportError:
    pass

_main_exceptions = tuple(_exception_list)

_response_errors: list[type[Exception]] = []
if _RedisResponseError is not None:
    _response_errors.append(_RedisResponseError)
if _ValkeyResponseError is not None:
    _response_errors.append(_ValkeyResponseError)
_ResponseError = tuple(_response_errors) if _response_errors else (Exception,)


class KeyBrowserError(Exception):
    """Base class for errors raised by django-keybrowser itself.

    Attributes:
        status: The HTTP status the request boundary answers with.
        reasons: Human readable explanations placed in the envelope.
    """

    status = 500

    def __init__(self, message: str, *reasons: str) -> None:
        self.message = message
        self.reasons = list(reasons)
        super().__init__(message)


class InvalidRequestError(KeyBrowserError):
    """Raised for malformed input: bad db index, missing rename target, bad JSON..."""

    status = 400


class ConfirmationMismatchError(KeyBrowserError):
    """Raised when a destructive operation's confirmation name does not match.

    The comparison is exact and case-sensitive.
    """

    status = 400

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__("Confirmation name does not match.", f"confirmName must match {target}.")


class ConnectionNotFoundError(KeyBrowserError):
    """Raised when a connection name cannot be resolved from settings."""

    status = 404

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("Unable to resolve connection details.", f"Connection '{name}' is not configured.")

    def __str__(self) -> str:
        return f"Connection '{self.name}' is not configured"


class UnsupportedKeyTypeError(KeyBrowserError):
    """Raised when a value read or write targets a type without a handler."""

    status = 400

    def __init__(self, key_type: str, operation: str = "read") -> None:
        self.key_type = key_type
        self.operation = operation
        super().__init__(f"Unsupported {operation} for key type", f"Type '{key_type}' is not supported.")
