"""Exception hierarchy for routekit.

All exceptions inherit from :class:`RoutekitError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`routekit.exit_codes`.
Errors are never raised at the caller of
:meth:`~routekit.provider.HTTPProvider.request`: they are handed to the
request's completion callback, whether they were detected before the
request was sent or after the response arrived. The CLI in
:mod:`routekit.app` turns them into process exit codes.

Subclass hierarchy::

    RoutekitError             (exit 1)
    +-- ParameterEncodingError (exit 2)
    +-- InvalidURLError        (exit 2)
    +-- NetworkingError        (exit 6)
    +-- StatusCodeError        (exit 3 / 4 / 5)
    +-- UnknownError           (exit 1)
    +-- DeserializationError   (exit 7)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from routekit.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DESERIALIZATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_STATUS_ERROR,
)


class RoutekitError(Exception):
    """Base exception for all routekit errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`routekit.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ParameterEncodingError(RoutekitError):
    """Raised when parameters cannot be represented in the chosen encoding.

    Attributes:
        params: The parameter mapping that failed to encode.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, params: Optional[Mapping[str, Any]], reason: str = "") -> None:
        self.params = dict(params or {})
        message = f"Could not encode parameters: {self.params!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidURLError(RoutekitError):
    """Raised when a URL-only route does not hold a usable absolute URL."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid URL: {url!r}")


class NetworkingError(RoutekitError):
    """Wraps a transport-level failure (timeout, DNS resolution, connection refused).

    Attributes:
        error: The underlying exception reported by the transport.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"Networking error: {error}")


class StatusCodeError(RoutekitError):
    """Raised by the default validation when the HTTP status is above 399."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        if status_code in (401, 403):
            exit_code = EXIT_AUTH_FAILURE
        elif status_code == 404:
            exit_code = EXIT_NOT_FOUND
        else:
            exit_code = EXIT_STATUS_ERROR
        super().__init__(f"HTTP {status_code}", exit_code=exit_code)


class UnknownError(RoutekitError):
    """Raised when neither a response nor a transport error is available."""


class DeserializationError(RoutekitError):
    """Raised when a response body cannot be decoded into the requested shape."""

    exit_code = EXIT_DESERIALIZATION_ERROR

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Could not deserialize object: {detail}")


class ConfigError(RoutekitError):
    """Raised for configuration problems (invalid JSON, invalid values)."""

    exit_code = EXIT_GENERIC_FAILURE
