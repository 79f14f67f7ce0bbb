"""Numeric process exit codes used by the ``routekit`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~routekit.exceptions.RoutekitError` subclass.
Shell wrappers can inspect the exit code to tell a malformed request apart
from a rejected one without parsing stderr.

Example::

    $ routekit request https://api.example.com/missing
    $ echo $?
    4   # EXIT_NOT_FOUND -- the server answered 404
"""

EXIT_SUCCESS = 0
"""The exchange completed and passed validation."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The request could not be built (bad URL, unencodable parameters, bad flags)."""

EXIT_AUTH_FAILURE = 3
"""The server answered 401 or 403."""

EXIT_NOT_FOUND = 4
"""The server answered 404."""

EXIT_STATUS_ERROR = 5
"""The server answered with any other failing status code."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DESERIALIZATION_ERROR = 7
"""The response body could not be decoded into the requested shape."""
