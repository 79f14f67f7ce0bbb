"""routekit -- declarative HTTP routes on top of httpx.

A *route* describes one exchange (path, method, parameters, headers,
encoding). A *provider* describes an API: its base URL, the headers and
parameters it adds to every route, and how responses are validated.
``provider.request(route)`` assembles the request, hands it to a session's
transport, and returns a handle whose completion callback receives the
validated outcome::

    class Example(HTTPProvider):
        base_url = "https://api.example.com/v1"

    Example().request(Route(path="/users", params={"page": 2})).on_json(
        lambda users, error: print(error or users)
    )

Modules:
    models: Routes, form parts, the draft request, and transport settings.
    encoding: Query, JSON, form and multipart parameter encoders.
    provider: ``HTTPProvider`` and ``DefaultProvider``.
    request: The ``Request`` handle and its completion pipeline.
    session: The delegate owning a transport and its task registry.
    transport: The ``Transport`` protocol and the httpx implementation.
    rx: ReactiveX observables over request handles.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: The ``routekit`` debugging CLI.
"""

__version__ = "0.1.0"

from routekit.exceptions import (  # noqa: E402
    DeserializationError,
    InvalidURLError,
    NetworkingError,
    ParameterEncodingError,
    RoutekitError,
    StatusCodeError,
    UnknownError,
)
from routekit.models import (  # noqa: E402
    DraftRequest,
    FormPart,
    HTTPMethod,
    ParameterEncoding,
    Route,
    TransportConfig,
)
from routekit.provider import DefaultProvider, HTTPProvider, merge  # noqa: E402
from routekit.request import Request, RequestState  # noqa: E402
from routekit.session import Session, get_default_session  # noqa: E402

__all__ = [
    "DefaultProvider",
    "DeserializationError",
    "DraftRequest",
    "FormPart",
    "HTTPMethod",
    "HTTPProvider",
    "InvalidURLError",
    "NetworkingError",
    "ParameterEncoding",
    "ParameterEncodingError",
    "Request",
    "RequestState",
    "Route",
    "RoutekitError",
    "Session",
    "StatusCodeError",
    "TransportConfig",
    "UnknownError",
    "__version__",
    "get_default_session",
    "merge",
]
