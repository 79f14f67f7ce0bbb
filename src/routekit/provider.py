"""HTTP providers -- the shared defaults and policies of one API.

An :class:`HTTPProvider` describes an API and the relationship you want to
have with it: its base URL, headers and parameters added to every request,
the encoding used for each method, and the validation policy applied to
every response. Define one provider per API surface and reuse it for every
request.

Subclasses must implement :attr:`HTTPProvider.base_url`. Every other
capability has a default, so a provider only overrides what it needs::

    class GitHub(HTTPProvider):
        base_url = "https://api.github.com"

        @property
        def additional_headers(self) -> dict[str, str]:
            return {"Accept": "application/vnd.github+json"}

        def should_continue(self, error: RoutekitError) -> bool:
            # 401s are handled by the token refresher, not by callers.
            return not (isinstance(error, StatusCodeError) and error.status_code == 401)

    GitHub().request(Route(path="/users/octocat")).on_json(show)

:class:`DefaultProvider` is a provider with no behaviour of its own, used to
send a request to a full URL with :meth:`DefaultProvider.request_url`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, TypeVar

import httpx

from routekit.encoding import default_encoding_for_method, encode_multipart, encode_parameters
from routekit.exceptions import (
    InvalidURLError,
    NetworkingError,
    ParameterEncodingError,
    RoutekitError,
    StatusCodeError,
    UnknownError,
)
from routekit.models import DraftRequest, HTTPMethod, ParameterEncoding, Route
from routekit.output import debug
from routekit.request import Request
from routekit.session import Session, get_default_session
from routekit.url import append_path, is_absolute_http_url

K = TypeVar("K")
V = TypeVar("V")


def merge(left: Mapping[K, V], right: Optional[Mapping[K, V]]) -> dict[K, V]:
    """Return a shallow copy of *left* updated with *right*.

    Keys present in both take the value from *right*; keys only in *left*
    keep their position and value.
    """
    merged = dict(left)
    if right:
        merged.update(right)
    return merged


class HTTPProvider(ABC):
    """Base class for API providers.

    Subclasses must implement :attr:`base_url`. The remaining capabilities
    have default implementations:

    * :attr:`additional_headers` / :attr:`additional_params` -- empty.
    * :meth:`validate` -- transport errors become
      :class:`~routekit.exceptions.NetworkingError`, statuses above 399
      become :class:`~routekit.exceptions.StatusCodeError`.
    * :meth:`should_continue` -- always ``True``.
    * :meth:`default_encoding` -- query string for every method except
      ``POST`` and ``PUT``, which send JSON.
    * :attr:`session` -- the shared default session.
    """

    @property
    @abstractmethod
    def base_url(self) -> str:
        """The URL every route path is appended to."""
        ...

    @property
    def additional_headers(self) -> dict[str, str]:
        """Headers added to every request. Route headers win on collision."""
        return {}

    @property
    def additional_params(self) -> dict[str, Any]:
        """Parameters added to every request. Route parameters win on collision."""
        return {}

    @property
    def session(self) -> Session:
        """The session that sends this provider's requests."""
        return get_default_session()

    def validate(
        self,
        response: Optional[httpx.Response],
        body: bytes,
        error: Optional[BaseException],
    ) -> Optional[RoutekitError]:
        """Decide whether an exchange failed.

        Called once per delivered response, before the completion callback.

        Args:
            response: The response, or ``None`` when the transport failed.
            body: The response body (empty when there is no response).
            error: The transport exception, if any.

        Returns:
            The error to complete the request with, or ``None`` when the
            exchange succeeded.
        """
        if error is not None:
            return NetworkingError(error)
        if response is not None:
            return StatusCodeError(response.status_code) if response.status_code > 399 else None
        return UnknownError("Response and error are nil")

    def should_continue(self, error: RoutekitError) -> bool:
        """Decide whether a failed exchange is reported to the caller.

        Returning ``False`` abandons the request: its completion callback
        never fires. Use it to handle certain failures (an expired token,
        say) away from the code that issued the request.
        """
        return True

    def default_encoding(self, method: HTTPMethod) -> ParameterEncoding:
        """Encoding used for routes that do not set one."""
        return default_encoding_for_method(method)

    def request(self, route: Route) -> Request:
        """Build the request described by *route* and send it.

        Always returns a handle. Failures found while building the request
        (unencodable parameters or headers, a URL the transport refuses) complete the
        handle immediately, without contacting the transport; everything
        else arrives later through the handle's completion callback.
        """
        draft = DraftRequest(url=append_path(self.base_url, route.path))

        params = merge(self.additional_params, route.params)
        try:
            if route.multipart_form is not None:
                encode_multipart(draft, route.multipart_form)
            else:
                encoding = route.encoding or self.default_encoding(route.method)
                encode_parameters(draft, params, encoding)
        except ParameterEncodingError as exc:
            return self._failed(draft, exc)

        draft.method = route.method.value
        for name, value in merge(self.additional_headers, route.headers).items():
            draft.set_header(name, value)

        request = Request(draft, self)
        try:
            self.session.submit(draft, request)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            debug(f"Transport refused {draft.url}: {exc}")
            request.fail(InvalidURLError(draft.url))
        except (TypeError, ValueError) as exc:
            # e.g. a header value httpx cannot encode as ASCII
            debug(f"Transport could not build {draft.method} {draft.url}: {exc}")
            request.fail(UnknownError(f"Could not build request for {draft.url}: {exc}"))
        return request

    def _failed(self, draft: DraftRequest, error: RoutekitError) -> Request:
        request = Request(draft, self)
        request.fail(error)
        return request


class DefaultProvider(HTTPProvider):
    """Provider with no behaviour beyond the defaults.

    Args:
        base_url: The URL requests are sent to.
        session: Optional session; the shared default is used otherwise.
    """

    def __init__(self, base_url: str, session: Optional[Session] = None) -> None:
        self._base_url = base_url
        self._session = session

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else get_default_session()

    @classmethod
    def request_url(cls, route: Route, session: Optional[Session] = None) -> Request:
        """Send *route*, whose ``path`` holds a full URL.

        If ``route.path`` is not an absolute ``http``/``https`` URL the
        returned handle is already completed with
        :class:`~routekit.exceptions.InvalidURLError`.
        """
        if not is_absolute_http_url(route.path):
            provider = cls(route.path, session=session)
            return provider._failed(DraftRequest(url=route.path, method=route.method.value), InvalidURLError(route.path))

        provider = cls(route.path.strip(), session=session)
        return provider.request(route.model_copy(update={"path": ""}))
