"""Parameter encoding -- writes route parameters into a draft request.

:func:`encode_parameters` is the single entry point for the three
parameter encodings declared by :class:`~routekit.models.ParameterEncoding`:

* ``URL_QUERY`` -- ``key=value`` pairs joined by ``&`` and appended to the
  URL's query string. Body and headers are left alone.
* ``JSON_BODY`` -- the parameters serialised as a JSON object into the body.
  ``Content-Type: application/json`` is set unless a content type is
  already present.
* ``URL_ENCODED_BODY`` -- the same ``key=value`` join as ``URL_QUERY``,
  written to the body as UTF-8 bytes with
  ``Content-Type: application/x-www-form-urlencoded; charset=utf-8``
  unless a content type is already present.

Keys and values are always percent-encoded; only RFC 3986 unreserved
characters are left as is. Pairs keep the insertion order of the mapping.

:func:`encode_multipart` handles routes that carry a multipart form. It
never runs together with :func:`encode_parameters` for the same request.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx

from routekit.exceptions import ParameterEncodingError
from routekit.models import DraftRequest, FormPart, HTTPMethod, ParameterEncoding
from routekit.url import append_query

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"

_UNRESERVED = "-._~"

_QUERY_METHODS = frozenset(
    {
        HTTPMethod.GET,
        HTTPMethod.CONNECT,
        HTTPMethod.HEAD,
        HTTPMethod.OPTIONS,
        HTTPMethod.PATCH,
        HTTPMethod.DELETE,
        HTTPMethod.TRACE,
    }
)


def default_encoding_for_method(method: HTTPMethod | str) -> ParameterEncoding:
    """Return the encoding used when a route does not choose one.

    ``POST`` and ``PUT`` send a JSON body; every other method uses the
    query string.
    """
    if not isinstance(method, HTTPMethod):
        method = HTTPMethod(method.upper())
    if method in _QUERY_METHODS:
        return ParameterEncoding.URL_QUERY
    return ParameterEncoding.JSON_BODY


def stringify(value: Any) -> str:
    """Render one parameter value as text for query and form encodings."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def join_pairs(parameters: Mapping[str, Any]) -> str:
    """Join *parameters* into a percent-encoded ``key=value&...`` string."""
    return "&".join(
        f"{quote(str(key), safe=_UNRESERVED)}={quote(stringify(value), safe=_UNRESERVED)}"
        for key, value in parameters.items()
    )


def encode_parameters(
    request: DraftRequest,
    parameters: Optional[Mapping[str, Any]],
    encoding: ParameterEncoding,
) -> None:
    """Write *parameters* into *request* using *encoding*.

    ``None`` or an empty mapping leaves the request untouched.

    Args:
        request: The draft request to mutate.
        parameters: Parameter mapping, usually the merged provider and
            route parameters.
        encoding: Where and how to write the parameters.

    Raises:
        ParameterEncodingError: If ``JSON_BODY`` is requested and the
            parameters are not representable as strict JSON.
    """
    if not parameters:
        return

    encoding = ParameterEncoding(encoding)

    if encoding is ParameterEncoding.URL_QUERY:
        request.url = append_query(request.url, join_pairs(parameters))

    elif encoding is ParameterEncoding.JSON_BODY:
        try:
            body = json.dumps(dict(parameters), allow_nan=False, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise ParameterEncodingError(parameters, str(exc)) from exc
        if request.get_header("Content-Type") is None:
            request.set_header("Content-Type", JSON_CONTENT_TYPE)
        request.body = body.encode("utf-8")

    else:
        if request.get_header("Content-Type") is None:
            request.set_header("Content-Type", FORM_CONTENT_TYPE)
        request.body = join_pairs(parameters).encode("utf-8")


def encode_multipart(request: DraftRequest, form: Sequence[FormPart]) -> None:
    """Write *form* into *request* as a ``multipart/form-data`` body.

    Scalar parts become plain form fields and binary parts become file parts,
    in form order. The body and the boundary-carrying ``Content-Type`` header
    are produced by httpx's own multipart encoder; any existing content type
    is replaced.

    An empty form leaves the request untouched.

    Raises:
        ParameterEncodingError: If httpx rejects one of the parts.
    """
    if not form:
        return

    parts: list[tuple[str, tuple[Optional[str], bytes, Optional[str]]]] = []
    for part in form:
        if part.is_file:
            assert part.content is not None
            parts.append(
                (
                    part.name,
                    (part.filename, part.content, part.content_type or DEFAULT_FILE_CONTENT_TYPE),
                )
            )
        else:
            assert part.value is not None
            # No filename: httpx renders the part as a plain field.
            parts.append((part.name, (None, part.value.encode("utf-8"), None)))

    try:
        # A throwaway httpx.Request does the encoding; only its body and
        # headers are kept.
        encoded = httpx.Request("POST", "http://multipart.invalid/", files=parts)
        body = encoded.read()
    except (TypeError, ValueError) as exc:
        raise ParameterEncodingError({part.name: part.value for part in form}, str(exc)) from exc

    request.set_header("Content-Type", encoded.headers["Content-Type"])
    request.body = body
