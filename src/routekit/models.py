"""Canonical data models shared across all routekit modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Route models** -- immutable, validated descriptions of a desired exchange:
    :class:`HTTPMethod`, :class:`ParameterEncoding`, :class:`FormPart`,
    and :class:`Route`.

**Working objects** -- mutable state that only lives while a request is
being assembled: :class:`DraftRequest`.

**Configuration models** -- transport settings resolved by
:func:`~routekit.config.load_transport_config`: :class:`TransportConfig`.

Route and configuration models use Pydantic v2. The draft request is a
plain dataclass because the encoder mutates it in place.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Route models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a :class:`Route` can use.

    The value is the uppercase method string written on the wire.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"


class ParameterEncoding(str, enum.Enum):
    """Where and how route parameters are written into a request.

    * ``URL_QUERY`` -- ``key=value`` pairs appended to the URL query string.
    * ``JSON_BODY`` -- a JSON object in the body (``application/json``).
    * ``URL_ENCODED_BODY`` -- ``key=value`` pairs in the body
      (``application/x-www-form-urlencoded``).
    """

    URL_QUERY = "url"
    JSON_BODY = "json"
    URL_ENCODED_BODY = "form"


class FormPart(BaseModel):
    """One named part of a multipart form.

    A part is either a scalar field (``value``) or a binary attachment
    (``content`` with an optional ``filename`` and ``content_type``).

    Example::

        FormPart(name="title", value="holiday")
        FormPart(name="photo", content=b"...", filename="a.png", content_type="image/png")
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: Optional[str] = None
    content: Optional[bytes] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @model_validator(mode="after")
    def _check_kind(self) -> FormPart:
        if (self.value is None) == (self.content is None):
            raise ValueError("a form part needs exactly one of 'value' or 'content'")
        return self

    @property
    def is_file(self) -> bool:
        """Whether this part is a binary attachment."""
        return self.content is not None


class Route(BaseModel):
    """Immutable description of one desired HTTP exchange.

    ``path`` is resolved against the provider's base URL; an empty path
    targets the base URL itself. ``encoding`` overrides the provider's
    default encoding for ``method``. When ``multipart_form`` is set it
    replaces parameter encoding entirely.

    Example::

        Route(path="/users", method="POST", params={"name": "ada"})
    """

    model_config = ConfigDict(frozen=True)

    path: str = ""
    method: HTTPMethod = HTTPMethod.GET
    params: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    encoding: Optional[ParameterEncoding] = None
    multipart_form: Optional[list[FormPart]] = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, HTTPMethod):
            return value.upper()
        return value


# --- Working objects ---


@dataclass
class DraftRequest:
    """Mutable request under construction, handed to the transport once built.

    Header names are matched case-insensitively: :meth:`set_header` replaces
    an existing header regardless of its casing.

    Attributes:
        url: Absolute target URL, including any query string.
        method: Uppercase HTTP method string.
        headers: Request headers.
        body: Encoded request body, or ``None`` for no body.
    """

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def get_header(self, name: str) -> Optional[str]:
        """Return the value of header *name*, ignoring case, or ``None``."""
        lower = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lower:
                return value
        return None

    def set_header(self, name: str, value: str) -> None:
        """Set header *name*, replacing any existing header with the same name."""
        lower = name.lower()
        for key in [k for k in self.headers if k.lower() == lower]:
            del self.headers[key]
        self.headers[name] = value


# --- Configuration models ---


def _default_user_agent() -> str:
    from routekit import __version__

    return f"routekit/{__version__}"


class TransportConfig(BaseModel):
    """Settings for the default httpx-backed transport."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")
    max_workers: int = Field(default=4, ge=1, description="Background I/O threads")
    user_agent: str = Field(default_factory=_default_user_agent)
