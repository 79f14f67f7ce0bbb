"""URL helpers used while assembling a request."""

from __future__ import annotations

from urllib.parse import quote, urlsplit, urlunsplit

# RFC 3986 pchar, "/" and "%" (existing escapes are kept).
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"


def append_path(base_url: str, path: str) -> str:
    """Append *path* to the path of *base_url* as a path component.

    Exactly one ``/`` separates the two; the base URL's query string is kept.
    Characters that cannot appear in a path, such as ``?`` and ``#``, are
    percent-encoded rather than starting a query or fragment. An empty
    *path* returns *base_url* unchanged.

    Example::

        append_path("https://api.example.com/v1", "/users")
        # -> "https://api.example.com/v1/users"
    """
    if not path:
        return base_url
    parts = urlsplit(base_url)
    joined = parts.path.rstrip("/") + "/" + quote(path.lstrip("/"), safe=_PATH_SAFE)
    return urlunsplit((parts.scheme, parts.netloc, joined, parts.query, parts.fragment))


def append_query(url: str, query: str) -> str:
    """Append an already-encoded *query* to *url*.

    An existing query string is kept and the new pairs follow it after a
    single ``&``.
    """
    if not query:
        return url
    parts = urlsplit(url)
    merged = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit((parts.scheme, parts.netloc, parts.path, merged, parts.fragment))


def is_absolute_http_url(url: str) -> bool:
    """Return True when *url* is an ``http``/``https`` URL with a host."""
    try:
        parts = urlsplit(str(url or "").strip())
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


__all__ = ["append_path", "append_query", "is_absolute_http_url"]
