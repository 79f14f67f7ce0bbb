"""Response body decoding into JSON values, models, and lists of models.

Decoders accept any type Pydantic can validate -- ``BaseModel`` subclasses,
dataclasses, ``TypedDict``s, plain ``dict`` -- through
:class:`pydantic.TypeAdapter`. Every failure is reported as a
:class:`~routekit.exceptions.DeserializationError`.
"""

from __future__ import annotations

import json
from typing import Any, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from routekit.exceptions import DeserializationError

T = TypeVar("T")


def decode_json(response: Optional[httpx.Response]) -> Any:
    """Parse the body of *response* as JSON.

    Returns:
        The decoded value, or ``None`` for an empty body.

    Raises:
        DeserializationError: If there is no response or the body is not JSON.
    """
    if response is None:
        raise DeserializationError("no response")
    if not response.content:
        return None
    try:
        return json.loads(response.content)
    except ValueError as exc:
        raise DeserializationError(f"invalid JSON body ({exc})") from exc


def extract_root(data: Any, root_key: Optional[str]) -> Any:
    """Navigate *data* along a dotted *root_key* such as ``"json.items"``.

    Numeric segments index into lists. ``None`` or an empty key returns
    *data* unchanged.

    Raises:
        DeserializationError: If a segment is missing.
    """
    if not root_key:
        return data
    current = data
    for segment in root_key.split("."):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            raise DeserializationError(f"key path {root_key!r} not found")
    return current


def decode_object(response: Optional[httpx.Response], model: type[T]) -> T:
    """Decode the body of *response* into one *model* instance."""
    data = decode_json(response)
    try:
        return TypeAdapter(model).validate_python(data)
    except ValidationError as exc:
        raise DeserializationError(f"{_type_name(model)} ({exc.error_count()} validation errors)") from exc


def decode_list(
    response: Optional[httpx.Response],
    model: type[T],
    root_key: Optional[str] = None,
) -> list[T]:
    """Decode the body of *response* (or the value at *root_key*) into ``list[model]``."""
    data = extract_root(decode_json(response), root_key)
    try:
        return TypeAdapter(list[model]).validate_python(data)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise DeserializationError(
            f"list of {_type_name(model)} ({exc.error_count()} validation errors)"
        ) from exc


def _type_name(model: Any) -> str:
    return getattr(model, "__name__", repr(model))


__all__ = ["decode_json", "decode_list", "decode_object", "extract_root"]
