"""JSON encoding of request values and decoding into result types."""

from __future__ import annotations

import dataclasses
import json
from typing import Any, TypeVar, overload

from quickhttp.exceptions import DecodeError, EncodeError

T = TypeVar("T")

SNIPPET_LIMIT = 1024
SNIPPET_MARKER = b"..."


def snippet(data: bytes) -> str:
    """Bounded prefix of a response body for error messages."""
    if len(data) >= SNIPPET_LIMIT:
        data = data[: SNIPPET_LIMIT - 2] + SNIPPET_MARKER
    return data.decode("utf-8", errors="replace")


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


def encode(value: Any) -> bytes:
    """
    Serialize a request value to UTF-8 JSON.

    Dataclass instances go through ``dataclasses.asdict``, objects with a
    ``to_dict()`` method through that method. ``None`` encodes to an empty body.
    """
    if value is None:
        return b""
    try:
        return json.dumps(_to_jsonable(value), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"cannot encode {type(value).__name__}: {e}") from e


@overload
def decode(data: bytes, result_type: None = None) -> Any: ...
@overload
def decode(data: bytes, result_type: type[T]) -> T: ...


def decode(data: bytes, result_type: Any = None) -> Any:
    """
    Deserialize a response body.

    Args:
        data: Raw response body
        result_type: Target type. ``None`` returns the parsed JSON value;
            a class with ``from_dict`` uses it; a dataclass is built from
            the object's fields; any other callable receives the parsed value.

    Raises:
        DecodeError: With a bounded snippet of ``data`` in the message
    """
    try:
        parsed = json.loads(data)
        if result_type is None:
            return parsed
        if hasattr(result_type, "from_dict"):
            return result_type.from_dict(parsed)
        if dataclasses.is_dataclass(result_type):
            if not isinstance(parsed, dict):
                raise TypeError(f"expected a JSON object for {result_type.__name__}")
            return result_type(**parsed)
        return result_type(parsed)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise DecodeError(str(e), snippet=snippet(data)) from e
