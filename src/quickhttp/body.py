"""Re-creatable request bodies, so a failed attempt can be sent again."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Union

# What callers may pass as a request body
BodyLike = Union[bytes, bytearray, str, Callable[[], Any], Any, None]


def _read_all(stream: Any) -> bytes:
    chunk = stream.read()
    return chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


class BodySource:
    """
    Wraps a request body so every attempt gets a fresh copy.

    - bytes/bytearray/str: kept in memory
    - readable object (has ``read``): read once and buffered
    - zero-argument callable: called for every attempt; may return bytes,
      str, an iterable of bytes, or a readable object (read and closed)
    """

    def __init__(self, body: BodyLike = None) -> None:
        self._factory: Callable[[], Any] | None = None
        self._data: bytes | None = None

        if body is None:
            return
        if isinstance(body, (bytes, bytearray)):
            self._data = bytes(body)
        elif isinstance(body, str):
            self._data = body.encode("utf-8")
        elif hasattr(body, "read"):
            self._data = _read_all(body)
        elif callable(body):
            self._factory = body
        else:
            raise TypeError(f"unsupported body type: {type(body).__name__}")

    def open(self) -> bytes | Iterable[bytes] | None:
        """Return a fresh body suitable for httpx ``content=``."""
        if self._factory is None:
            return self._data

        fresh = self._factory()
        if hasattr(fresh, "read"):
            try:
                return _read_all(fresh)
            finally:
                if hasattr(fresh, "close"):
                    fresh.close()
        if isinstance(fresh, str):
            return fresh.encode("utf-8")
        return fresh
