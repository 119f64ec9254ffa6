"""
Module-level helpers backed by one process-wide HTTPClient.

Usage:
    import quickhttp

    quickhttp.set_retries(2)
    data = quickhttp.get("https://api.example.com/data")
    user = quickhttp.post_json("https://api.example.com/users", payload, result_type=User)

All helpers share one connection pool and one configuration. Code that
needs isolated settings should create its own HTTPClient instead.
"""

from __future__ import annotations

import logging
import threading
from typing import IO, TYPE_CHECKING, Any, TypeVar

from quickhttp.client import H, HTTPClient
from quickhttp.config import ClientConfig

if TYPE_CHECKING:
    import os

    import httpx

    from quickhttp.body import BodyLike

logger = logging.getLogger(__name__)

T = TypeVar("T")

_default_client: HTTPClient | None = None
_default_lock = threading.Lock()


def get_default_client() -> HTTPClient:
    """Return the shared client, creating it from the environment on first use."""
    global _default_client
    if _default_client is None:
        with _default_lock:
            if _default_client is None:
                _default_client = HTTPClient(ClientConfig.from_env())
    return _default_client


def configure(
    config: ClientConfig | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> HTTPClient:
    """
    Replace the shared client with one built from ``config``.

    Args:
        config: Client settings (defaults to ClientConfig.from_env())
        transport: Optional httpx transport for the new client
    """
    global _default_client
    config = config or ClientConfig.from_env()
    with _default_lock:
        old_client = _default_client
        _default_client = HTTPClient(config, transport=transport)
    if old_client is not None:
        old_client.close()
    logger.debug(f"Default client reconfigured: retries={config.retries}, proxy={config.proxy_url}")
    return _default_client


def close_default_client() -> None:
    """Close and drop the shared client; the next call creates a new one."""
    global _default_client
    with _default_lock:
        old_client = _default_client
        _default_client = None
    if old_client is not None:
        old_client.close()


def set_retries(retries: int) -> None:
    get_default_client().set_retries(retries)


def set_proxy(proxy_url: str = "") -> bool:
    return get_default_client().set_proxy(proxy_url)


def request(method: str, url: str, body: BodyLike = None, headers: H | None = None) -> bytes:
    return get_default_client().request(method, url, body, headers)


def get(url: str, headers: H | None = None) -> bytes:
    return get_default_client().get(url, headers)


def post(url: str, body: BodyLike = None, headers: H | None = None) -> bytes:
    return get_default_client().post(url, body, headers)


def json_request(
    method: str,
    url: str,
    payload: Any = None,
    headers: H | None = None,
    result_type: type[T] | None = None,
) -> T | Any:
    return get_default_client().json_request(method, url, payload, headers, result_type)


def get_json(
    url: str,
    payload: Any = None,
    headers: H | None = None,
    result_type: type[T] | None = None,
) -> T | Any:
    return get_default_client().get_json(url, payload, headers, result_type)


def post_json(
    url: str,
    payload: Any = None,
    headers: H | None = None,
    result_type: type[T] | None = None,
) -> T | Any:
    return get_default_client().post_json(url, payload, headers, result_type)


def request_and_write_to(
    dst: IO[bytes],
    method: str,
    url: str,
    body: BodyLike = None,
    headers: H | None = None,
) -> int:
    return get_default_client().request_and_write_to(dst, method, url, body, headers)


def download(
    filepath: str | os.PathLike[str],
    method: str,
    url: str,
    body: BodyLike = None,
    headers: H | None = None,
) -> int:
    return get_default_client().download(filepath, method, url, body, headers)
