"""
HTTP Client Module - request executor with bounded retry and proxy support.

This module provides a small HTTP client that:
- Sets a default User-Agent (and Content-Type for JSON calls)
- Retries transport failures a fixed number of times
- Validates the received body length against Content-Length
- Raises StatusError for responses with status >= 400
- Streams response bodies to a writer or a file

Usage:
    from quickhttp.client import HTTPClient

    with HTTPClient() as client:
        data = client.get("https://api.example.com/data")
        item = client.get_json("https://api.example.com/item/1", result_type=Item)
        client.download("out.bin", "GET", "https://example.com/file.bin")
"""

from __future__ import annotations

import logging
import re
import threading
from typing import IO, TYPE_CHECKING, Any, TypeVar

import httpx
from typing_extensions import Self

from quickhttp import jsoncodec
from quickhttp.body import BodyLike, BodySource
from quickhttp.config import CONTENT_JSON, DEFAULT_PROXY_URL, ClientConfig
from quickhttp.exceptions import (
    ConfigurationError,
    ContentLengthMismatchError,
    DecodeError,
    ErrorContext,
    RequestConstructionError,
    StatusError,
    TransportError,
)
from quickhttp.retry import retry_call

if TYPE_CHECKING:
    import os
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Header overrides; names are case-insensitive, caller values win
H = dict[str, str]

# RFC 9110 token
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

# Responses that carry no body even when Content-Length is declared
_NO_BODY_STATUS = {204, 304}


class HTTPClient:
    """
    Shared HTTP client: one httpx connection pool plus retry/proxy settings.

    Create one per process (or use :mod:`quickhttp.api`) and reuse it.
    Changing the retry budget while other threads have requests in flight
    is racy: those requests see either the old or the new budget.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            config: Client settings (defaults to ClientConfig())
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self._config = config or ClientConfig()
        self._transport = transport
        self._proxy_lock = threading.Lock()
        self._proxy_url: str | None = self._config.proxy_url
        self._client = self._build_client(self._proxy_url)

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def retries(self) -> int:
        return self._config.retries

    @property
    def proxy_url(self) -> str | None:
        return self._proxy_url

    def set_retries(self, retries: int) -> None:
        """Set extra attempts after the first; total attempts = retries + 1."""
        if retries < 0:
            raise ValueError(f"retries must be >= 0, got {retries}")
        self._config = self._config.with_changes(retries=retries)

    def set_proxy(self, proxy_url: str = "") -> bool:
        """
        Route all subsequent requests through a proxy.

        Only the first call takes effect: swapping the transport drops the
        warmed connection pool, so later calls are ignored.

        Args:
            proxy_url: Proxy URL; empty means DEFAULT_PROXY_URL

        Returns:
            True if the proxy was applied, False if one was already set
        """
        proxy_url = proxy_url or DEFAULT_PROXY_URL
        with self._proxy_lock:
            if self._proxy_url is not None:
                logger.warning(f"Proxy already set to {self._proxy_url}, ignoring {proxy_url}")
                return False
            old_client = self._client
            self._client = self._build_client(proxy_url)
            self._proxy_url = proxy_url
            self._config = self._config.with_changes(proxy_url=proxy_url)

        old_client.close()
        logger.info(f"Proxy configured: {proxy_url}")
        return True

    def _build_client(self, proxy_url: str | None) -> httpx.Client:
        kwargs: dict[str, Any] = {
            "timeout": self._config.timeout,
            "follow_redirects": True,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        if proxy_url:
            kwargs["proxy"] = proxy_url
        try:
            return httpx.Client(**kwargs)
        except (ValueError, TypeError, httpx.InvalidURL) as e:
            raise ConfigurationError(f"Invalid proxy URL {proxy_url!r}: {e}") from e

    # =========================================================================
    # Request execution
    # =========================================================================

    @staticmethod
    def _validate(method: str, url: str, context: ErrorContext) -> None:
        if not isinstance(method, str) or not _METHOD_RE.fullmatch(method):
            raise RequestConstructionError(f"invalid method {method!r}", context=context)
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise RequestConstructionError(f"invalid URL {url!r}: {e}", context=context) from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise RequestConstructionError(f"invalid URL {url!r}: expected absolute http(s) URL", context=context)

    def _build_request(
        self,
        method: str,
        url: str,
        source: BodySource,
        headers: H | None,
        json: bool,
        context: ErrorContext,
    ) -> httpx.Request:
        merged = httpx.Headers({"User-Agent": self._config.user_agent})
        if json:
            merged["Content-Type"] = CONTENT_JSON
        if headers:
            merged.update(headers)
        try:
            content = source.open()
        except Exception as e:
            raise RequestConstructionError(f"cannot open request body: {e}", context=context) from e
        try:
            return self._client.build_request(method, url, content=content, headers=merged)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestConstructionError(f"cannot build request: {e}", context=context) from e

    def _send(
        self,
        method: str,
        url: str,
        body: BodyLike,
        headers: H | None,
        json: bool,
        context: ErrorContext,
    ) -> httpx.Response:
        """Send with retry on transport errors; returns an unread streaming response."""
        try:
            source = BodySource(body)
        except TypeError as e:
            raise RequestConstructionError(str(e), context=context) from e
        config = self._config
        attempts = 0

        def attempt() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            request = self._build_request(method, url, source, headers, json, context)
            logger.debug(f"{method} {url} (attempt {attempts}/{config.max_attempts})")
            return self._client.send(request, stream=True)

        try:
            return retry_call(
                attempt,
                retries=config.retries,
                retry_on=(httpx.TransportError,),
                label=f"{method} {url}",
            )
        except httpx.RequestError as e:
            raise TransportError(str(e) or type(e).__name__, attempts=attempts, context=context) from e

    def _consume(
        self,
        response: httpx.Response,
        write: Callable[[bytes], Any],
        context: ErrorContext,
    ) -> int:
        """Copy the body into ``write``, then check length and status."""
        # A body already loaded by httpx is replayed as-is, undecoded
        preloaded = response.is_stream_consumed
        written = 0
        try:
            for chunk in response.iter_bytes():
                write(chunk)
                written += len(chunk)
        except httpx.RemoteProtocolError as e:
            # Peer closed before sending the declared body
            expected = self._declared_length(response)
            received = response.num_bytes_downloaded
            if expected is not None and received < expected:
                raise ContentLengthMismatchError(expected, received, context=context) from e
            raise TransportError(str(e) or type(e).__name__, context=context) from e
        except httpx.RequestError as e:
            raise TransportError(str(e) or type(e).__name__, context=context) from e
        finally:
            response.close()

        received = written if preloaded else response.num_bytes_downloaded
        expected = self._declared_length(response)
        if expected is not None and received != expected:
            raise ContentLengthMismatchError(expected, received, context=context)
        if response.status_code >= 400:
            raise StatusError(response.status_code, context=context)
        return written

    @staticmethod
    def _declared_length(response: httpx.Response) -> int | None:
        """Content-Length the body must match, or None when it does not apply."""
        declared = response.headers.get("Content-Length")
        if declared is None:
            return None
        if response.request.method == "HEAD" or response.status_code in _NO_BODY_STATUS:
            return None
        try:
            return int(declared)
        except ValueError:
            return None

    def request(
        self,
        method: str,
        url: str,
        body: BodyLike = None,
        headers: H | None = None,
        *,
        json: bool = False,
    ) -> bytes:
        """
        Send a request and return the full response body.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Absolute http(s) URL
            body: bytes/str, a readable object, or a factory returning a fresh body
            headers: Header overrides (caller wins over defaults)
            json: Add the JSON Content-Type default

        Raises:
            RequestConstructionError: Bad method or URL, nothing sent
            TransportError: Delivery failed on every attempt
            ContentLengthMismatchError: Body length differs from Content-Length
            StatusError: Status code >= 400
        """
        context = ErrorContext(method=method, url=url)
        self._validate(method, url, context)
        response = self._send(method, url, body, headers, json, context)
        buffer = bytearray()
        self._consume(response, buffer.extend, context)
        return bytes(buffer)

    def get(self, url: str, headers: H | None = None) -> bytes:
        return self.request("GET", url, None, headers)

    def post(self, url: str, body: BodyLike = None, headers: H | None = None) -> bytes:
        return self.request("POST", url, body, headers)

    # =========================================================================
    # JSON
    # =========================================================================

    def json_request(
        self,
        method: str,
        url: str,
        payload: Any = None,
        headers: H | None = None,
        result_type: type[T] | None = None,
    ) -> T | Any:
        """
        Send ``payload`` as JSON and decode the response.

        Args:
            method: HTTP method
            url: Absolute http(s) URL
            payload: Value to serialize (dataclass, object with to_dict, or plain JSON value)
            headers: Header overrides
            result_type: Type to decode into (None returns the parsed JSON)

        Raises:
            EncodeError: payload is not serializable
            DecodeError: response is not valid for result_type (message holds a body snippet)
        """
        data = jsoncodec.encode(payload)
        raw = self.request(method, url, data, headers, json=True)
        try:
            return jsoncodec.decode(raw, result_type)
        except DecodeError as e:
            e.context = ErrorContext(method=method, url=url)
            raise

    def get_json(
        self,
        url: str,
        payload: Any = None,
        headers: H | None = None,
        result_type: type[T] | None = None,
    ) -> T | Any:
        return self.json_request("GET", url, payload, headers, result_type)

    def post_json(
        self,
        url: str,
        payload: Any = None,
        headers: H | None = None,
        result_type: type[T] | None = None,
    ) -> T | Any:
        return self.json_request("POST", url, payload, headers, result_type)

    # =========================================================================
    # Streaming
    # =========================================================================

    def request_and_write_to(
        self,
        dst: IO[bytes],
        method: str,
        url: str,
        body: BodyLike = None,
        headers: H | None = None,
    ) -> int:
        """
        Send a request and stream the response body into ``dst``.

        The body is written before the status is checked, so ``dst`` may
        hold an error page when StatusError is raised.

        Returns:
            Number of bytes written
        """
        context = ErrorContext(method=method, url=url)
        self._validate(method, url, context)
        response = self._send(method, url, body, headers, False, context)
        return self._consume(response, dst.write, context)

    def download(
        self,
        filepath: str | os.PathLike[str],
        method: str,
        url: str,
        body: BodyLike = None,
        headers: H | None = None,
    ) -> int:
        """
        Create (or truncate) ``filepath`` and stream the response body into it.

        The file is closed on every exit path.

        Returns:
            Number of bytes written
        """
        self._validate(method, url, ErrorContext(method=method, url=url))
        with open(filepath, "wb") as fh:
            written = self.request_and_write_to(fh, method, url, body, headers)
        logger.debug(f"Downloaded {written} bytes from {url} to {filepath}")
        return written

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
