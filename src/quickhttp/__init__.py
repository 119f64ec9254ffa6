"""
quickhttp - helpers for temporary or one-off HTTP requests.

Usage:
    import quickhttp

    html = quickhttp.get("https://example.com")
    item = quickhttp.get_json("https://api.example.com/item/1", result_type=Item)
    quickhttp.download("report.pdf", "GET", "https://example.com/report.pdf")

Features:
    - Default User-Agent, JSON Content-Type for JSON calls
    - Bounded retry on transport failures (retries + 1 attempts)
    - Content-Length validation on every response
    - StatusError for status codes >= 400
    - One-time proxy configuration on the shared client
"""

from .api import (
    close_default_client,
    configure,
    download,
    get,
    get_default_client,
    get_json,
    json_request,
    post,
    post_json,
    request,
    request_and_write_to,
    set_proxy,
    set_retries,
)
from .body import BodySource
from .client import H, HTTPClient
from .config import CONTENT_JSON, DEFAULT_PROXY_URL, DEFAULT_USER_AGENT, ClientConfig
from .exceptions import (
    CodecError,
    ConfigurationError,
    ContentLengthMismatchError,
    DecodeError,
    EncodeError,
    ErrorCategory,
    ErrorContext,
    QuickHTTPError,
    RequestConstructionError,
    ResponseError,
    StatusError,
    TransportError,
)
from .retry import retry_call, with_retry

__version__ = "0.1.0"

__all__ = [
    # Module-level helpers
    "get",
    "post",
    "request",
    "json_request",
    "get_json",
    "post_json",
    "request_and_write_to",
    "download",
    # Configuration
    "set_proxy",
    "set_retries",
    "configure",
    "get_default_client",
    "close_default_client",
    "ClientConfig",
    "CONTENT_JSON",
    "DEFAULT_PROXY_URL",
    "DEFAULT_USER_AGENT",
    # Client
    "HTTPClient",
    "H",
    "BodySource",
    # Retry
    "retry_call",
    "with_retry",
    # Errors
    "QuickHTTPError",
    "ErrorCategory",
    "ErrorContext",
    "RequestConstructionError",
    "TransportError",
    "ResponseError",
    "StatusError",
    "ContentLengthMismatchError",
    "CodecError",
    "EncodeError",
    "DecodeError",
    "ConfigurationError",
]
