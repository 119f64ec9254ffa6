"""
Unified Exception Hierarchy for quickhttp.

Exception Hierarchy:
    QuickHTTPError (base)
    ├── RequestConstructionError
    ├── TransportError
    ├── ResponseError
    │   ├── StatusError
    │   └── ContentLengthMismatchError
    ├── CodecError
    │   ├── EncodeError
    │   └── DecodeError
    └── ConfigurationError
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any


class ErrorCategory(Enum):
    """Categories for error classification."""

    CONSTRUCTION = "construction"
    TRANSPORT = "transport"
    RESPONSE = "response"
    CODEC = "codec"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Request details attached to an error."""

    method: str | None = None
    url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class QuickHTTPError(Exception):
    """
    Base exception for all quickhttp errors.

    Provides:
    - Request context (method, URL)
    - Category classification
    - Retry guidance
    """

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        category: ErrorCategory = ErrorCategory.TRANSPORT,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context.method:
            result["method"] = self.context.method
        if self.context.url:
            result["url"] = self.context.url
        return result


class RequestConstructionError(QuickHTTPError):
    """Raised when a request cannot be built (bad method or URL)."""

    def __init__(self, message: str, *, context: ErrorContext | None = None) -> None:
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.CONSTRUCTION,
            retryable=False,
        )


class TransportError(QuickHTTPError):
    """Raised when a request could not be delivered at the network layer."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        attempts: int = 1,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.TRANSPORT,
            retryable=True,
        )
        self.attempts = attempts


# =============================================================================
# Response Errors
# =============================================================================


class ResponseError(QuickHTTPError):
    """Base class for errors on a delivered response."""

    def __init__(self, message: str, *, context: ErrorContext | None = None) -> None:
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.RESPONSE,
            retryable=False,
        )


def status_text(status_code: int) -> str:
    """Return the standard reason phrase for a status code, or '' if unknown."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class StatusError(ResponseError):
    """Raised when the server answers with a status code >= 400."""

    def __init__(self, status_code: int, *, context: ErrorContext | None = None) -> None:
        self.status_code = status_code
        self.reason = status_text(status_code)
        super().__init__(f"error status: {self.reason or status_code}", context=context)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        return result


class ContentLengthMismatchError(ResponseError):
    """Raised when the bytes received differ from the declared Content-Length."""

    def __init__(self, expected: int, actual: int, *, context: ErrorContext | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"content length mismatch: expected {expected} bytes, got {actual}",
            context=context,
        )


# =============================================================================
# Codec Errors
# =============================================================================


class CodecError(QuickHTTPError):
    """Base class for JSON encoding/decoding errors."""

    def __init__(self, message: str, *, context: ErrorContext | None = None) -> None:
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.CODEC,
            retryable=False,
        )


class EncodeError(CodecError):
    """Raised when a request value cannot be serialized to JSON."""


class DecodeError(CodecError):
    """Raised when a response body cannot be decoded into the result type."""

    def __init__(
        self,
        message: str,
        *,
        snippet: str = "",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"json decode, data: {snippet}, err: {message}", context=context)
        self.snippet = snippet


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(QuickHTTPError):
    """Raised for invalid client configuration."""

    def __init__(self, message: str, *, context: ErrorContext | None = None) -> None:
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )
