"""
Bounded retry for transport failures.

Attempts run sequentially; there is no backoff unless a delay is given.
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_call(
    func: Callable[[], T],
    *,
    retries: int,
    retry_on: tuple[type[BaseException], ...],
    delay: float = 0.0,
    label: str = "request",
) -> T:
    """
    Call ``func`` until it succeeds or ``retries + 1`` attempts have failed.

    Only exceptions in ``retry_on`` are retried; anything else propagates
    immediately. The last exception is re-raised when the budget is spent.

    Args:
        func: Zero-argument callable performing one attempt
        retries: Extra attempts after the first (>= 0)
        retry_on: Exception types that trigger another attempt
        delay: Seconds to sleep between attempts
        label: Name used in log messages
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")

    attempts = retries + 1
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as e:
            if attempt + 1 >= attempts:
                raise
            logger.warning(f"{label} failed (attempt {attempt + 1}/{attempts}), retrying: {e}")
            if delay:
                time.sleep(delay)

    # the last attempt either returned or re-raised
    raise AssertionError("retry loop exited without a result")


def with_retry(
    retries: int,
    retry_on: tuple[type[BaseException], ...],
    delay: float = 0.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator form of :func:`retry_call`.

    Usage:
        @with_retry(retries=2, retry_on=(TransportError,))
        def fetch() -> bytes:
            return quickhttp.get("https://example.com")
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return retry_call(
                lambda: func(*args, **kwargs),
                retries=retries,
                retry_on=retry_on,
                delay=delay,
                label=func.__name__,
            )

        return wrapper

    return decorator
