"""
Client configuration.

Settings can be given explicitly or read from the environment:
    - QUICKHTTP_RETRIES: extra attempts after the first (default 1)
    - QUICKHTTP_PROXY: proxy URL applied when the client is built
    - QUICKHTTP_TIMEOUT: request timeout in seconds, "none" disables it
    - QUICKHTTP_USER_AGENT: User-Agent header value
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from quickhttp.exceptions import ConfigurationError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/93.0.4577.63 Safari/537.36 Edg/93.0.961.38"
)
CONTENT_JSON = "application/json; charset=UTF-8"

# Used by set_proxy("") when no proxy URL is given
DEFAULT_PROXY_URL = "http://127.0.0.1:7890"

DEFAULT_RETRIES = 1
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings for an HTTPClient.

    Attributes:
        retries: Extra attempts after the first; total attempts = retries + 1
        proxy_url: Proxy for all outbound connections (None = direct)
        timeout: Request timeout in seconds (None = no timeout)
        user_agent: Default User-Agent header
    """

    retries: int = DEFAULT_RETRIES
    proxy_url: str | None = None
    timeout: float | None = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ConfigurationError(f"retries must be >= 0, got {self.retries}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def with_changes(self, **changes) -> ClientConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a config from QUICKHTTP_* environment variables."""
        retries = _env_int("QUICKHTTP_RETRIES", DEFAULT_RETRIES)
        timeout = _env_timeout("QUICKHTTP_TIMEOUT", DEFAULT_TIMEOUT)
        proxy_url = os.environ.get("QUICKHTTP_PROXY") or None
        user_agent = os.environ.get("QUICKHTTP_USER_AGENT") or DEFAULT_USER_AGENT
        return cls(retries=retries, proxy_url=proxy_url, timeout=timeout, user_agent=user_agent)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_timeout(name: str, default: float) -> float | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    if raw.strip().lower() == "none":
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number or 'none', got {raw!r}") from e
