"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import socket
import tempfile
import threading
from pathlib import Path

import httpx
import pytest

import quickhttp
from quickhttp import ClientConfig, HTTPClient

# ============================================================
# Environment Fixtures
# ============================================================


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep QUICKHTTP_* variables from the host out of the tests."""
    for name in ("QUICKHTTP_RETRIES", "QUICKHTTP_PROXY", "QUICKHTTP_TIMEOUT", "QUICKHTTP_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def reset_default_client():
    """Drop the process-wide client before and after a test."""
    quickhttp.close_default_client()
    yield
    quickhttp.close_default_client()


# ============================================================
# Mock Transport
# ============================================================


class RecordingHandler:
    """MockTransport handler that records requests and replays scripted outcomes.

    Each outcome is either an httpx.Response or an exception instance to raise.
    The last outcome is repeated once the script runs out.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def calls(self) -> int:
        return len(self.requests)


class InterruptedStream(httpx.SyncByteStream):
    """Response stream that yields some bytes, then fails like a dropped connection."""

    def __init__(self, *chunks: bytes):
        self.chunks = chunks

    def __iter__(self):
        yield from self.chunks
        raise httpx.ReadError("connection reset by peer")


class TruncatedStream(httpx.SyncByteStream):
    """Response stream whose peer closes before the declared body is complete."""

    def __init__(self, *chunks: bytes):
        self.chunks = chunks

    def __iter__(self):
        yield from self.chunks
        raise httpx.RemoteProtocolError("peer closed connection without sending complete message body")


@pytest.fixture
def make_client():
    """Build an HTTPClient over a MockTransport; closed after the test."""
    clients: list[HTTPClient] = []

    def factory(handler, retries: int = 1, **config) -> HTTPClient:
        client = HTTPClient(ClientConfig(retries=retries, **config), transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def connect_error():
    return httpx.ConnectError("connection refused")


# ============================================================
# Local Socket Server
# ============================================================


class RawHTTPServer:
    """Serves every connection on 127.0.0.1 with fixed response bytes, then closes it."""

    def __init__(self, payload: bytes):
        self.payload = payload
        self.connections = 0
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(5.0)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        host, port = self._sock.getsockname()
        return f"http://{host}:{port}/"

    def _serve(self) -> None:
        while True:
            try:
                conn, _ = self._sock.accept()
            except OSError:
                return
            self.connections += 1
            with conn:
                received = b""
                while b"\r\n\r\n" not in received:
                    chunk = conn.recv(65536)
                    if not chunk:
                        break
                    received += chunk
                conn.sendall(self.payload)

    def close(self) -> None:
        self._sock.close()


@pytest.fixture
def raw_http_server(monkeypatch):
    """Start local servers replying with raw HTTP bytes; proxies from the host are ignored."""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    servers: list[RawHTTPServer] = []

    def factory(payload: bytes) -> RawHTTPServer:
        server = RawHTTPServer(payload)
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.close()
