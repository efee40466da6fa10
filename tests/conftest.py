"""
Pytest configuration for deferred_http tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import socket
import threading

import pytest
from pathlib import Path
from typing import List

from deferred_http.channel import MemoryChannel
from deferred_http.response import ResponseBuilder


# Fixed Date header so serialized responses can be compared byte for byte
FIXED_DATE = "Thu, 01 Jan 1970 00:00:00 GMT"


@pytest.fixture
def channel() -> MemoryChannel:
    """Create an in-memory output channel."""
    return MemoryChannel()


@pytest.fixture
def builder(channel: MemoryChannel) -> ResponseBuilder:
    """Create a response bound to the memory channel with a fixed Date."""
    response = ResponseBuilder(channel)
    response.set_header("Date", FIXED_DATE)
    return response


@pytest.fixture
def make_file(tmp_path: Path):
    """Create files with given content under the test's temp directory."""
    def _create_file(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _create_file


@pytest.fixture
def sample_file(make_file) -> Path:
    """A small HTML file."""
    return make_file("index.html", b"<html><body>Hello</body></html>")


@pytest.fixture
def large_file(make_file) -> Path:
    """A file spanning several read chunks (10000 bytes, not a chunk multiple)."""
    return make_file("data.bin", bytes(range(256)) * 39 + b"x" * 16)


@pytest.fixture
def sample_chunks() -> List[bytes]:
    """Sample body fragments."""
    return [
        b"Hello",
        b", ",
        b"World",
        b"!",
    ]


@pytest.fixture
def raw_http_server(monkeypatch):
    """Serve one canned raw reply per URL from a loopback socket."""
    monkeypatch.setenv("no_proxy", "*")
    monkeypatch.setenv("NO_PROXY", "*")
    servers = []

    def _serve(reply: bytes) -> str:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        listener.settimeout(10)

        def run() -> None:
            try:
                connection, _ = listener.accept()
            except OSError:
                return
            with connection:
                request = b""
                while b"\r\n\r\n" not in request:
                    chunk = connection.recv(65536)
                    if not chunk:
                        break
                    request += chunk
                connection.sendall(reply)

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        servers.append((listener, thread))
        host, port = listener.getsockname()
        return f"http://{host}:{port}/fragment.html"

    yield _serve

    for listener, thread in servers:
        thread.join(timeout=10)
        listener.close()
