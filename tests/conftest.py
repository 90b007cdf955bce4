"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cannedhttp import CannedServer, ServerConfig


@pytest.fixture
def users_request() -> bytes:
    """Request for the two-user listing."""
    return (
        b"GET /users HTTP/1.1\r\n"
        b"Host: x\r\n"
        b"\r\n"
    )


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        poll_interval=0.1,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def send_request(address: Tuple[str, int], payload: bytes, timeout: float = 5.0) -> bytes:
    """Send one request and read until the server closes the connection."""
    with socket.create_connection(address, timeout=timeout) as client:
        if payload:
            client.sendall(payload)
        chunks = []
        while True:
            chunk = client.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> Tuple[str, dict, bytes]:
    """Split a framed response into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


class TestServer:
    """Test server helper that runs the accept loop in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: CannedServer):
        self.server = server
        self.address: Tuple[str, int] = None
        self._thread: threading.Thread = None

    def start(self):
        """Bind synchronously, then serve in a background thread."""
        self.address = self.server.start()
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, payload: bytes) -> bytes:
        return send_request(self.address, payload)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on an OS-assigned port."""
    test_srv = TestServer(CannedServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def parse_response():
    """The split_response helper, for tests that check framing."""
    return split_response
