"""
Integration tests: a real listening server driven over TCP.
"""

import json
import socket
import struct
import threading
import time

import pytest

from cannedhttp import CannedServer, ServerConfig


class TestRoutesOverTCP:
    """Each route answered by a live server."""

    def test_users(self, test_server, users_request, parse_response):
        """Test GET /users returns the two-user JSON listing."""
        status, headers, body = parse_response(test_server.request(users_request))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/json"
        assert int(headers["Content-Length"]) == len(body)
        assert [u["name"] for u in json.loads(body)] == ["Alice", "Bob"]

    def test_all_users(self, test_server, parse_response):
        _, headers, body = parse_response(test_server.request(b"GET /api/all-users HTTP/1.1\r\n\r\n"))

        assert headers["Content-Type"] == "application/json"
        assert len(json.loads(body)) == 9

    def test_admin(self, test_server, parse_response):
        _, headers, body = parse_response(test_server.request(b"GET /admin HTTP/1.1\r\n\r\n"))

        assert headers["Content-Type"] == "text/plain"
        assert body == b"Hello from Admin Page!"

    def test_unknown_path(self, test_server, parse_response):
        """Test GET /nope returns the default greeting."""
        status, headers, body = parse_response(test_server.request(b"GET /nope HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/plain"
        assert body == b"Hello, World!"

    def test_empty_path(self, test_server, parse_response):
        """Test 'GET  HTTP/1.1' is served the default route."""
        _, _, body = parse_response(test_server.request(b"GET  HTTP/1.1\r\n\r\n"))

        assert body == b"Hello, World!"

    def test_large_request_still_answered(self, test_server, parse_response):
        """Test a request far beyond the buffer still gets a full response."""
        payload = b"GET /users HTTP/1.1\r\nX-Pad: " + b"a" * 10000 + b"\r\n\r\n"
        status, headers, body = parse_response(test_server.request(payload))

        assert status == "HTTP/1.1 200 OK"
        assert int(headers["Content-Length"]) == len(body)
        assert b"Alice" in body


class TestSequencing:
    """One connection at a time, in accept order."""

    def test_sequential_clients(self, test_server, parse_response):
        """Test N back-to-back clients each get their own, intact response."""
        paths = ["/users", "/admin", "/nope", "/api/all-users", "/users"] * 4
        routes = test_server.server.routes

        for path in paths:
            raw = test_server.request(f"GET {path} HTTP/1.1\r\n\r\n".encode())
            _, headers, body = parse_response(raw)
            expected = routes.lookup(path)

            assert body == expected.body.encode("utf-8")
            assert headers["Content-Type"] == expected.content_type

    def test_silent_client_then_next(self, test_server, parse_response):
        """Test a peer that connects and closes without sending does not break the server."""
        with socket.create_connection(test_server.address, timeout=5.0) as silent:
            silent.shutdown(socket.SHUT_WR)
            assert silent.recv(1024) == b""

        _, _, body = parse_response(test_server.request(b"GET /admin HTTP/1.1\r\n\r\n"))
        assert body == b"Hello from Admin Page!"

    def test_reset_client_then_next(self, test_server, parse_response):
        """Test an abortive close (RST) is survived."""
        aborted = socket.create_connection(test_server.address, timeout=5.0)
        aborted.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
        aborted.close()

        _, _, body = parse_response(test_server.request(b"GET /nope HTTP/1.1\r\n\r\n"))
        assert body == b"Hello, World!"

    def test_second_client_waits_for_first(self, test_server, parse_response):
        """Test a queued client is only served after the in-flight one is closed."""
        first = socket.create_connection(test_server.address, timeout=5.0)
        try:
            # First client is accepted and the server blocks reading from it
            second_result = {}

            def second_client():
                second_result["raw"] = test_server.request(b"GET /admin HTTP/1.1\r\n\r\n")

            thread = threading.Thread(target=second_client, daemon=True)
            thread.start()
            thread.join(timeout=0.5)
            assert thread.is_alive(), "second client was served while the first was in flight"

            first.sendall(b"GET /users HTTP/1.1\r\n\r\n")
            first.shutdown(socket.SHUT_WR)
            first_raw = b""
            while True:
                chunk = first.recv(4096)
                if not chunk:
                    break
                first_raw += chunk
        finally:
            first.close()

        thread.join(timeout=5.0)
        assert b"Alice" in parse_response(first_raw)[2]
        assert parse_response(second_result["raw"])[2] == b"Hello from Admin Page!"

    def test_idle_peer_after_response_does_not_stall_next(self, test_server, parse_response):
        """Test a client that keeps its socket open after its response costs no extra time."""
        with socket.create_connection(test_server.address, timeout=5.0) as idle:
            idle.sendall(b"GET /admin HTTP/1.1\r\n\r\n")
            assert idle.recv(4096).startswith(b"HTTP/1.1 200 OK")

            started = time.monotonic()
            _, _, body = parse_response(test_server.request(b"GET /nope HTTP/1.1\r\n\r\n"))
            elapsed = time.monotonic() - started

        assert body == b"Hello, World!"
        assert elapsed < 0.3

    def test_trickling_peer_after_response_does_not_stall_next(self, test_server, parse_response):
        """Test a client that keeps sending after its response cannot hold the server."""
        trickler = socket.create_connection(test_server.address, timeout=5.0)
        stop = threading.Event()

        def keep_sending():
            while not stop.wait(0.05):
                try:
                    trickler.sendall(b"x")
                except OSError:
                    return

        try:
            trickler.sendall(b"GET /admin HTTP/1.1\r\n\r\n")
            assert trickler.recv(4096).startswith(b"HTTP/1.1 200 OK")
            sender = threading.Thread(target=keep_sending, daemon=True)
            sender.start()

            started = time.monotonic()
            _, _, body = parse_response(test_server.request(b"GET /users HTTP/1.1\r\n\r\n"))
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            trickler.close()

        assert b"Alice" in body
        assert elapsed < 1.0


class TestLifecycle:
    """Startup and shutdown of the full server."""

    def test_shutdown_stops_serving(self, config):
        server = CannedServer(config)
        server.start()
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        server.shutdown()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert not server.is_running
        assert server.wait_for_shutdown(timeout=0)

    def test_wait_for_shutdown_times_out_while_serving(self, test_server):
        """Test wait_for_shutdown() reports False while the server is still up."""
        assert test_server.server.wait_for_shutdown(timeout=0.1) is False
        assert test_server.server.is_running

    def test_invalid_config_rejected_before_bind(self):
        with pytest.raises(ValueError):
            CannedServer(ServerConfig(backlog=0))
