"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket for the single request/response cycle it
will ever serve.

=============================================================================
ONE READ, ONE WRITE, ONE CLOSE
=============================================================================

TCP is a byte stream: a single recv() may return part of a request, all of
it, or (if the client sent a lot) just the first chunk. A full HTTP server
would keep reading until it sees \r\n\r\n. This server does not:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Lifecycle                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED                │
    │              │                       ▲                               │
    │              └── error / empty ──────┘                               │
    │                                                                      │
    │   read_request()   ONE blocking recv(buffer_size - 1)               │
    │   send_response()  ONE sendall() attempt, no retry                  │
    │   close()          always, on every path (use `with conn:`)         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only the request line is inspected, and it is almost always in the first
segment a client sends. Anything past buffer_size - 1 bytes is never read;
whatever of it has already arrived is discarded during close().

=============================================================================
BLOCKING, NO TIMEOUTS
=============================================================================

Accepted sockets are switched to plain blocking mode. A client that
connects and never sends anything holds the server until it gives up.
That is the price of the one-connection-at-a-time model.

=============================================================================
"""

import socket
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Tuple
import uuid


logger = logging.getLogger(__name__)

# Most unread client bytes close() will discard before giving up
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Where a connection is in its single request/response cycle."""

    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Waiting in recv()
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents one accepted client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple, used for logging only.
        buffer_size: Capacity C of the raw request buffer.
        id: Short random identifier used to correlate log lines.
        state: Current lifecycle state.
        bytes_received: Size of the request actually read.
        bytes_sent: Size of the response actually handed to the kernel.
    """

    socket: socket.socket
    address: Tuple[str, int]
    buffer_size: int = 1024

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    bytes_received: int = 0
    bytes_sent: int = 0

    def __post_init__(self):
        # Fully blocking: no timeout on reads or writes
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read the request with a single blocking recv().

        At most ``buffer_size - 1`` bytes are returned. A longer request is
        silently truncated; nothing here tells the caller it happened.

        Returns:
            The bytes received, or b"" if the peer closed before sending.

        Raises:
            OSError: If the transport fails (reset, broken pipe, ...).
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(self.buffer_size - 1)
        self.bytes_received = len(data)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the framed response.

        sendall() keeps writing until every byte is accepted by the kernel
        or an error occurs. There is exactly one attempt: on failure the
        error is logged and the response is abandoned.

        Returns:
            True if the whole response was sent, False otherwise.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.error(f"[{self.id}] Could not send response to client: {e}")
            return False

        self.bytes_sent = len(data)
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR) sends FIN: the client sees end-of-response
        2. Discard client bytes we never read that are already queued, so
           the kernel does not answer our close() with a RST that could
           destroy the response still in flight. This never waits: a peer
           that keeps its socket open or keeps sending cannot hold up the
           accept loop
        3. close() releases the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        drained = 0
        try:
            self.socket.setblocking(False)
            while drained < DRAIN_LIMIT:
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # BlockingIOError: nothing more queued

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.info(f"[{self.id}] Client socket closed.")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows ``with conn:`` so the socket is released on every path:

            with conn:
                data = conn.read_request()
                conn.send_response(response)
            # Connection closed here, even after an exception
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
