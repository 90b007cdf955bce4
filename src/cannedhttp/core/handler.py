"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Services one accepted connection from first byte to close().

=============================================================================
THE REQUEST CYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ConnectionHandler.handle(conn)                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   with conn:                                                         │
    │     read_request()          one recv(C - 1)                          │
    │        ├── OSError ───────────────────────► log, no response ──┐    │
    │        ├── b"" ───────────────────────────► log, no response ──┤    │
    │        ▼                                                        │    │
    │     parse_request()         "GET " ... " HTTP/"  → path | None  │    │
    │        ▼                                                        │    │
    │     routes.lookup()         exact match, else default           │    │
    │        ▼                                                        │    │
    │     frame_response()        200 + Content-Type + Content-Length │    │
    │        ▼                                                        │    │
    │     send_response()         one sendall(), failure only logged  │    │
    │        ▼                                                        │    │
    │   close() ◄─────────────────────────────────────────────────────┘    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing raised inside handle() escapes it: one bad peer must never take
the accept loop down with it.

=============================================================================
"""

import time
import logging
from typing import Optional

from ..access_log import AccessLogger, RequestLog
from ..http.request import parse_request
from ..http.response import frame_response
from ..http.routes import RouteTable
from .connection import Connection


logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Handles accepted connections against a fixed route table.

    The route table is passed in explicitly, so the handler can be driven
    in tests with a socketpair and a hand-built table.
    """

    def __init__(self, routes: RouteTable, access_logger: Optional[AccessLogger] = None):
        self.routes = routes
        self.access_logger = access_logger or AccessLogger()

    def __call__(self, conn: Connection) -> None:
        self.handle(conn)

    def handle(self, conn: Connection) -> None:
        """Serve exactly one request on ``conn`` and close it."""
        with conn:
            try:
                self._serve(conn)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error while handling connection: {e}")

    def _serve(self, conn: Connection) -> None:
        start_time = time.time()

        try:
            raw = conn.read_request()
        except OSError as e:
            logger.error(f"[{conn.id}] Could not receive data from client: {e}")
            return

        if not raw:
            logger.info(f"[{conn.id}] Client disconnected.")
            return

        text = raw.decode("utf-8", errors="replace")
        logger.debug(f"[{conn.id}] Received request:\n{text}")

        parsed = parse_request(text)
        path = parsed.path if parsed is not None else None
        if parsed is None:
            logger.info(f"[{conn.id}] Unparseable request line, using default route")
        else:
            logger.info(f"[{conn.id}] Requested Path: {path}")

        entry = self.routes.lookup(path)
        response = frame_response(entry)

        sent = conn.send_response(response)
        if sent:
            logger.info(f"[{conn.id}] Response sent to client.")

        self.access_logger.log(RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            path=path,
            matched=entry is not self.routes.default,
            content_type=entry.content_type,
            content_length=len(entry.body.encode("utf-8")),
            sent=sent,
            duration_ms=(time.time() - start_time) * 1000,
            timestamp=AccessLogger.timestamp(),
        ))
