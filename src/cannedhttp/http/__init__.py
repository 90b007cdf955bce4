"""
=============================================================================
PROTOCOL COMPONENTS
=============================================================================

The three pure pieces of the request/response cycle. None of them touch a
socket, so each can be tested with plain strings.

    raw bytes ──► parse_request() ──► RouteTable.lookup() ──► frame_response() ──► bytes
                  request.py          routes.py               response.py

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /users HTTP/1.1\r\n           HTTP/1.1 200 OK\r\n
    Host: x\r\n      (ignored)        Content-Type: application/json\r\n
    \r\n                              Content-Length: 60\r\n
                                      \r\n
                                      [ ... ]

=============================================================================
"""

from .request import ParsedRequest, parse_request
from .response import HTTPResponse, frame_response, STATUS_LINE
from .routes import (
    RouteEntry,
    RouteTable,
    default_routes,
    TEXT_PLAIN,
    APPLICATION_JSON,
)

__all__ = [
    # Request line parsing
    "ParsedRequest",
    "parse_request",

    # Response framing
    "HTTPResponse",
    "frame_response",
    "STATUS_LINE",

    # Routing
    "RouteEntry",
    "RouteTable",
    "default_routes",
    "TEXT_PLAIN",
    "APPLICATION_JSON",
]
