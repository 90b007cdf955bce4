"""
=============================================================================
RESPONSE FRAMER
=============================================================================

Turns a route entry into a complete, self-describing response message.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     FRAMED RESPONSE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                  ← fixed status line         │
    │    Content-Type: application/json\r\n   ← from the route entry      │
    │    Content-Length: 60\r\n               ← len(body.encode("utf-8")) │
    │    \r\n                                 ← blank line                │
    │    [\n  {"id": 1, ...                   ← body, verbatim            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The status is always 200. Bad paths, odd methods and unparseable request
lines only change WHICH body is sent, never the status line.

=============================================================================
CONTENT-LENGTH IS A BYTE COUNT
=============================================================================

Content-Length counts BYTES, not characters:

    "Hello"   → 5 characters → 5 bytes
    "héllo"   → 5 characters → 6 bytes (é is 2 bytes in UTF-8)

So we encode the body first and measure the encoded bytes. A client that
reads exactly Content-Length bytes after the blank line gets the body back
with nothing missing and nothing extra. Nothing is written after the body.

=============================================================================
"""

from dataclasses import dataclass

from .routes import RouteEntry, TEXT_PLAIN


HTTP_VERSION = "HTTP/1.1"
STATUS_LINE = f"{HTTP_VERSION} 200 OK"
CRLF = "\r\n"


@dataclass(frozen=True)
class HTTPResponse:
    """
    A response about to be sent.

    Only Content-Type and Content-Length are emitted as headers, in that
    order; the status line is fixed.
    """

    body: str = ""
    content_type: str = TEXT_PLAIN

    @property
    def status_line(self) -> str:
        return STATUS_LINE

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8")

    @property
    def content_length(self) -> int:
        """Exact byte length of the encoded body."""
        return len(self.body_bytes)

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Returns:
            Status line, two headers, blank line and body as one
            contiguous byte string.
        """
        body = self.body_bytes
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(body)}",
            "",  # Empty line separates headers from body
        ]
        header_bytes = CRLF.join(lines).encode("utf-8") + CRLF.encode("utf-8")
        return header_bytes + body

    @classmethod
    def from_route(cls, entry: RouteEntry) -> "HTTPResponse":
        return cls(body=entry.body, content_type=entry.content_type)


def frame_response(entry: RouteEntry) -> bytes:
    """Build the wire bytes for a route entry."""
    return HTTPResponse.from_route(entry).to_bytes()
