"""
=============================================================================
REQUEST LINE PARSER
=============================================================================

Extracts the requested path from raw request bytes.

This is deliberately NOT an HTTP parser. It looks at the first line only,
finds two literal markers, and returns whatever sits between them.

=============================================================================
THE BEST-EFFORT LINE SCAN
=============================================================================

    GET /api/all-users HTTP/1.1\r\n
    ────┬───────────────────┬─────
        │                   │
     START MARKER        END MARKER
      "GET "              " HTTP/"
        │                   │
        └──────┬────────────┘
               │
        path = "/api/all-users"

Rules:
- Both markers are located by their FIRST occurrence in the first line
- The path is the text strictly between the end of "GET " and the start
  of " HTTP/"; no decoding, no validation, no query-string splitting
- "GET  HTTP/1.1" (two spaces) yields the empty path ""
- A missing marker, or an end marker that begins inside/before the start
  marker, means the line is unparseable and the parser returns None

Any method other than GET therefore never produces a path. The caller maps
None to the default route, so every request still gets an answer.

=============================================================================
WHY RETURN None INSTEAD OF RAISING?
=============================================================================

A parse failure is not an error for this server: it simply selects the
default response. Returning Optional keeps the parser total and pure, and
keeps exception handling out of the connection handler's happy path.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Union


START_MARKER = "GET "
END_MARKER = " HTTP/"


@dataclass(frozen=True)
class ParsedRequest:
    """The only part of a request this server cares about."""

    path: str


def first_line(text: str) -> str:
    """Return the request line, without its line terminator."""
    line, _, _ = text.partition("\n")
    return line.rstrip("\r")


def parse_request(raw: Union[str, bytes]) -> Optional[ParsedRequest]:
    """
    Extract the path from the first line of a raw request.

    Args:
        raw: Request text, or the raw bytes read from the socket
             (decoded as UTF-8, undecodable bytes replaced).

    Returns:
        ParsedRequest with the path, or None if the request line does
        not carry both markers in the right order.

    Examples:
        >>> parse_request("GET /users HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        ParsedRequest(path='/users')
        >>> parse_request("GET  HTTP/1.1")
        ParsedRequest(path='')
        >>> parse_request("POST /users HTTP/1.1") is None
        True
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    line = first_line(raw)

    start = line.find(START_MARKER)
    end = line.find(END_MARKER)
    if start == -1 or end == -1:
        return None

    path_start = start + len(START_MARKER)
    if end < path_start:
        return None

    return ParsedRequest(path=line[path_start:end])
