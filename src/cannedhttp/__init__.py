"""
=============================================================================
CANNEDHTTP - A One-Connection-at-a-Time Canned Response Server
=============================================================================

A tiny HTTP-shaped server on raw sockets. It accepts one connection, reads
one request, pulls the path out of the request line, answers with one of a
handful of canned bodies, closes, and only then accepts the next client.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    cannedhttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m cannedhttp)
    ├── server.py            # CannedServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # One log record per served request
    ├── core/                # Sockets
    │   ├── socket_server.py # Listening socket + accept loop
    │   ├── connection.py    # One client socket
    │   └── handler.py       # Serve one connection end-to-end
    └── http/                # Pure protocol pieces
        ├── request.py       # Request line → path
        ├── routes.py        # Path → canned body + content type
        └── response.py      # Body + content type → framed bytes

=============================================================================
QUICK START
=============================================================================

    $ python -m cannedhttp --port 8080
    $ curl -i http://localhost:8080/users

    HTTP/1.1 200 OK
    Content-Type: application/json
    Content-Length: 60

    [
      {"id": 1, "name": "Alice"},
      {"id": 2, "name": "Bob"}
    ]

=============================================================================
"""

__version__ = "1.0.0"

from .server import CannedServer
from .config import ServerConfig

__all__ = ["CannedServer", "ServerConfig", "__version__"]
