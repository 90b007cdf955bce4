"""
=============================================================================
CORE: SOCKETS AND CONNECTIONS
=============================================================================

    SocketServer        listening socket + accept loop
    Connection          one accepted client socket (read once, write once)
    ConnectionHandler   parse → route → frame → send → close

There is no thread pool here. The accept loop calls the handler directly
and waits for it, so exactly one connection is in flight at any time.

=============================================================================
"""

from .socket_server import SocketServer, ServerStartupError
from .connection import Connection, ConnectionState
from .handler import ConnectionHandler

__all__ = [
    "SocketServer",        # Listening socket and accept loop
    "ServerStartupError",  # create/bind/listen failed
    "Connection",          # Wrapper for one client socket
    "ConnectionState",     # Connection lifecycle states
    "ConnectionHandler",   # Serves one connection end-to-end
]
