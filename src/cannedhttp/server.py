"""
=============================================================================
CANNED SERVER
=============================================================================

Wires configuration, route table, listener and connection handler into one
object with a run() method.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   CannedServer.run()                                                 │
    │        │                                                             │
    │        ├──► config.validate()          fail fast on bad values       │
    │        ├──► SocketServer.start()       socket / bind / listen        │
    │        │                                                             │
    │        └──► SocketServer.serve_forever(ConnectionHandler)            │
    │                 │                                                    │
    │                 └──► accept ─► handle ─► close ─► accept ─► ...      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Both the route table and the config are built before the first accept()
and never change afterwards; the handler gets them explicitly.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .access_log import AccessLogger
from .config import ServerConfig
from .core.handler import ConnectionHandler
from .core.socket_server import SocketServer
from .http.routes import RouteTable, default_routes


logger = logging.getLogger(__name__)


class CannedServer:
    """
    Single-threaded server answering a fixed set of paths.

    Usage:
        server = CannedServer(ServerConfig(port=8080))
        server.run()                    # blocks until SIGINT/SIGTERM

    Or, with explicit steps (handy in tests):
        server = CannedServer(ServerConfig(host="127.0.0.1", port=0))
        host, port = server.start()
        threading.Thread(target=server.serve_forever, daemon=True).start()
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, routes: Optional[RouteTable] = None):
        """
        Args:
            config: Server configuration. Defaults are port 8080, backlog 10,
                    1024-byte buffer.
            routes: Route table; the built-in table if not given.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.routes = routes or default_routes()

        self._socket_server = SocketServer(self.config)
        self._handler = ConnectionHandler(
            self.routes,
            AccessLogger(log_format=self.config.log_format),
        )

    @property
    def server_address(self) -> Tuple[str, int]:
        return self._socket_server.server_address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, port: Optional[int] = None, backlog: Optional[int] = None) -> Tuple[str, int]:
        """
        Bind and listen without serving yet.

        Raises:
            ServerStartupError: If the listening socket can't be set up.
        """
        return self._socket_server.start(port=port, backlog=backlog)

    def serve_forever(self):
        """Serve connections one at a time until shutdown()."""
        self._socket_server.serve_forever(self._handler)

    def run(self, port: Optional[int] = None):
        """
        Configure logging, start listening and serve (blocking).

        Args:
            port: Override config.port.
        """
        self._setup_logging()
        self.start(port=port)
        self._print_startup_banner()

        try:
            self.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        self._socket_server.shutdown()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("cannedhttp").setLevel(level)

    def _print_startup_banner(self):
        host, port = self.server_address
        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print(f"  {self.config.server_name} running on http://{host}:{port}")
        print(f"  One connection at a time, backlog {self.config.backlog}, "
              f"buffer {self.config.buffer_size} bytes")
        print("  Press Ctrl+C to stop")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()
        for path in self.routes.paths:
            print(f"  GET {path}")
        print("  GET <anything else>  (default)")
        print()
