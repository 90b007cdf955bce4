"""
=============================================================================
LISTENER / ACCEPT LOOP
=============================================================================

Owns the process-wide listening socket and drives the serve loop.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create an IPv4 stream socket
    2. setsockopt  SO_REUSEADDR, so a restart does not hit TIME_WAIT
    3. bind()      Reserve host:port (default 0.0.0.0:8080)
    4. listen()    Kernel starts queueing connections (backlog = 10)
    5. accept()    BLOCKS until a client connects, returns a NEW socket
    6. handler()   Serve that one connection to completion
    7. goto 5

Steps 1-4 are startup preconditions: if any fails the server has no
reason to exist, so start() raises ServerStartupError and the CLI exits.
Step 5 failures are transient: log and accept again.

=============================================================================
ONE CONNECTION AT A TIME
=============================================================================

    accept ──► handle ──► close ──► accept ──► handle ──► close ──► ...

The handler runs synchronously inside the loop. While it works, new
clients wait in the kernel's backlog queue. Ordering is trivially correct
(first accepted, first served) and there is no shared mutable state, so no
locks. The cost: one slow client stalls everybody behind it.

=============================================================================
STOPPING
=============================================================================

accept() on the listening socket uses a short timeout (poll_interval) only
so the loop can notice shutdown(), which is called from SIGINT/SIGTERM
handlers or from another thread (tests). A timeout just means "nobody
connected yet" and the loop carries on. Accepted connections are never
interrupted.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class ServerStartupError(Exception):
    """
    The listening socket could not be set up.

    Attributes:
        phase: Which step failed: "create", "bind" or "listen".
        address: The (host, port) we tried to listen on.
    """

    def __init__(self, phase: str, address: Tuple[str, int], reason: str):
        self.phase = phase
        self.address = address
        super().__init__(f"Could not {phase} socket on {address[0]}:{address[1]}: {reason}")


class SocketServer:
    """
    Low-level TCP listener.

    Usage:
        server = SocketServer(config)
        server.start()                      # create, bind, listen
        server.serve_forever(handler)       # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, buffer_size).

        The socket is not created here; see start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._shutdown_event = threading.Event()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def server_address(self) -> Tuple[str, int]:
        """The bound (host, port); reflects the real port when 0 was requested."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    # =========================================================================
    # STARTUP
    # =========================================================================

    def start(self, port: Optional[int] = None, backlog: Optional[int] = None) -> Tuple[str, int]:
        """
        Create the listening socket, bind it and start listening.

        Args:
            port: Override config.port.
            backlog: Override config.backlog.

        Returns:
            The bound (host, port).

        Raises:
            ServerStartupError: If socket creation, bind() or listen() fails.
        """
        port = self.config.port if port is None else port
        backlog = self.config.backlog if backlog is None else backlog
        address = (self.config.host, port)

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            logger.error(f"Could not create socket: {e}")
            raise ServerStartupError("create", address, str(e)) from e
        logger.info("Socket created successfully.")

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as e:
            logger.warning(f"setsockopt(SO_REUSEADDR) failed: {e}")

        try:
            sock.bind(address)
        except OSError as e:
            sock.close()
            logger.error(f"Could not bind socket to {address[0]}:{address[1]}: {e}")
            raise ServerStartupError("bind", address, str(e)) from e

        try:
            sock.listen(backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Could not listen on socket: {e}")
            raise ServerStartupError("listen", address, str(e)) from e

        # Only the accept() call polls; accepted sockets are made blocking
        sock.settimeout(self.config.poll_interval)

        self._socket = sock
        self._shutdown_event.clear()
        host, bound_port = self.server_address
        logger.info(f"Socket bound to {host}:{bound_port} (backlog={backlog}).")
        return host, bound_port

    # =========================================================================
    # SERVE LOOP
    # =========================================================================

    def serve_forever(self, connection_handler: Callable[[Connection], None]):
        """
        Accept and handle connections until shutdown() is called.

        Args:
            connection_handler: Called synchronously with each accepted
                                Connection. The next accept() only happens
                                after it returns.
        """
        if self._socket is None:
            self.start()

        self._running = True
        self._setup_signals()

        host, port = self.server_address
        logger.info(f"Server listening on port {port}...")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while not self._shutdown_event.is_set():
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Nobody connected; check for shutdown again
            except OSError as e:
                if self._shutdown_event.is_set() or self._socket is None:
                    break
                logger.error(f"Could not accept client connection: {e}")
                continue

            logger.info(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            )
            connection_handler(conn)

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    def shutdown(self):
        """
        Ask the accept loop to stop. Idempotent, callable from any thread.

        The connection currently being handled (if any) is finished first.
        """
        if not self._shutdown_event.is_set():
            logger.info("Shutting down socket server...")
        self._shutdown_event.set()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until a stop has been requested; False on timeout."""
        return self._shutdown_event.wait(timeout)

    def _setup_signals(self):
        """
        Install SIGINT/SIGTERM handlers that call shutdown().

        Python only allows signal handlers on the main thread, so a server
        run from a worker thread (as the tests do) skips this step.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._shutdown_event.set()
        logger.info("Socket server stopped")
