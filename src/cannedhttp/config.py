"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every startup constant of the server lives in one dataclass.

=============================================================================
WHY A CONFIG OBJECT FOR A SERVER WITH NO CONFIG FILE?
=============================================================================

The server has no configuration file and reads no environment variables.
Port, backlog and buffer size are fixed at startup. Even so, collecting
them in one object gives us:

1. One place to see all options and their defaults
2. Fail-fast validation before any socket is created
3. Explicit hand-off: the object is built once, then passed down to the
   listener and the connection handler instead of living in globals

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHERE VALUES COME FROM                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command-line arguments (optional overrides)                    │
    │      └── python -m cannedhttp --port 3000                           │
    │                                                                      │
    │   2. Dataclass defaults                                             │
    │      └── port=8080, backlog=10, buffer_size=1024                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

After the server starts, the config is never mutated again.

=============================================================================
"""

from dataclasses import dataclass

from . import __version__


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the canned-response server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, poll_interval

    LOGGING
    - log_level, log_format

    IDENTITY
    - server_name (startup banner only, never sent to clients)

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IPv4 address to bind to.
    - "0.0.0.0" - All local interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 asks the OS for any free port,
    which is what the test suite does.
    """

    backlog: int = 10
    """
    Capacity of the kernel's pending-connection queue.
    Connections beyond this wait (or are refused) while we serve one.
    """

    buffer_size: int = 1024
    """
    Capacity C of the raw request buffer in bytes.
    A single read takes at most C - 1 bytes; the rest of a longer
    request is never looked at.
    """

    poll_interval: float = 1.0
    """
    How often (seconds) a blocked accept() wakes up to check whether
    shutdown() was requested. Has no effect on accepted connections.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG additionally dumps every raw request.
    """

    log_format: str = "text"
    """
    Access log format: 'text' (common-log style) or 'json'.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = f"cannedhttp/{__version__}"

    @property
    def read_size(self) -> int:
        """Maximum number of payload bytes a single read may return (C - 1)."""
        return self.buffer_size - 1

    def validate(self) -> None:
        """
        Validate configuration values.

        Called before the listening socket is created, so a typo on the
        command line never gets as far as bind().

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError(f"backlog must be >= 1, got {self.backlog}")

        # C - 1 bytes of payload must leave room for at least one byte
        if self.buffer_size < 2:
            raise ValueError(f"buffer_size must be >= 2, got {self.buffer_size}")

        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}")
