"""
=============================================================================
COMMAND-LINE INTERFACE
=============================================================================

    python -m cannedhttp                      # 0.0.0.0:8080
    python -m cannedhttp --port 3000          # different port
    python -m cannedhttp -l DEBUG             # dump raw requests too
    python -m cannedhttp --log-format json    # JSON access log

Exit status is 1 if the configuration is invalid or the listening socket
can't be created, bound or put into listening mode. Otherwise the server
runs until SIGINT (Ctrl+C) or SIGTERM.

=============================================================================
"""

import sys
import logging
import argparse
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS
from .core.socket_server import ServerStartupError
from .server import CannedServer


logger = logging.getLogger("cannedhttp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cannedhttp",
        description="Single-threaded server answering a fixed set of paths with canned responses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  /admin           text/plain         Hello from Admin Page!
  /users           application/json   two users
  /api/all-users   application/json   nine users
  anything else    text/plain         Hello, World!
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="0.0.0.0",
        help="IPv4 address to bind to (default: 0.0.0.0, all interfaces)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--backlog", "-b",
        type=int,
        default=10,
        help="Pending-connection queue size (default: 10)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=1024,
        help="Request buffer capacity in bytes; one read takes at most this minus one (default: 1024)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="text",
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"cannedhttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Translate parsed CLI arguments to a ServerConfig."""
    return ServerConfig(
        host=args.host,
        port=args.port,
        backlog=args.backlog,
        buffer_size=args.buffer_size,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    try:
        server = CannedServer(config_from_args(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        server.run()
    except ServerStartupError as e:
        logger.error(f"Fatal: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
