"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    python -m usercrud
    python -m usercrud --port 3000
    python -m usercrud --database-url sqlite:///users.db
    usercrud --log-level DEBUG

Settings come from, in order of priority: command-line flags, environment
variables (a .env file in the working directory is loaded first), then the
ServerConfig defaults.

Exit status 1 when the schema bootstrap fails or the port cannot be bound.

=============================================================================
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from . import __version__
from .config import ServerConfig
from .server import CRUDServer
from .store import StoreError


logger = logging.getLogger("usercrud")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="usercrud",
        description="Minimal user CRUD service over raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m usercrud                                   # Defaults / environment
  python -m usercrud --port 3000                       # Custom port
  python -m usercrud --database-url sqlite:///users.db # Local SQLite store
        """,
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: $HTTP_HOST or 0.0.0.0)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: $HTTP_PORT or 8080)",
    )

    parser.add_argument(
        "--database-url", "-d",
        default=None,
        help="SQLAlchemy database URL (default: $DATABASE_URL)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: $HTTP_LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"usercrud {__version__}",
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then flags on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.database_url is not None:
        config.database_url = args.database_url
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        server = CRUDServer(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except StoreError as e:
        logger.error(f"Error setting up database: {e}")
        return 1
    except OSError as e:
        logger.error(f"Unable to start server: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
