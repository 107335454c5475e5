"""sqltunnel command-line interface.

``sqltunnel serve`` exposes a sqlite database over the tunnel protocol and
``sqltunnel query`` runs a select through a remote endpoint.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .client.factory import create_connection
from .core.config import ServerConfig
from .core.error import SqlTunnelError, format_error_chain
from .core.logging import init_logging

logger = logging.getLogger(__name__)


def serve_command(args: argparse.Namespace) -> int:
    """Serve a sqlite database with uvicorn.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        import uvicorn
        from .server.app import create_sqlite_app
    except ImportError as e:
        logger.error(f"Serving requires the server extra (pip install sqltunnel[server]): {e}")
        return 1

    try:
        overrides = {
            key: value
            for key, value in {
                "database": args.database,
                "host": args.host,
                "port": args.port,
                "token": args.token,
                "path": args.path,
            }.items()
            if value is not None
        }
        config = ServerConfig.from_dict({**ServerConfig.from_env().model_dump(), **overrides})
        app = create_sqlite_app(config)
    except SqlTunnelError as e:
        logger.error(f"Failed to start server: {e}")
        return 1

    uvicorn.run(app, host=config.host, port=config.port, log_level="info" if args.verbose else "warning")
    return 0


def query_command(args: argparse.Namespace) -> int:
    """Run one select through a remote endpoint and print the rows as JSON."""
    config: Dict[str, Any] = {"url": args.url, "timeout": args.timeout}
    if args.token is not None:
        config["token"] = args.token

    try:
        with create_connection(config) as connection:
            if args.one:
                result: Any = connection.select_one(args.sql, args.binding)
            else:
                result = connection.select(args.sql, args.binding)
    except SqlTunnelError as e:
        print(f"Query failed:\n{format_error_chain(e)}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="sqltunnel",
        description="Tunnel SQL operations over HTTP",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        help="Command to execute"
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a sqlite database over HTTP"
    )
    serve_parser.add_argument("--database", help="sqlite database path (default :memory:)")
    serve_parser.add_argument("--host", help="Listen address")
    serve_parser.add_argument("--port", type=int, help="Listen port")
    serve_parser.add_argument("--token", help="Require this bearer token")
    serve_parser.add_argument("--path", help="Route to serve the endpoint on")

    query_parser = subparsers.add_parser(
        "query",
        help="Run a select through a remote endpoint"
    )
    query_parser.add_argument("sql", help="SQL text")
    query_parser.add_argument("--url", required=True, help="Endpoint URL")
    query_parser.add_argument("--token", help="Bearer token")
    query_parser.add_argument(
        "-b", "--binding",
        action="append",
        default=[],
        help="Positional binding (repeatable)"
    )
    query_parser.add_argument("--one", action="store_true", help="Return only the first row")
    query_parser.add_argument("--timeout", type=float, default=30.0, help="HTTP timeout in seconds")

    args = parser.parse_args(args)

    init_logging("DEBUG" if args.verbose else None)

    if args.command == "serve":
        return serve_command(args)
    elif args.command == "query":
        return query_command(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
