"""Command line entry point: ``python -m simplewebserver``."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import anyio

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .http.server import WebServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simplewebserver",
        description="Serve files from a directory, one request per connection.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m simplewebserver                    # ./text.html on port 8080
  python -m simplewebserver --port 3000        # Custom port
  python -m simplewebserver --root ./public    # Serve another directory
        """,
    )
    parser.add_argument("--host", "-H", default=defaults.host,
                        help=f"Host to bind to (default: {defaults.host})")
    parser.add_argument("--port", "-p", type=int, default=defaults.port,
                        help=f"Port to listen on (default: {defaults.port})")
    parser.add_argument("--root", "-r", type=Path, default=defaults.root,
                        help="Document root (default: current directory)")
    parser.add_argument("--default-file", default=defaults.default_file,
                        help=f"File served for / (default: {defaults.default_file})")
    parser.add_argument("--server-name", default=defaults.server_name,
                        help="Server header value")
    parser.add_argument("--log-level", "-l", choices=LOG_LEVELS,
                        default=defaults.log_level.upper(),
                        help=f"Logging level (default: {defaults.log_level.upper()})")
    parser.add_argument("--version", "-v", action="version",
                        version=f"simplewebserver {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"simplewebserver: {e}", file=sys.stderr)
        return 2
    args = build_parser(defaults).parse_args(argv)

    config = dataclasses.replace(
        defaults,
        host=args.host,
        port=args.port,
        root=args.root,
        default_file=args.default_file,
        server_name=args.server_name,
        log_level=args.log_level,
    )
    try:
        config.validate()
    except ValueError as e:
        print(f"simplewebserver: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    try:
        anyio.run(WebServer(config).serve)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
