"""Server configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


SERVER_NAME = "SimpleWebServer/1.0"
DEFAULT_FILE = "text.html"
MAX_LINE_BYTES = 64 * 1024
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """
    Settings for the listener and the per-connection worker.

    Attributes:
        host: Interface to bind to
        port: TCP port (0 picks a free one)
        root: Document root that request targets are resolved against
        default_file: File served for ``GET /``
        server_name: Value of the Server header and of ``<cs371server>``
        max_line_bytes: Longest request line accepted before giving up
        log_level: Logging level name used by the command line entry point
    """
    host: str = "127.0.0.1"
    port: int = 8080
    root: Path = field(default_factory=lambda: Path("."))
    default_file: str = DEFAULT_FILE
    server_name: str = SERVER_NAME
    max_line_bytes: int = MAX_LINE_BYTES
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a config from the environment.

        HTTP_HOST, HTTP_PORT, HTTP_ROOT, HTTP_DEFAULT_FILE, HTTP_SERVER_NAME
        and HTTP_LOG_LEVEL override the defaults.
        """
        port = os.getenv("HTTP_PORT", "8080")
        if not port.isdigit():
            raise ValueError(f"HTTP_PORT must be an integer, got {port!r}")
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(port),
            root=Path(os.getenv("HTTP_ROOT", ".")),
            default_file=os.getenv("HTTP_DEFAULT_FILE", DEFAULT_FILE),
            server_name=os.getenv("HTTP_SERVER_NAME", SERVER_NAME),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Raise ValueError on settings the server cannot start with."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")
        if not self.default_file:
            raise ValueError("default_file cannot be empty")
        if self.max_line_bytes < 1:
            raise ValueError("max_line_bytes must be >= 1")
        if not Path(self.root).is_dir():
            raise ValueError(f"Document root is not a directory: {self.root}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level!r}. Must be one of {', '.join(LOG_LEVELS)}."
            )
