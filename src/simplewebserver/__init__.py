"""A minimal one-request-per-connection file server built on AnyIO."""

from .config import SERVER_NAME, ServerConfig
from .http import (
    NOT_FOUND_BODY,
    Request,
    Resolution,
    ResponseStatus,
    WebServer,
    handle_connection,
    http_date,
    read_request,
    resolve,
    write_content,
    write_header,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "SERVER_NAME",
    "ServerConfig",
    # Per-connection pipeline
    "Request",
    "Resolution",
    "ResponseStatus",
    "NOT_FOUND_BODY",
    "read_request",
    "resolve",
    "write_header",
    "write_content",
    "handle_connection",
    "http_date",
    # Listener
    "WebServer",
]
