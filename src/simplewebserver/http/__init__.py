"""HTTP side of simplewebserver.

`handle_connection()` answers one request on an already-accepted AnyIO byte
stream; `WebServer` is the TCP listener that feeds it.
"""

from .server import WebServer
from .worker import (
    NOT_FOUND_BODY,
    Request,
    Resolution,
    ResponseStatus,
    handle_connection,
    http_date,
    read_request,
    resolve,
    substitute,
    write_content,
    write_header,
)

__all__ = [
    "NOT_FOUND_BODY",
    "Request",
    "Resolution",
    "ResponseStatus",
    "WebServer",
    "handle_connection",
    "http_date",
    "read_request",
    "resolve",
    "substitute",
    "write_content",
    "write_header",
]
