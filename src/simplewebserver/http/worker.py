"""Per-connection HTTP worker.

Each accepted connection is handled by one call to `handle_connection()`, which
runs a single linear pipeline:

  read_request() -> resolve() -> write_header() -> write_content()

Only `GET` is understood. Anything else reads as "no resource" and is answered
with a 404. Served files get two placeholder tags replaced on the fly:

- ``<cs371date>``   -> the current HTTP date
- ``<cs371server>`` -> the server name

One request per connection (Connection: close), no Content-Length (the body is
streamed as it is read from disk).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from enum import Enum
from pathlib import Path

import anyio
from anyio.abc import ByteReceiveStream, ByteSendStream, ByteStream
from anyio.streams.buffered import BufferedByteReceiveStream

from ..config import DEFAULT_FILE, MAX_LINE_BYTES, SERVER_NAME, ServerConfig


logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/html"

DATE_TAG = b"<cs371date>"
SERVER_TAG = b"<cs371server>"

NOT_FOUND_BODY = b"<html><head></head><body><h1>Error 404 Page Not Found</h1></html>\n"

# Failures that mean "the peer or the disk went away", as opposed to bugs.
IO_ERRORS = (OSError, anyio.BrokenResourceError, anyio.ClosedResourceError)


class ResponseStatus(Enum):
    OK = (200, "OK")
    NOT_FOUND = (404, "Not Found")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def reason(self) -> str:
        return self.value[1]

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.code} {self.reason}"


@dataclass(frozen=True, slots=True)
class Request:
    method: str = ""
    target: str = ""
    # Root-relative ("./index.html"), or None when no GET line was seen.
    path: str | None = None


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of the single existence check made for a request."""

    path: Path | None
    status: ResponseStatus

    @property
    def found(self) -> bool:
        return self.status is ResponseStatus.OK


def http_date(now: datetime | None = None) -> str:
    """Format `now` (default: the current time) as an RFC 7231 date, always in GMT."""
    if now is None:
        now = datetime.now(timezone.utc)
    return format_datetime(now.astimezone(timezone.utc), usegmt=True)


def _parse_get_line(line: str, default_file: str) -> Request | None:
    # startswith() is safe on lines shorter than the prefix.
    if not line.startswith("GET "):
        return None
    parts = line.split()
    if len(parts) < 2:
        raise ValueError(f"GET line without a target: {line!r}")
    target = parts[1]
    path = "." + target
    if path == "./":
        path = "./" + default_file
    return Request(method="GET", target=target, path=path)


async def read_request(
    stream: ByteReceiveStream,
    *,
    default_file: str = DEFAULT_FILE,
    max_line_bytes: int = MAX_LINE_BYTES,
) -> Request:
    """
    Read the request header block and return what it asks for.

    Lines are consumed until a blank one. Any read failure ends the read phase
    quietly; whatever was recognized up to that point is returned.
    """
    reader = BufferedByteReceiveStream(stream)
    request = Request()
    while True:
        try:
            raw = await reader.receive_until(b"\n", max_line_bytes)
            line = raw.decode("utf-8").rstrip("\r")
            logger.debug("Request line: (%s)", line)
            if not line:
                break
            parsed = _parse_get_line(line, default_file)
        except anyio.IncompleteRead:
            logger.debug("Connection ended before the header block was complete")
            break
        except anyio.DelimiterNotFound:
            logger.warning("Request line longer than %d bytes", max_line_bytes)
            break
        except ValueError as e:  # undecodable bytes or a GET line with no target
            logger.warning("Request error: %s", e)
            break
        except IO_ERRORS as e:
            logger.warning("Request error: %r", e)
            break
        if parsed is not None:
            request = parsed
    return request


async def resolve(request: Request, root: Path | str = ".") -> Resolution:
    """
    Check once whether the request names a regular file under `root`.

    Targets that escape `root` (``/../secret``) or that the filesystem cannot
    look up at all (over-long names, NUL bytes) are reported as not found.
    """
    if request.path is None:
        return Resolution(path=None, status=ResponseStatus.NOT_FOUND)

    try:
        base = Path(await anyio.Path(root).resolve())
        candidate = Path(await anyio.Path(base, request.path).resolve())
        if not candidate.is_relative_to(base):
            logger.warning("Refusing %s: outside of %s", request.target, base)
            return Resolution(path=None, status=ResponseStatus.NOT_FOUND)
        is_file = await anyio.Path(candidate).is_file()
    except (OSError, ValueError) as e:
        logger.warning("Cannot look up %r: %s", request.target, e)
        return Resolution(path=None, status=ResponseStatus.NOT_FOUND)

    if is_file:
        return Resolution(path=candidate, status=ResponseStatus.OK)
    return Resolution(path=candidate, status=ResponseStatus.NOT_FOUND)


async def write_header(
    stream: ByteSendStream,
    resolution: Resolution,
    content_type: str,
    *,
    server_name: str = SERVER_NAME,
) -> None:
    """Write the status line and header block, terminated by a blank line."""
    lines = [
        resolution.status.status_line,
        f"Date: {http_date()}",
        f"Server: {server_name}",
        "Connection: close",
        f"Content-Type: {content_type}",
    ]
    head = "".join(f"{line}\n" for line in lines) + "\n"
    await stream.send(head.encode("utf-8"))


def substitute(line: bytes, date: str, server_name: str) -> bytes:
    """Replace every placeholder tag in `line`."""
    return line.replace(DATE_TAG, date.encode("utf-8")).replace(
        SERVER_TAG, server_name.encode("utf-8")
    )


async def write_content(
    stream: ByteSendStream,
    resolution: Resolution,
    *,
    server_name: str = SERVER_NAME,
) -> None:
    """
    Stream the resolved file with its tags replaced, or the 404 body.

    Must be called after `write_header()`. Errors opening or reading the file
    propagate; the file is closed either way.
    """
    if not resolution.found or resolution.path is None:
        await stream.send(NOT_FOUND_BODY)
        return

    date = http_date()
    async with await anyio.open_file(resolution.path, "rb") as f:
        async for line in f:
            await stream.send(substitute(line, date, server_name))


async def handle_connection(stream: ByteStream, config: ServerConfig | None = None) -> None:
    """
    Answer exactly one request on `stream`, then close it.

    Never raises: I/O failures and unexpected errors are logged and the
    connection is closed.
    """
    config = config or ServerConfig()
    logger.debug("Handling connection...")
    async with stream:
        try:
            request = await read_request(
                stream,
                default_file=config.default_file,
                max_line_bytes=config.max_line_bytes,
            )
            resolution = await resolve(request, config.root)
            logger.info(
                "%s %s -> %d",
                request.method or "-",
                request.target or "-",
                resolution.status.code,
            )
            await write_header(stream, resolution, CONTENT_TYPE, server_name=config.server_name)
            await write_content(stream, resolution, server_name=config.server_name)
        except IO_ERRORS as e:
            logger.warning("Output error: %r", e)
        except Exception:
            logger.exception("Unexpected error while handling connection")
    logger.debug("Done handling connection.")
