"""Shared fixtures and an in-memory connection for driving the worker."""

from __future__ import annotations

from collections import deque

import anyio
import pytest
from anyio.abc import ByteStream


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeConnection(ByteStream):
    """
    A ByteStream fed from canned request bytes.

    Incoming data is delivered in `chunk_size` pieces followed by end of
    stream; everything sent is collected in `sent`.
    """

    def __init__(self, data: bytes = b"", *, chunk_size: int = 4096, fail_send: bool = False):
        self._incoming = deque(data[i:i + chunk_size] for i in range(0, len(data), chunk_size))
        self.sent = bytearray()
        self.closed = False
        self.fail_send = fail_send

    async def receive(self, max_bytes: int = 65536) -> bytes:
        if self.closed:
            raise anyio.ClosedResourceError
        if not self._incoming:
            raise anyio.EndOfStream
        return self._incoming.popleft()

    async def send(self, item: bytes) -> None:
        if self.closed:
            raise anyio.ClosedResourceError
        if self.fail_send:
            raise anyio.BrokenResourceError
        self.sent.extend(item)

    async def send_eof(self) -> None:
        pass

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def connection():
    """Factory: connection(b"GET / HTTP/1.1\\r\\n\\r\\n", chunk_size=...)."""
    return FakeConnection


@pytest.fixture
def docroot(tmp_path):
    root = tmp_path / "www"
    root.mkdir()
    return root
