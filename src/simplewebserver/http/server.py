"""TCP listener that hands every accepted connection to the worker.

Each connection is served in its own task of a single TaskGroup; nothing is
shared between connections.
"""

from __future__ import annotations

import logging
from typing import Any

import anyio
from anyio.abc import SocketAttribute, SocketStream, TaskStatus

from ..config import ServerConfig
from .worker import handle_connection


logger = logging.getLogger(__name__)


class WebServer:
    """
    Serve files from `config.root` until cancelled.

    Usage:
        async with anyio.create_task_group() as tg:
            port = await tg.start(WebServer(config).serve)
    """

    def __init__(self, config: ServerConfig | None = None):
        self._config = config or ServerConfig()
        self._port: int | None = None

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def port(self) -> int | None:
        """The bound port once serving, else None."""
        return self._port

    async def serve(self, *, task_status: TaskStatus[int] = anyio.TASK_STATUS_IGNORED) -> None:
        self._config.validate()
        # anyio.create_tcp_listener() may return a MultiListener; the portable
        # API is listener.serve(handler, ...), not accept().
        listener: Any = await anyio.create_tcp_listener(
            local_host=self._config.host, local_port=self._config.port
        )
        async with listener:
            self._port = listener.extra(SocketAttribute.local_port)
            logger.info("Listening on http://%s:%d", self._config.host, self._port)
            task_status.started(self._port)
            try:
                async with anyio.create_task_group() as tg:
                    await listener.serve(self._handle_client, task_group=tg)
            finally:
                self._port = None
                logger.info("Server stopped")

    async def _handle_client(self, stream: SocketStream) -> None:
        try:
            peer = stream.extra(SocketAttribute.remote_address)
        except anyio.TypedAttributeLookupError:
            peer = None
        logger.debug("Accepted connection from %s", peer)
        await handle_connection(stream, self._config)
