"""Listening socket lifecycle for the gateway.

``HttpTransport`` owns the uvicorn server that serves the Starlette app. The
socket is bound before uvicorn starts so that a bind failure surfaces to the
caller as the ``OSError`` raised by ``bind`` instead of a process exit.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from contextlib import contextmanager
from typing import Optional

import uvicorn
from starlette.applications import Starlette

from src.gateway.api.main import create_app
from src.gateway.config import GatewayConfig
from src.gateway.rpcEngine.dispatcher import ToolCatalog
from src.gateway.sessionEngine.store import SessionStore

logger = logging.getLogger(__name__)


class _Server(uvicorn.Server):
    """uvicorn server that leaves signal handling to the process entrypoint."""

    def install_signal_handlers(self) -> None:
        return None

    @contextmanager
    def capture_signals(self):
        yield


class HttpTransport:
    def __init__(
        self,
        tools: ToolCatalog,
        config: Optional[GatewayConfig] = None,
        *,
        sessions: Optional[SessionStore] = None,
    ):
        self.config = config or GatewayConfig()
        self.sessions = sessions or SessionStore.from_minutes(
            self.config.session_timeout_minutes
        )
        self.app: Starlette = create_app(
            tools, config=self.config, sessions=self.sessions
        )
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._socket: Optional[socket.socket] = None

    @property
    def port(self) -> Optional[int]:
        """Bound port, which differs from the configured one when that is 0."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    @property
    def running(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()

    async def start(self) -> None:
        if self._serve_task is not None:
            raise RuntimeError("transport already started")

        sock = self._bind()
        server = _Server(
            uvicorn.Config(
                self.app,
                log_level=self.config.log_level.lower(),
                lifespan="on",
            )
        )
        task = asyncio.create_task(server.serve(sockets=[sock]))
        while not server.started:
            if task.done():
                sock.close()
                exc = task.exception()
                if exc is not None:
                    raise exc
                raise RuntimeError("HTTP server exited during startup")
            await asyncio.sleep(0.01)

        self._server = server
        self._serve_task = task
        self._socket = sock
        logger.info(
            f"{self.config.server_name} listening on http://{self.config.host}:{self.port}/mcp"
        )

    async def stop(self) -> None:
        await self.sessions.aclose()
        if self._server is None or self._serve_task is None:
            return

        self._server.should_exit = True
        try:
            await self._serve_task
        finally:
            if self._socket is not None:
                self._socket.close()
            self._server = None
            self._serve_task = None
            self._socket = None
        logger.info("HTTP server stopped")

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.config.host, self.config.port))
            sock.listen(128)
        except OSError:
            sock.close()
            raise
        sock.setblocking(False)
        return sock
