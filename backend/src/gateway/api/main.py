from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware

from src.gateway.api.middleware import AuthMiddleware, cors_middleware
from src.gateway.api.routes import exception_handlers, routes
from src.gateway.config import GatewayConfig
from src.gateway.rpcEngine.dispatcher import JsonRpcDispatcher, ToolCatalog
from src.gateway.sessionEngine.store import SessionStore
from src.gateway.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def create_app(
    tools: Optional[ToolCatalog] = None,
    *,
    config: Optional[GatewayConfig] = None,
    sessions: Optional[SessionStore] = None,
) -> Starlette:
    config = config or GatewayConfig()
    sessions = sessions or SessionStore.from_minutes(config.session_timeout_minutes)
    dispatcher = JsonRpcDispatcher(
        tools if tools is not None else ToolRegistry(),
        server_name=config.server_name,
        server_version=config.server_version,
    )

    @asynccontextmanager
    async def lifespan(app: Starlette):
        sessions.start()
        try:
            yield
        finally:
            await sessions.aclose()

    app = Starlette(
        routes=routes,
        middleware=[
            cors_middleware(config.cors_origins),
            Middleware(AuthMiddleware, config=config.auth),
        ],
        exception_handlers=exception_handlers,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.sessions = sessions
    app.state.dispatcher = dispatcher
    return app
