from __future__ import annotations

from typing import List

from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.gateway.api.auth import authenticate
from src.gateway.api.errors import unauthorized
from src.gateway.config import AuthConfig

SESSION_HEADER = "Mcp-Session-Id"


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, config: AuthConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.config.active:
            return await call_next(request)

        path = request.scope.get("path", "")
        if path in self.config.exclude_paths or request.method == "OPTIONS":
            return await call_next(request)

        result = authenticate(request, self.config)
        if not result.authenticated:
            return unauthorized(result.error or "Authentication required")

        request.state.auth = result
        return await call_next(request)


def cors_middleware(origins: List[str]) -> Middleware:
    allow_all = "*" in origins
    return Middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            SESSION_HEADER,
            "X-Request-Id",
        ],
        expose_headers=[SESSION_HEADER],
        allow_credentials=True,
        max_age=86400,
    )
