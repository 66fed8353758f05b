from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from src.gateway.api.errors import (
    internal_error,
    not_found,
    parse_error,
    payload_too_large,
)
from src.gateway.api.middleware import SESSION_HEADER
from src.gateway.api.models import HealthResponse, ServiceDescriptor
from src.gateway.config import GatewayConfig
from src.gateway.rpcEngine.dispatcher import JsonRpcDispatcher
from src.gateway.sessionEngine.store import SessionStore

logger = logging.getLogger(__name__)


async def health(request: Request) -> JSONResponse:
    sessions: SessionStore = request.app.state.sessions
    response = HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        sessions=sessions.session_count,
    )
    return JSONResponse(response.model_dump(mode="json"))


async def service_info(request: Request) -> JSONResponse:
    dispatcher: JsonRpcDispatcher = request.app.state.dispatcher
    response = ServiceDescriptor(
        name=dispatcher.server_name,
        version=dispatcher.server_version,
        description="JSON-RPC tool gateway with session tracking",
        protocolVersion=dispatcher.protocol_version,
        endpoints={"mcp": "/mcp", "health": "/health"},
    )
    return JSONResponse(response.model_dump(mode="json"))


async def mcp_endpoint(request: Request) -> JSONResponse:
    sessions: SessionStore = request.app.state.sessions
    dispatcher: JsonRpcDispatcher = request.app.state.dispatcher
    config: GatewayConfig = request.app.state.config

    session = sessions.get_or_create_session(request.headers.get(SESSION_HEADER))
    headers = {SESSION_HEADER: session.id}

    raw = await read_body(request, config.max_body_bytes)
    if raw is None:
        logger.warning(
            f"Rejected request body over {config.max_body_bytes} bytes in session {session.id}"
        )
        return payload_too_large(config.max_body_bytes, headers=headers)

    try:
        body = load_json(raw)
    except (ValueError, RecursionError):
        return parse_error(headers=headers)
    if not isinstance(body, (dict, list)):
        return parse_error(headers=headers)

    payload = await dispatcher.handle(body, session_id=session.id)
    return JSONResponse(payload, headers=headers)


async def read_body(request: Request, limit: int) -> Optional[bytes]:
    """Read the request body, or return None once it exceeds ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        return None

    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def load_json(raw: bytes) -> Any:
    """Strict JSON decoding: ``NaN``/``Infinity`` and overflowing numbers are rejected."""
    return json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)


async def route_not_found(request: Request, exc: Exception) -> JSONResponse:
    return not_found(f"Not found: {request.method} {request.url.path}")


async def server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return internal_error()


routes = [
    Route("/", service_info, methods=["GET"]),
    Route("/health", health, methods=["GET"]),
    Route("/mcp", mcp_endpoint, methods=["POST"]),
]

exception_handlers = {
    404: route_not_found,
    405: route_not_found,
    Exception: server_error,
}
