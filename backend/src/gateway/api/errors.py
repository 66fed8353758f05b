from __future__ import annotations

from typing import Any, Optional

from starlette import status
from starlette.responses import JSONResponse

from src.gateway.rpcEngine.errors import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
)
from src.gateway.rpcEngine.models import JsonRpcResponse


def rpc_error(
    code: int,
    message: str,
    status_code: int,
    headers: Optional[dict[str, str]] = None,
    data: Any = None,
) -> JSONResponse:
    return JSONResponse(
        JsonRpcResponse.failure(None, code, message, data).to_dict(),
        status_code=status_code,
        headers=headers,
    )


def parse_error(
    message: str = "Parse error", headers: Optional[dict[str, str]] = None
) -> JSONResponse:
    return rpc_error(PARSE_ERROR, message, status.HTTP_400_BAD_REQUEST, headers)


def not_found(message: str) -> JSONResponse:
    return rpc_error(METHOD_NOT_FOUND, message, status.HTTP_404_NOT_FOUND)


def internal_error(message: str = "Internal error") -> JSONResponse:
    return rpc_error(INTERNAL_ERROR, message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def unauthorized(message: str = "Authentication required") -> JSONResponse:
    return rpc_error(SERVER_ERROR, message, status.HTTP_401_UNAUTHORIZED)


def payload_too_large(
    limit: int, headers: Optional[dict[str, str]] = None
) -> JSONResponse:
    return rpc_error(
        INVALID_REQUEST,
        "Request body too large",
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        headers,
        data={"limit": limit},
    )
