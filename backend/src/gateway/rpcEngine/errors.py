from __future__ import annotations

from typing import Any, Optional


PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
# Implementation-defined server error range; used for HTTP auth rejections.
SERVER_ERROR = -32000


class JsonRpcError(Exception):
    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def parse_error(message: str = "Parse error") -> JsonRpcError:
    return JsonRpcError(PARSE_ERROR, message)


def invalid_request(message: str = "Invalid Request", data: Any = None) -> JsonRpcError:
    return JsonRpcError(INVALID_REQUEST, message, data)


def method_not_found(method: str) -> JsonRpcError:
    return JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")


def internal_error(message: str = "Internal error") -> JsonRpcError:
    return JsonRpcError(INTERNAL_ERROR, message)
