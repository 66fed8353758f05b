from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Union

from pydantic import ValidationError

from .errors import (
    INTERNAL_ERROR,
    PARSE_ERROR,
    JsonRpcError,
    invalid_request,
    method_not_found,
)
from .models import (
    Initialize,
    JsonRpcRequest,
    JsonRpcResponse,
    Ping,
    RequestId,
    RpcCall,
    ToolsCall,
    ToolsList,
    Unknown,
    to_call,
)

logger = logging.getLogger(__name__)


PROTOCOL_VERSION = "2024-11-05"

ResponsePayload = Union[Dict[str, Any], List[Dict[str, Any]]]


class ToolCatalog(Protocol):
    def list_tools(self) -> List[Dict[str, Any]]:  # pragma: no cover - interface
        ...

    async def call_tool(
        self, name: str, arguments: Dict[str, Any]
    ) -> Any:  # pragma: no cover - interface
        ...


def parse_error_response() -> Dict[str, Any]:
    return JsonRpcResponse.failure(None, PARSE_ERROR, "Parse error").to_dict()


def _extract_id(body: Any) -> RequestId:
    if not isinstance(body, dict):
        return None
    raw = body.get("id")
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (str, int, float)):
        return raw
    return None


class JsonRpcDispatcher:
    """Turns decoded JSON bodies into JSON-RPC responses.

    A batch (JSON array) is fanned out concurrently and answered with an array
    of the same length and order. Every request is handled behind its own
    error boundary, so a failing element only produces its own error entry.
    """

    def __init__(
        self,
        tools: ToolCatalog,
        *,
        server_name: str = "mcp-gateway",
        server_version: str = "1.0.0",
        protocol_version: str = PROTOCOL_VERSION,
    ):
        self.tools = tools
        self.server_name = server_name
        self.server_version = server_version
        self.protocol_version = protocol_version

    async def handle(
        self, body: Any, *, session_id: Optional[str] = None
    ) -> ResponsePayload:
        if isinstance(body, list):
            return list(
                await asyncio.gather(
                    *(self.handle_one(item, session_id=session_id) for item in body)
                )
            )
        if isinstance(body, dict):
            return await self.handle_one(body, session_id=session_id)
        return parse_error_response()

    async def handle_one(
        self, body: Any, *, session_id: Optional[str] = None
    ) -> Dict[str, Any]:
        request_id = _extract_id(body)
        try:
            call = self.parse(body)
            request_id = call.id
            result = await self.route(call)
            return JsonRpcResponse.success(request_id, result).to_dict()
        except JsonRpcError as exc:
            return JsonRpcResponse.failure(
                request_id, exc.code, exc.message, exc.data
            ).to_dict()
        except Exception as exc:
            logger.warning(
                f"Request {request_id!r} failed in session {session_id}: {exc}"
            )
            return JsonRpcResponse.failure(
                request_id, INTERNAL_ERROR, str(exc) or type(exc).__name__
            ).to_dict()

    def parse(self, body: Any) -> RpcCall:
        if not isinstance(body, dict):
            raise invalid_request()
        try:
            request = JsonRpcRequest.model_validate(body)
        except ValidationError as exc:
            raise invalid_request(
                data=[
                    {"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()
                ]
            )
        return to_call(request)

    async def route(self, call: RpcCall) -> Any:
        if isinstance(call, Initialize):
            return self.initialize_result()
        if isinstance(call, ToolsList):
            return {"tools": self.tools.list_tools()}
        if isinstance(call, ToolsCall):
            return await self.tools.call_tool(call.name, call.arguments)
        if isinstance(call, Ping):
            return {"pong": True}
        if isinstance(call, Unknown):
            raise method_not_found(call.method)
        raise TypeError(f"unhandled call type {type(call).__name__}")

    def initialize_result(self) -> Dict[str, Any]:
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": {
                "name": self.server_name,
                "version": self.server_version,
            },
        }
