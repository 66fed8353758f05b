"""JSON-RPC 2.0 envelopes and the fixed set of routed methods."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from typing_extensions import Literal

RequestId = Union[StrictInt, StrictFloat, StrictStr, None]

JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    jsonrpc: Literal["2.0"]
    method: StrictStr
    params: Any = None
    id: RequestId = None


class ErrorObject(BaseModel):
    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    result: Any = None
    error: Optional[ErrorObject] = None
    id: RequestId = None

    @classmethod
    def success(cls, request_id: RequestId, result: Any) -> "JsonRpcResponse":
        return cls(result=result, id=request_id)

    @classmethod
    def failure(
        cls, request_id: RequestId, code: int, message: str, data: Any = None
    ) -> "JsonRpcResponse":
        return cls(error=ErrorObject(code=code, message=message, data=data), id=request_id)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            payload["error"] = self.error.model_dump(mode="json", exclude_none=True)
        else:
            payload["result"] = self.result
        payload["id"] = self.id
        return payload


# ---------------------------------------------------------------------------
# Routed methods
# ---------------------------------------------------------------------------


@dataclass
class Initialize:
    id: RequestId
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolsList:
    id: RequestId


@dataclass
class ToolsCall:
    id: RequestId
    name: Any
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Ping:
    id: RequestId


@dataclass
class Unknown:
    id: RequestId
    method: str


RpcCall = Union[Initialize, ToolsList, ToolsCall, Ping, Unknown]


def to_call(request: JsonRpcRequest) -> RpcCall:
    params = request.params if isinstance(request.params, dict) else {}
    method = request.method
    if method == "initialize":
        return Initialize(id=request.id, params=params)
    if method == "tools/list":
        return ToolsList(id=request.id)
    if method == "tools/call":
        arguments = params.get("arguments")
        return ToolsCall(
            id=request.id,
            name=params.get("name"),
            arguments=arguments if isinstance(arguments, dict) else {},
        )
    if method == "ping":
        return Ping(id=request.id)
    return Unknown(id=request.id, method=method)
