"""Tool registry for the gateway.

This module defines the data structures used to register tool descriptors and
resolve their handlers when a ``tools/call`` request arrives.
"""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, best_match

logger = logging.getLogger(__name__)


ToolHandler = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]


class ToolNotFoundError(LookupError):
    def __init__(self, name: Any):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolArgumentsError(ValueError):
    def __init__(self, name: str, detail: str):
        super().__init__(f"Invalid arguments for {name}: {detail}")
        self.name = name
        self.detail = detail


# ---------------------------------------------------------------------------
# Tool entries
# ---------------------------------------------------------------------------


@dataclass
class Tool:
    """A callable operation exposed through ``tools/list`` and ``tools/call``."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: Dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def descriptor(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


def text_content(payload: Any, *, is_error: bool = False) -> Dict[str, Any]:
    """Wrap a handler result as MCP text content."""

    result: Dict[str, Any] = {
        "content": [
            {"type": "text", "text": json.dumps(payload, indent=2, default=str)}
        ]
    }
    if is_error:
        result["isError"] = True
    return result


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ToolRegistry:
    """Registry of tools addressable by name.

    ``call_tool`` raises :class:`ToolNotFoundError` for unknown names and
    :class:`ToolArgumentsError` when arguments fail the tool's input schema.
    Failures raised by the handler itself are tool-level errors and come back
    as content flagged with ``isError``.
    """

    def __init__(self, tools: Optional[Iterable[Tool]] = None) -> None:
        self._tools: Dict[str, Tool] = {}
        self._validators: Dict[str, Draft202012Validator] = {}
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: Tool) -> None:
        try:
            Draft202012Validator.check_schema(tool.input_schema)
        except SchemaError as exc:
            raise ValueError(
                f"tool {tool.name!r} has an invalid inputSchema: {exc.message}"
            ) from exc
        if tool.name in self._tools:
            logger.warning(f"Replacing registered tool {tool.name}")
        self._tools[tool.name] = tool
        self._validators[tool.name] = Draft202012Validator(tool.input_schema)

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)
        self._validators.pop(name, None)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [tool.descriptor() for tool in self._tools.values()]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        tool = self._tools.get(name) if isinstance(name, str) else None
        if tool is None:
            raise ToolNotFoundError(name)

        error = best_match(self._validators[name].iter_errors(arguments))
        if error is not None:
            raise ToolArgumentsError(name, error.message)

        try:
            result = tool.handler(arguments)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.warning(f"Tool {name} failed: {exc}")
            return text_content({"error": str(exc)}, is_error=True)

        return text_content(result)
