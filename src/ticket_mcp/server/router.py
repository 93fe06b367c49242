"""
Method routing for the ticket MCP server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ticket_mcp.core.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    MCPError,
    Request,
    Response,
)
from ticket_mcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

JSON = Dict[str, Any]

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "mcp-tickets"
SERVER_VERSION = "0.1.0"


@dataclass(frozen=True)
class CallToolParams:
    name: str
    arguments: Optional[JSON] = None

    @classmethod
    def parse(cls, params: Any) -> "CallToolParams":
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise MCPError(code=INVALID_PARAMS, message="tools/call params must be an object")

        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise MCPError(code=INVALID_PARAMS, message="tools/call requires params.name (string)")

        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise MCPError(
                code=INVALID_PARAMS,
                message="tools/call params.arguments must be an object",
            )
        return cls(name=name, arguments=arguments)


def _initialize(params: Any, reg: ToolRegistry) -> JSON:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        "capabilities": {
            "tools": {
                "call": {"enabled": True},
                "list": {"enabled": True, "listChanged": False},
            },
        },
    }


def _tools_list(params: Any, reg: ToolRegistry) -> JSON:
    return {"tools": reg.list_specs()}


def _tools_call(params: Any, reg: ToolRegistry) -> JSON:
    call = CallToolParams.parse(params)
    out = dict(reg.call(call.name))
    meta: JSON = {"count": len(out.get("tickets", []))}
    if call.arguments is not None:
        meta["args"] = call.arguments
    out["meta"] = meta
    return out


def _ping(params: Any, reg: ToolRegistry) -> JSON:
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return {"pong": now.isoformat().replace("+00:00", "Z")}


METHODS: Dict[str, Callable[[Any, ToolRegistry], JSON]] = {
    "initialize": _initialize,
    "tools/list": _tools_list,
    "tools/call": _tools_call,
    "ping": _ping,
}


def route(method: str, params: Any, reg: ToolRegistry) -> JSON:
    """
    Run the handler for `method` and return its result.
    Raises MCPError for protocol-level failures.
    """
    handler = METHODS.get(method)
    if handler is None:
        raise MCPError(code=METHOD_NOT_FOUND, message=f"Method not supported: {method}")
    return handler(params, reg)


def handle_request(req: Request, reg: ToolRegistry) -> Response:
    try:
        return Response.success(req.id, route(req.method, req.params, reg))
    except MCPError as exc:
        return Response.failure(req.id, exc.code, exc.message)
    except Exception as exc:
        logger.exception("handler for %s crashed (id=%s)", req.method, req.id)
        return Response.failure(req.id, INTERNAL_ERROR, str(exc))
