"""
Wire envelope for the ticket MCP server: request/response shapes and codec.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

JSON = Dict[str, Any]

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
TOOL_NOT_FOUND = -32001


class MCPError(RuntimeError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class Request:
    id: str
    method: str
    params: Any = None


@dataclass(frozen=True)
class DecodeFailure:
    """
    Frame could not be read as a request. `id` is whatever string id could
    be salvaged, or "".
    """
    message: str
    id: str = ""


@dataclass(frozen=True)
class Response:
    id: str
    result: Optional[Any] = None
    error: Optional[JSON] = None

    @classmethod
    def success(cls, request_id: str, result: Any) -> "Response":
        return cls(id=request_id, result=result if result is not None else {})

    @classmethod
    def failure(cls, request_id: str, code: int, message: str) -> "Response":
        return cls(id=request_id, error=make_error(code, message))

    @property
    def ok(self) -> bool:
        return self.error is None


def make_error(code: int, message: str) -> JSON:
    return {"code": code, "message": message}


# -------------------------
# Codec
# -------------------------

def decode_request(raw: Union[str, bytes]) -> Union[Request, DecodeFailure]:
    """
    Decode one inbound frame. Never raises: anything that is not a JSON
    object with a string `method` (and a string `id`, when one is given)
    comes back as a DecodeFailure.
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        return DecodeFailure(message=f"Invalid JSON: {exc}")

    if not isinstance(data, dict):
        return DecodeFailure(message="Request must be a JSON object")

    raw_id = data.get("id")
    request_id = raw_id if isinstance(raw_id, str) else ""
    if raw_id is not None and not isinstance(raw_id, str):
        return DecodeFailure(
            message=f"id must be a string, got: {type(raw_id).__name__}",
        )

    method = data.get("method")
    if not isinstance(method, str):
        return DecodeFailure(
            message=f"method must be a string, got: {type(method).__name__}",
            id=request_id,
        )

    return Request(id=request_id, method=method, params=data.get("params"))


def encode_response(response: Response) -> str:
    payload: JSON = {"id": response.id}
    if response.error is not None:
        payload["error"] = response.error
    else:
        payload["result"] = response.result if response.result is not None else {}
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def decode_response(raw: Union[str, bytes]) -> Response:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Response must be a JSON object")
    if (data.get("result") is None) == (data.get("error") is None):
        raise ValueError("Response must carry exactly one of result/error")
    return Response(
        id=data.get("id", ""),
        result=data.get("result"),
        error=data.get("error"),
    )
