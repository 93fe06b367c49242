# src/ticket_mcp/server/socket_server.py
"""
MCP ticket server over WebSocket.

One session per connection: read a frame, answer it, read the next one.
Protocol errors become error responses; only transport failures end a
session.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from http import HTTPStatus
from typing import Any, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from ticket_mcp.core.protocol import (
    PARSE_ERROR,
    DecodeFailure,
    Response,
    decode_request,
    encode_response,
)
from ticket_mcp.server.router import handle_request
from ticket_mcp.tools.registry import ToolRegistry, make_registry

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
WS_PATH = "/ws"


def _peer(ws: Any) -> str:
    addr = getattr(ws, "remote_address", None)
    if isinstance(addr, tuple) and len(addr) >= 2:
        return f"{addr[0]}:{addr[1]}"
    return str(addr)


def _respond(raw: Union[str, bytes], peer: str, reg: ToolRegistry) -> Optional[str]:
    """
    Turn one inbound frame into the encoded outbound frame.
    Returns None when the response cannot be encoded; the frame is dropped.
    """
    req = decode_request(raw)
    if isinstance(req, DecodeFailure):
        logger.warning("invalid request from %s: %s", peer, req.message)
        resp = Response.failure(req.id, PARSE_ERROR, req.message)
    else:
        logger.debug("recv from %s: method=%s id=%s params=%r", peer, req.method, req.id, req.params)
        resp = handle_request(req, reg)

    try:
        return encode_response(resp)
    except (TypeError, ValueError, RecursionError):
        logger.exception("could not encode response for %s (id=%s), dropped", peer, resp.id)
        return None


# -------------------------
# Session loop
# -------------------------

async def run_session(ws: Any, reg: ToolRegistry) -> None:
    peer = _peer(ws)
    logger.info("client connected: %s", peer)
    try:
        async for raw in ws:
            out = _respond(raw, peer, reg)
            if out is None:
                continue
            try:
                await ws.send(out)
            except (ConnectionClosed, OSError) as exc:
                logger.warning("write error for %s: %s", peer, exc)
                return
    except ConnectionClosedOK:
        pass
    except (ConnectionClosed, OSError) as exc:
        logger.warning("read error for %s: %s", peer, exc)
    finally:
        logger.info("client disconnected: %s", peer)


# -------------------------
# WebSocket server
# -------------------------

def _only_path(path: str):
    def _process_request(connection, request):
        if request.path != path:
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
        return None

    return _process_request


def make_server(
    reg: ToolRegistry,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    path: str = WS_PATH,
):
    """
    Build the listener; use as `async with make_server(...) as server`.
    """

    async def _handler(ws) -> None:
        await run_session(ws, reg)

    return websockets.serve(
        _handler,
        host,
        port,
        process_request=_only_path(path),
        ping_interval=None,
    )


async def serve_socket(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    reg: Optional[ToolRegistry] = None,
) -> None:
    """
    Start the server and run until cancelled.
    """
    reg = reg if reg is not None else make_registry()
    async with make_server(reg, host, port):
        logger.info("MCP WebSocket ticket server listening on ws://%s:%d%s", host, port, WS_PATH)
        logger.info("tools: %s", ", ".join(reg.names()))
        await asyncio.Future()  # run forever


# -------------------------
# CLI
# -------------------------

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="MCP WebSocket ticket server")
    ap.add_argument("--host", default=DEFAULT_HOST)
    ap.add_argument("--port", type=int, default=DEFAULT_PORT)
    ap.add_argument("--verbose", "-v", action="store_true", help="log every request")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(serve_socket(args.host, args.port))
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        logger.critical("server failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
