import re

import pytest

import ticket_mcp.server.router as router
from ticket_mcp.core.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    TOOL_NOT_FOUND,
    MCPError,
    Request,
)
from ticket_mcp.tools.registry import make_registry
from ticket_mcp.tools.tickets import TICKETS


@pytest.fixture
def reg():
    return make_registry()


def _call(reg, req_id, method, params=None):
    return router.handle_request(Request(id=req_id, method=method, params=params), reg)


def test_initialize(reg):
    r = _call(reg, "1", "initialize")
    assert r.id == "1"
    assert r.result["serverInfo"]["name"] == router.SERVER_NAME
    assert r.result["capabilities"]["tools"]["list"]["enabled"] is True
    assert r.result["capabilities"]["tools"]["call"]["enabled"] is True
    assert "protocolVersion" in r.result


def test_initialize_ignores_params(reg):
    assert _call(reg, "1", "initialize", {"clientInfo": {"name": "pytest"}}).result == _call(reg, "1", "initialize").result


def test_tools_list_is_stable(reg):
    first = _call(reg, "2", "tools/list").result
    _call(reg, "x", "tools/call", {"name": "get_todo_tickets"})
    second = _call(reg, "3", "tools/list").result
    assert first == second
    assert [t["name"] for t in first["tools"]] == [
        "get_pending_tickets",
        "get_done_tickets",
        "get_todo_tickets",
    ]


def test_tools_call_done(reg):
    r = _call(reg, "3", "tools/call", {"name": "get_done_tickets"})
    assert r.id == "3"
    tickets = r.result["tickets"]
    assert tickets and all(t["status"] == "done" for t in tickets)
    assert r.result["meta"] == {"count": len(tickets)}


def test_tools_call_echoes_arguments_in_meta(reg):
    r = _call(reg, "3", "tools/call", {"name": "get_todo_tickets", "arguments": {"limit": 1}})
    assert r.result["meta"]["args"] == {"limit": 1}
    assert r.result["meta"]["count"] == 2


def test_tool_results_cover_every_ticket_once(reg):
    ids = []
    for name in reg.names():
        ids.extend(t["id"] for t in _call(reg, name, "tools/call", {"name": name}).result["tickets"])
    assert sorted(ids) == sorted(t.id for t in TICKETS)


def test_unknown_tool(reg):
    r = _call(reg, "4", "tools/call", {"name": "nonexistent"})
    assert r.id == "4"
    assert r.result is None
    assert r.error["code"] == TOOL_NOT_FOUND
    assert "nonexistent" in r.error["message"]


@pytest.mark.parametrize(
    "params",
    [
        None,
        {},
        {"name": ""},
        {"name": 12},
        {"name": "get_done_tickets", "arguments": [1, 2]},
        ["get_done_tickets"],
        "get_done_tickets",
    ],
)
def test_tools_call_invalid_params(reg, params):
    r = _call(reg, "8", "tools/call", params)
    assert r.id == "8"
    assert r.error["code"] == INVALID_PARAMS


def test_unknown_method(reg):
    r = _call(reg, "5", "unknown/thing")
    assert r.id == "5"
    assert r.error["code"] == METHOD_NOT_FOUND
    assert "unknown/thing" in r.error["message"]


def test_route_raises_for_unknown_method(reg):
    with pytest.raises(MCPError) as exc:
        router.route("resources/list", None, reg)
    assert exc.value.code == METHOD_NOT_FOUND


def test_ping(reg):
    r = _call(reg, "6", "ping")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", r.result["pong"])


def test_handler_crash_becomes_internal_error(reg, monkeypatch):
    def _boom(params, reg):
        raise RuntimeError("boom")

    monkeypatch.setitem(router.METHODS, "initialize", _boom)
    r = _call(reg, "9", "initialize")
    assert r.id == "9"
    assert r.error == {"code": INTERNAL_ERROR, "message": "boom"}
