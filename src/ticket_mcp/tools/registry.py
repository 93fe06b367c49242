"""
Tool registry: static tool descriptors plus their zero-argument producers.

Built once at startup by make_registry() and only read afterwards, so the
same instance is shared by every session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ticket_mcp.core.protocol import TOOL_NOT_FOUND, MCPError
from ticket_mcp.tools.tickets import TICKETS, Ticket, tickets_by_status

JSON = Dict[str, Any]
Producer = Callable[[], JSON]

EMPTY_INPUT_SCHEMA: Mapping[str, Any] = MappingProxyType(
    {"type": "object", "properties": {}, "required": []}
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_schema: Mapping[str, Any] = field(default_factory=lambda: EMPTY_INPUT_SCHEMA)

    def as_dict(self) -> JSON:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": _plain(self.input_schema),
        }


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self._producers: Dict[str, Producer] = {}

    def register(self, spec: ToolSpec, producer: Producer) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec
        self._producers[spec.name] = producer

    def names(self) -> List[str]:
        return list(self._tools)

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def list_specs(self) -> List[JSON]:
        # registration order
        return [t.as_dict() for t in self._tools.values()]

    def call(self, name: str) -> JSON:
        if self.get(name) is None:
            raise MCPError(code=TOOL_NOT_FOUND, message=f"Unknown tool: {name}")
        return self._producers[name]()


def _plain(value: Any) -> Any:
    # fresh, JSON-serializable copy so callers can never reach shared state
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _ticket_producer(status: str, tickets: Tuple[Ticket, ...]) -> Producer:
    def _produce() -> JSON:
        return {"tickets": [t.as_dict() for t in tickets_by_status(status, tickets)]}

    return _produce


# (tool name, status, description)
TICKET_TOOLS: Tuple[Tuple[str, str, str], ...] = (
    ("get_pending_tickets", "pending", "Get pending tickets"),
    ("get_done_tickets", "done", "Get done tickets"),
    ("get_todo_tickets", "todo", "Get todo tickets"),
)


def make_registry(tickets: Tuple[Ticket, ...] = TICKETS) -> ToolRegistry:
    reg = ToolRegistry()
    for name, status, description in TICKET_TOOLS:
        reg.register(
            ToolSpec(name=name, description=description),
            _ticket_producer(status, tickets),
        )
    return reg
