"""
Fixed ticket dataset served by the ticket tools.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Tuple

STATUSES: Tuple[str, ...] = ("pending", "todo", "done")


@dataclass(frozen=True)
class Ticket:
    id: str
    title: str
    status: str  # pending | todo | done

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


TICKETS: Tuple[Ticket, ...] = (
    Ticket(id="T1", title="Fix login bug", status="pending"),
    Ticket(id="T2", title="Database indexing", status="pending"),
    Ticket(id="T10", title="Payment integration", status="done"),
    Ticket(id="T11", title="Email system", status="done"),
    Ticket(id="T20", title="Create dashboard UI", status="todo"),
    Ticket(id="T21", title="Add search filter", status="todo"),
)


def tickets_by_status(status: str, tickets: Tuple[Ticket, ...] = TICKETS) -> List[Ticket]:
    # keeps dataset order
    return [t for t in tickets if t.status == status]
