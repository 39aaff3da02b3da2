"""
Lifecycle Events
================

Events emitted by the ticket lifecycle for notifiers to deliver.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from helpdesk.config import NotificationEvent

if TYPE_CHECKING:
    from helpdesk.agents.domain import User
    from helpdesk.tickets.domain import StatusTransition, Ticket


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def ticket_payload(ticket: "Ticket") -> Dict[str, Any]:
    """JSON-ready snapshot of a ticket at emission time."""
    return {
        "ticket_id": ticket.ticket_id,
        "title": ticket.title,
        "priority": ticket.priority.value,
        "category": ticket.category.value,
        "status": ticket.status.value,
        "created_by": ticket.created_by,
        "assigned_to": ticket.assigned_to,
        "sla_hours": ticket.sla.hours,
        "sla_due_date": _iso(ticket.sla.due_date),
        "created_at": _iso(ticket.created_at),
        "assigned_at": _iso(ticket.assigned_at),
        "resolved_at": _iso(ticket.resolved_at),
    }


def agent_payload(agent: "User") -> Dict[str, Any]:
    return {
        "id": agent.id,
        "name": agent.name,
        "email": agent.email,
        "department": agent.department.value if agent.department else None,
    }


@dataclass(frozen=True)
class LifecycleEvent:
    """
    Something that happened to a ticket.

    ``payload`` is JSON-ready: it always carries a ``ticket`` mapping and,
    depending on the kind, ``agent``, ``old_status`` and ``new_status``.
    Events built by the factories also copy ``occurred_at`` into the
    payload, since notifiers only receive the kind and the payload.
    """
    kind: NotificationEvent
    payload: Dict[str, Any]
    occurred_at: datetime

    @property
    def ticket_id(self) -> str:
        return self.payload.get("ticket", {}).get("ticket_id", "")

    def to_message(self) -> Dict[str, Any]:
        """Wire form used by outbound notifiers."""
        return {
            "event": self.kind.value,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": self.payload,
        }

    # ========== Factories ==========

    @classmethod
    def ticket_created(cls, ticket: "Ticket", occurred_at: datetime) -> "LifecycleEvent":
        return cls._build(NotificationEvent.TICKET_CREATED, {"ticket": ticket_payload(ticket)}, occurred_at)

    @classmethod
    def ticket_assigned(
        cls,
        ticket: "Ticket",
        agent: "User",
        occurred_at: datetime,
        previous_agent_id: Optional[str] = None,
    ) -> "LifecycleEvent":
        payload = {
            "ticket": ticket_payload(ticket),
            "agent": agent_payload(agent),
            "previous_agent_id": previous_agent_id,
        }
        return cls._build(NotificationEvent.TICKET_ASSIGNED, payload, occurred_at)

    @classmethod
    def status_changed(
        cls,
        ticket: "Ticket",
        transition: "StatusTransition",
        occurred_at: datetime,
    ) -> "LifecycleEvent":
        payload = {
            "ticket": ticket_payload(ticket),
            "old_status": transition.old_status.value,
            "new_status": transition.new_status.value,
        }
        return cls._build(NotificationEvent.STATUS_CHANGED, payload, occurred_at)

    @classmethod
    def ticket_resolved(cls, ticket: "Ticket", occurred_at: datetime) -> "LifecycleEvent":
        payload = {"ticket": ticket_payload(ticket), "new_status": ticket.status.value}
        return cls._build(NotificationEvent.TICKET_RESOLVED, payload, occurred_at)

    @classmethod
    def _build(
        cls,
        kind: NotificationEvent,
        payload: Dict[str, Any],
        occurred_at: datetime,
    ) -> "LifecycleEvent":
        payload["occurred_at"] = occurred_at.isoformat()
        return cls(kind=kind, payload=payload, occurred_at=occurred_at)
