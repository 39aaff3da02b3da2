"""
Ticket Domain Layer
===================

Contains:
- Entities: Ticket (status state machine), Comment, StatusTransition
- Value Objects: SLASnapshot, TicketIdentifier
- Domain Services: SLAPolicy

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from helpdesk.tickets.domain.entities import Ticket, Comment, StatusTransition
from helpdesk.tickets.domain.value_objects import (
    SLAPolicy,
    SLASnapshot,
    TicketIdentifier,
    compute_sla,
)

__all__ = [
    # Entities
    "Ticket",
    "Comment",
    "StatusTransition",
    # Value Objects & Services
    "SLAPolicy",
    "SLASnapshot",
    "TicketIdentifier",
    "compute_sla",
]
