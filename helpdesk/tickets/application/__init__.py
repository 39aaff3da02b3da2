"""
Ticket Application Layer
========================

Contains:
- Services: TicketService orchestrating the lifecycle
- DTOs: request validation and caller-facing ticket views

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from helpdesk.tickets.application.dto import (
    CommentCreateDTO,
    CommentDTO,
    StatusUpdateDTO,
    TicketCreateDTO,
    TicketEntityDTO,
    TicketQueryDTO,
    TicketUpdateDTO,
)
from helpdesk.tickets.application.services import TicketService

__all__ = [
    # DTOs
    "CommentCreateDTO",
    "CommentDTO",
    "StatusUpdateDTO",
    "TicketCreateDTO",
    "TicketEntityDTO",
    "TicketQueryDTO",
    "TicketUpdateDTO",
    # Services
    "TicketService",
]
