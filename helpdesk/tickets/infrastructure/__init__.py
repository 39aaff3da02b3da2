"""
Ticket Infrastructure Layer
===========================

- Models: SQLAlchemy ORM models (tickets, comments, identifier counter)
- Repositories: SQLAlchemy ticket repository
"""

from helpdesk.tickets.infrastructure.models import CommentModel, TicketCounterModel, TicketModel
from helpdesk.tickets.infrastructure.repositories import SQLAlchemyTicketRepository

__all__ = [
    "CommentModel",
    "TicketCounterModel",
    "TicketModel",
    "SQLAlchemyTicketRepository",
]
