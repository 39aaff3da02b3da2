"""
Ticket Infrastructure Repositories
==================================

Concrete implementation of the ticket repository using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
tickets from the database. Concurrency failures surface as
ConflictException; everything else propagates unchanged.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from helpdesk.config import Category, Priority, TicketStatus
from helpdesk.core import ConflictException, ITicketRepository, ResourceNotFoundException
from helpdesk.tickets.domain import Comment, SLASnapshot, Ticket
from helpdesk.tickets.infrastructure.models import CommentModel, TicketCounterModel, TicketModel

TICKET_SEQUENCE = "ticket"


def _to_domain(model: TicketModel) -> Ticket:
    """Convert ORM row to domain entity."""
    return Ticket(
        ticket_id=model.ticket_id,
        title=model.title,
        description=model.description,
        priority=Priority(model.priority),
        category=Category(model.category),
        created_by=model.created_by,
        sla=SLASnapshot(hours=model.sla_hours, due_date=model.sla_due_date),
        created_at=model.created_at,
        updated_at=model.updated_at,
        status=TicketStatus(model.status),
        assigned_to=model.assigned_to,
        assigned_at=model.assigned_at,
        resolved_at=model.resolved_at,
        comments=[
            Comment(author_id=c.author_id, text=c.text, created_at=c.created_at)
            for c in model.comments
        ],
        version=model.version,
    )


def _apply(model: TicketModel, ticket: Ticket) -> None:
    """Copy mutable domain state onto the ORM row."""
    model.title = ticket.title
    model.description = ticket.description
    model.priority = Priority(ticket.priority).value
    model.status = TicketStatus(ticket.status).value
    model.category = Category(ticket.category).value
    model.sla_hours = ticket.sla.hours
    model.sla_due_date = ticket.sla.due_date
    model.assigned_to = ticket.assigned_to
    model.assigned_at = ticket.assigned_at
    model.resolved_at = ticket.resolved_at
    model.updated_at = ticket.updated_at

    # Comment log is append-only
    for position in range(len(model.comments), len(ticket.comments)):
        comment = ticket.comments[position]
        model.comments.append(CommentModel(
            position=position,
            author_id=comment.author_id,
            text=comment.text,
            created_at=comment.created_at,
        ))


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, ticket_id: str) -> Optional[TicketModel]:
        stmt = (
            select(TicketModel)
            .where(TicketModel.ticket_id == ticket_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _flush(self, ticket_id: str) -> None:
        try:
            await self._session.flush()
        except StaleDataError as e:
            raise ConflictException("Ticket", ticket_id) from e
        except IntegrityError as e:
            raise ConflictException("Ticket", ticket_id, {"reason": "duplicate identifier"}) from e

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by its human-readable identifier."""
        model = await self._get_model(ticket_id)
        return _to_domain(model) if model else None

    async def add(self, ticket: Ticket) -> Ticket:
        """Create new ticket."""
        model = TicketModel(
            ticket_id=ticket.ticket_id,
            created_by=ticket.created_by,
            created_at=ticket.created_at,
            comments=[],
        )
        _apply(model, ticket)

        self._session.add(model)
        await self._flush(ticket.ticket_id)

        ticket.version = model.version
        return ticket

    async def save(self, ticket: Ticket) -> Ticket:
        """Update existing ticket, guarded by its version."""
        model = await self._get_model(ticket.ticket_id)
        if model is None:
            raise ResourceNotFoundException("Ticket", ticket.ticket_id)
        if model.version != ticket.version:
            raise ConflictException("Ticket", ticket.ticket_id)

        _apply(model, ticket)
        await self._flush(ticket.ticket_id)

        ticket.version = model.version
        return ticket

    async def delete(self, ticket_id: str) -> None:
        """Delete ticket and its comments."""
        model = await self._get_model(ticket_id)
        if model is None:
            raise ResourceNotFoundException("Ticket", ticket_id)

        await self._session.delete(model)
        await self._flush(ticket_id)

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Ticket]:
        """List tickets with filters, newest first."""
        filters = filters or {}
        stmt = select(TicketModel)

        # Apply filters
        conditions = []
        for key, expected in filters.items():
            column = getattr(TicketModel, key)
            if isinstance(expected, (list, tuple, set, frozenset)):
                conditions.append(column.in_([getattr(v, "value", v) for v in expected]))
            else:
                conditions.append(column == getattr(expected, "value", expected))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(TicketModel.created_at.desc(), TicketModel.ticket_id.desc())

        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]

    async def next_ticket_number(self) -> int:
        """Advance the ticket sequence with compare-and-increment."""
        stmt = select(TicketCounterModel.value).where(TicketCounterModel.name == TICKET_SEQUENCE)
        current = (await self._session.execute(stmt)).scalar_one_or_none()

        if current is None:
            try:
                await self._session.execute(
                    insert(TicketCounterModel).values(name=TICKET_SEQUENCE, value=1)
                )
            except IntegrityError as e:
                raise ConflictException("TicketCounter", TICKET_SEQUENCE) from e
            return 1

        result = await self._session.execute(
            update(TicketCounterModel)
            .where(
                TicketCounterModel.name == TICKET_SEQUENCE,
                TicketCounterModel.value == current,
            )
            .values(value=current + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictException("TicketCounter", TICKET_SEQUENCE)
        return current + 1
