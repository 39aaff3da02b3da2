"""
Ticket Application Services
===========================

Business logic orchestration for the ticket lifecycle.

Services coordinate the domain entity, storage and the assignment engine.
Each operation runs as one unit of work; lifecycle events are handed to
the dispatcher only after that unit has committed.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from helpdesk.agents.domain import User
from helpdesk.assignment.application.services import AssignmentEngine
from helpdesk.config import Category, Priority, TicketStatus, UserRole, settings
from helpdesk.core import Actor, Clock, IUnitOfWork, ResourceNotFoundException, SystemClock
from helpdesk.notifications.application.services import NotificationDispatcher
from helpdesk.notifications.domain import LifecycleEvent
from helpdesk.shared.dto import parse_dto
from helpdesk.shared.infrastructure.logging import get_logger, log_latency
from helpdesk.shared.infrastructure.transactions import (
    UnitOfWorkFactory,
    run_in_transaction,
    run_read_only,
)
from helpdesk.tickets.application.dto import (
    CommentCreateDTO,
    StatusUpdateDTO,
    TicketCreateDTO,
    TicketQueryDTO,
    TicketUpdateDTO,
)
from helpdesk.tickets.domain import Comment, Ticket, TicketIdentifier

logger = get_logger(__name__)


class TicketService:
    """
    Service for the ticket lifecycle.

    Responsibilities:
    - Creating tickets (identifier, SLA, first assignment attempt)
    - Status transitions and their counter side effects
    - Comments, edits and deletion
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        assignment: AssignmentEngine,
        dispatcher: NotificationDispatcher,
        clock: Optional[Clock] = None,
        max_attempts: Optional[int] = None,
    ):
        self._uow_factory = uow_factory
        self._assignment = assignment
        self._dispatcher = dispatcher
        self._clock = clock or SystemClock()
        self._max_attempts = max_attempts or settings.assignment_max_retries

    async def _transaction(self, work, operation: str):
        return await run_in_transaction(
            self._uow_factory, work,
            operation=operation, max_attempts=self._max_attempts
        )

    # ========== Create / Read ==========

    async def create_ticket(
        self,
        data: Union[TicketCreateDTO, Mapping[str, Any]],
        actor: Actor,
    ) -> Ticket:
        """
        Open a new ticket and try to place it with an agent.

        Args:
            data: Title, description, priority (default Medium), category
            actor: Requesting user, recorded as the owner

        Returns:
            The created ticket; In Progress when an agent was found,
            otherwise Open and unassigned
        """
        dto = parse_dto(TicketCreateDTO, data)

        async def work(uow: IUnitOfWork) -> Tuple[Ticket, Optional[User]]:
            number = await uow.tickets.next_ticket_number()
            ticket = Ticket.open(
                ticket_id=TicketIdentifier.format(
                    number, settings.ticket_id_prefix, settings.ticket_id_width
                ),
                title=dto.title,
                description=dto.description,
                priority=dto.priority,
                category=dto.category,
                created_by=actor.user_id,
                now=self._clock.now(),
            )
            agent = await self._assignment.place(uow, ticket)
            await uow.tickets.add(ticket)
            return ticket, agent

        with log_latency(logger, "create_ticket", category=dto.category.value):
            ticket, agent = await self._transaction(work, "create_ticket")

        logger.info(
            "Ticket created",
            extra={
                "ticket_id": ticket.ticket_id,
                "priority": ticket.priority.value,
                "category": ticket.category.value,
                "sla_hours": ticket.sla.hours,
                "assigned_to": ticket.assigned_to,
                "created_by": actor.user_id,
            }
        )

        now = self._clock.now()
        events = [LifecycleEvent.ticket_created(ticket, now)]
        if agent is not None:
            events.append(LifecycleEvent.ticket_assigned(ticket, agent, now))
        self._dispatcher.dispatch_all(events)
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket:
        async def work(uow: IUnitOfWork) -> Optional[Ticket]:
            return await uow.tickets.get(ticket_id)

        ticket = await run_read_only(self._uow_factory, work)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def list_tickets(
        self,
        actor: Actor,
        status: Optional[Union[TicketStatus, str]] = None,
        priority: Optional[Union[Priority, str]] = None,
        category: Optional[Union[Category, str]] = None,
    ) -> List[Ticket]:
        """
        List tickets visible to ``actor``, newest first.

        Users see tickets they opened, agents the tickets assigned to them
        and admins everything.
        """
        query = parse_dto(
            TicketQueryDTO,
            {"status": status, "priority": priority, "category": category},
        )
        filters: Dict[str, Any] = {
            key: value for key, value in query.model_dump().items() if value is not None
        }
        if actor.role == UserRole.USER:
            filters["created_by"] = actor.user_id
        elif actor.role == UserRole.AGENT:
            filters["assigned_to"] = actor.user_id

        async def work(uow: IUnitOfWork) -> List[Ticket]:
            return await uow.tickets.list(filters)

        return await run_read_only(self._uow_factory, work)

    # ========== Update ==========

    async def update_ticket(
        self,
        ticket_id: str,
        data: Union[TicketUpdateDTO, Mapping[str, Any]],
    ) -> Ticket:
        """
        Edit title, description or priority.

        A priority change restamps the SLA from the creation time; any
        other edit leaves the due date alone.
        """
        dto = parse_dto(TicketUpdateDTO, data)

        async def work(uow: IUnitOfWork) -> Ticket:
            ticket = await uow.tickets.get(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)

            now = self._clock.now()
            if dto.title is not None and dto.title != ticket.title:
                ticket.title = dto.title
                ticket.updated_at = now
            if dto.description is not None and dto.description != ticket.description:
                ticket.description = dto.description
                ticket.updated_at = now
            if dto.priority is not None and ticket.change_priority(dto.priority, now):
                logger.info(
                    "Ticket priority changed",
                    extra={
                        "ticket_id": ticket_id,
                        "priority": ticket.priority.value,
                        "sla_due_date": ticket.sla.due_date.isoformat(),
                    }
                )
            return await uow.tickets.save(ticket)

        return await self._transaction(work, "update_ticket")

    async def set_status(
        self,
        ticket_id: str,
        new_status: Union[TicketStatus, str],
        actor: Optional[Actor] = None,
    ) -> Ticket:
        """
        Move a ticket to ``new_status``.

        Entering Resolved/Closed stamps resolved_at and releases the
        assignee's load exactly once; repeating the call changes nothing.

        Raises:
            ValidationException: unknown status value (checked first)
            ResourceNotFoundException: unknown ticket
            InvalidTransitionException: Resolved/Closed back to an active status
        """
        dto = parse_dto(StatusUpdateDTO, {"status": new_status})

        async def work(uow: IUnitOfWork):
            ticket = await uow.tickets.get(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)

            transition = ticket.transition_to(dto.status, self._clock.now())
            if not transition.changed:
                return ticket, transition

            if transition.entered_terminal:
                await self._assignment.release(uow, ticket)
            await uow.tickets.save(ticket)
            return ticket, transition

        ticket, transition = await self._transaction(work, "set_status")
        if not transition.changed:
            return ticket

        logger.info(
            "Ticket status changed",
            extra={
                "ticket_id": ticket_id,
                "old_status": transition.old_status.value,
                "new_status": transition.new_status.value,
                "actor": actor.user_id if actor else None,
            }
        )

        now = self._clock.now()
        events = [LifecycleEvent.status_changed(ticket, transition, now)]
        if transition.entered_terminal:
            events.append(LifecycleEvent.ticket_resolved(ticket, now))
        self._dispatcher.dispatch_all(events)
        return ticket

    async def add_comment(self, ticket_id: str, text: str, actor: Actor) -> Comment:
        """Append a comment authored by ``actor``."""
        dto = parse_dto(CommentCreateDTO, {"text": text})

        async def work(uow: IUnitOfWork) -> Comment:
            ticket = await uow.tickets.get(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            comment = ticket.add_comment(actor.user_id, dto.text, self._clock.now())
            await uow.tickets.save(ticket)
            return comment

        comment = await self._transaction(work, "add_comment")
        logger.info("Comment added", extra={"ticket_id": ticket_id, "author_id": actor.user_id})
        return comment

    async def auto_assign_ticket(self, ticket_id: str) -> Optional[User]:
        """Retry placement of an existing ticket; None when nobody is eligible."""
        return await self._assignment.auto_assign(ticket_id)

    # ========== Delete ==========

    async def delete_ticket(self, ticket_id: str, actor: Optional[Actor] = None) -> None:
        """
        Remove a ticket.

        An active assigned ticket gives its load back before removal.
        Authorization is enforced by the caller.
        """

        async def work(uow: IUnitOfWork) -> Ticket:
            ticket = await uow.tickets.get(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            if ticket.holds_agent_load:
                await self._assignment.release(uow, ticket)
            await uow.tickets.delete(ticket_id)
            return ticket

        ticket = await self._transaction(work, "delete_ticket")
        logger.info(
            "Ticket deleted",
            extra={
                "ticket_id": ticket_id,
                "status": ticket.status.value,
                "assigned_to": ticket.assigned_to,
                "actor": actor.user_id if actor else None,
            }
        )
