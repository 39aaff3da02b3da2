"""
Assignment Engine
=================

Places tickets with agents and moves them between agents.

This is the only code that writes an agent's load counter. Every change
goes through a compare-and-increment against the value just read inside
the caller's unit of work, so the ticket mutation and the counter change
commit together or not at all. A lost race surfaces as ConflictException
and the transaction runner retries the whole unit on fresh state.
"""

from typing import Optional, Tuple

from helpdesk.agents.application.services import AgentDirectory
from helpdesk.agents.domain import User
from helpdesk.assignment.application.dto import ReassignDTO
from helpdesk.assignment.domain import LeastLoadedPolicy
from helpdesk.config import settings
from helpdesk.core import (
    Clock,
    ConflictException,
    IUnitOfWork,
    ResourceNotFoundException,
    SystemClock,
    ValidationException,
)
from helpdesk.notifications.application.services import NotificationDispatcher
from helpdesk.notifications.domain import LifecycleEvent
from helpdesk.shared.dto import parse_dto
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.shared.infrastructure.transactions import UnitOfWorkFactory, run_in_transaction
from helpdesk.tickets.domain import Ticket

logger = get_logger(__name__)


class AssignmentEngine:
    """
    Service for routing tickets to agents.

    Responsibilities:
    - Least-loaded selection within the ticket's department
    - Manual reassignment
    - Releasing an agent's load when a ticket leaves the active statuses
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        dispatcher: NotificationDispatcher,
        clock: Optional[Clock] = None,
        max_attempts: Optional[int] = None,
    ):
        self._uow_factory = uow_factory
        self._dispatcher = dispatcher
        self._clock = clock or SystemClock()
        self._max_attempts = max_attempts or settings.assignment_max_retries

    # ========== In-transaction operations ==========

    async def place(self, uow: IUnitOfWork, ticket: Ticket) -> Optional[User]:
        """
        Assign ``ticket`` to the least loaded eligible agent.

        Mutates the ticket (assignee, assigned_at, In Progress) and bumps
        the agent's counter inside ``uow``; persisting the ticket is left
        to the caller.

        Returns:
            The chosen agent, or None when nobody is eligible. The ticket
            is then left unassigned and Open.
        """
        candidates = await AgentDirectory.eligible_agents(uow, ticket.category)
        choice = LeastLoadedPolicy.select(candidates, ticket.category)
        if choice is None:
            logger.warning(
                "No available agent for ticket",
                extra={"ticket_id": ticket.ticket_id, "category": ticket.category.value}
            )
            return None

        agent = await self._adjust(uow, choice.id, +1)
        ticket.assign_to(agent.id, self._clock.now(), start_progress=True)

        logger.info(
            "Ticket auto-assigned",
            extra={
                "ticket_id": ticket.ticket_id,
                "agent_id": agent.id,
                "agent_load": agent.assigned_tickets,
            }
        )
        return agent

    async def release(self, uow: IUnitOfWork, ticket: Ticket) -> None:
        """
        Give back the load ``ticket`` holds on its assignee.

        Called once when the ticket enters Resolved/Closed or is deleted
        while still active.
        """
        if ticket.assigned_to is None:
            return
        await self._adjust(uow, ticket.assigned_to, -1)

    async def _adjust(self, uow: IUnitOfWork, agent_id: str, delta: int) -> Optional[User]:
        """Compare-and-increment on the counter value read in this unit of work."""
        agent = await uow.users.get(agent_id)
        if agent is None:
            if delta > 0:
                raise ConflictException("Agent", agent_id, {"reason": "agent disappeared"})
            logger.warning(
                "Load change skipped, agent not found",
                extra={"agent_id": agent_id, "delta": delta}
            )
            return None

        expected = agent.assigned_tickets
        if expected + delta < 0:
            logger.warning(
                "Load counter underflow prevented",
                extra={"agent_id": agent_id, "current": expected, "delta": delta}
            )
            return agent

        agent.assigned_tickets = await uow.users.adjust_load(agent_id, expected, delta)
        return agent

    # ========== Public operations ==========

    async def auto_assign(self, ticket_id: str) -> Optional[User]:
        """
        Route an existing ticket to the least loaded eligible agent.

        An active ticket that already has an assignee gives that load back
        first. Emits TicketAssigned when an agent was found.

        Raises:
            ResourceNotFoundException: unknown ticket
            ValidationException: ticket is Resolved or Closed
        """

        async def work(uow: IUnitOfWork) -> Tuple[Ticket, Optional[User], Optional[str]]:
            ticket = await uow.tickets.get(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            if ticket.is_terminal:
                raise ValidationException(
                    "Cannot assign a resolved or closed ticket",
                    {"ticket_id": ticket_id, "status": ticket.status.value}
                )

            previous = ticket.assigned_to
            if ticket.holds_agent_load:
                await self.release(uow, ticket)

            agent = await self.place(uow, ticket)
            if agent is None:
                if previous is not None:
                    # Nobody eligible: keep the ticket where it was
                    await self._adjust(uow, previous, +1)
                return ticket, None, previous

            await uow.tickets.save(ticket)
            return ticket, agent, previous

        ticket, agent, previous = await run_in_transaction(
            self._uow_factory, work,
            operation="auto_assign", max_attempts=self._max_attempts
        )
        if agent is not None:
            self._dispatcher.dispatch(
                LifecycleEvent.ticket_assigned(
                    ticket, agent, self._clock.now(), previous_agent_id=previous
                )
            )
        return agent

    async def reassign(self, ticket_id: str, new_agent_id: str) -> Ticket:
        """
        Move a ticket to another agent.

        The previous assignee's load drops by one, the new agent's rises by
        one and assigned_at is refreshed. Status is left unchanged.

        Raises:
            ResourceNotFoundException: unknown ticket
            ValidationException: unknown user, non-agent, or a Resolved/Closed ticket
        """
        dto = parse_dto(ReassignDTO, {"agent_id": new_agent_id})

        async def work(uow: IUnitOfWork) -> Tuple[Ticket, User, Optional[str]]:
            ticket = await uow.tickets.get(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            agent = await AgentDirectory.require_agent(uow, dto.agent_id)
            if ticket.is_terminal:
                raise ValidationException(
                    "Cannot reassign a resolved or closed ticket",
                    {"ticket_id": ticket_id, "status": ticket.status.value}
                )

            previous = ticket.assigned_to
            if previous != agent.id:
                if previous is not None:
                    await self._adjust(uow, previous, -1)
                agent = await self._adjust(uow, agent.id, +1)

            ticket.assign_to(agent.id, self._clock.now())
            await uow.tickets.save(ticket)
            return ticket, agent, previous

        ticket, agent, previous = await run_in_transaction(
            self._uow_factory, work,
            operation="reassign", max_attempts=self._max_attempts
        )

        logger.info(
            "Ticket reassigned",
            extra={"ticket_id": ticket_id, "from_agent": previous, "to_agent": agent.id}
        )
        self._dispatcher.dispatch(
            LifecycleEvent.ticket_assigned(
                ticket, agent, self._clock.now(), previous_agent_id=previous
            )
        )
        return ticket

