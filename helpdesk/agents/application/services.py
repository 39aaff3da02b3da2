"""
Agent Directory
===============

Read/write view of users and agents: availability, department and the
current load counter. The Assignment Engine consumes the in-transaction
helpers; the counter itself is never written here.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from helpdesk.agents.application.dto import AvailabilityUpdateDTO, UserCreateDTO
from helpdesk.agents.domain import User
from helpdesk.config import Category, UserRole, settings
from helpdesk.core import IUnitOfWork, ResourceNotFoundException, ValidationException
from helpdesk.shared.dto import parse_dto
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.shared.infrastructure.transactions import (
    UnitOfWorkFactory,
    run_in_transaction,
    run_read_only,
)

logger = get_logger(__name__)


class AgentDirectory:
    """Service for user registration and agent availability."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        max_attempts: Optional[int] = None,
    ):
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts or settings.assignment_max_retries

    # ========== In-transaction helpers ==========

    @staticmethod
    async def eligible_agents(uow: IUnitOfWork, category: Category) -> List[User]:
        """
        Agents that may receive a ticket of ``category``.

        Available agents of the matching department, least loaded first,
        ties broken by agent id.
        """
        agents = await uow.users.list({
            "role": UserRole.AGENT,
            "is_available": True,
            "department": Category(category),
        })
        return sorted((a for a in agents if a.can_take(category)), key=lambda a: a.routing_key)

    @staticmethod
    async def require_agent(uow: IUnitOfWork, agent_id: str) -> User:
        """Load a user that must exist and hold the agent role."""
        user = await uow.users.get(agent_id)
        if user is None or not user.is_agent:
            raise ValidationException("Invalid agent", {"agent_id": agent_id})
        return user

    # ========== Public operations ==========

    async def register_user(self, data: Union[UserCreateDTO, Mapping[str, Any]]) -> User:
        """Add a user (or agent) to the directory."""
        dto = parse_dto(UserCreateDTO, data)

        async def work(uow: IUnitOfWork) -> User:
            if await uow.users.get(dto.id) is not None:
                raise ValidationException("User already exists", {"user_id": dto.id})
            return await uow.users.add(dto.to_domain())

        user = await run_in_transaction(
            self._uow_factory, work,
            operation="register_user", max_attempts=1
        )
        logger.info(
            "User registered",
            extra={"user_id": user.id, "role": user.role.value,
                   "department": user.department.value if user.department else None}
        )
        return user

    async def get_user(self, user_id: str) -> User:
        async def work(uow: IUnitOfWork) -> Optional[User]:
            return await uow.users.get(user_id)

        user = await run_read_only(self._uow_factory, work)
        if user is None:
            raise ResourceNotFoundException("User", user_id)
        return user

    async def get_agent(self, agent_id: str) -> User:
        user = await self.get_user(agent_id)
        if not user.is_agent:
            raise ValidationException("Invalid agent", {"agent_id": agent_id})
        return user

    async def list_agents(
        self,
        department: Optional[Union[Category, str]] = None,
        available_only: bool = False,
    ) -> List[User]:
        """List agents, optionally for one department or only available ones."""
        filters: Dict[str, Any] = {"role": UserRole.AGENT}
        if department is not None:
            try:
                filters["department"] = Category(department)
            except ValueError as e:
                raise ValidationException("Invalid department", {"department": department}) from e
        if available_only:
            filters["is_available"] = True

        async def work(uow: IUnitOfWork) -> List[User]:
            return await uow.users.list(filters)

        return await run_read_only(self._uow_factory, work)

    async def set_availability(self, agent_id: str, is_available: bool) -> User:
        """Toggle whether auto-assignment may pick this agent."""
        dto = parse_dto(AvailabilityUpdateDTO, {"is_available": is_available})

        async def work(uow: IUnitOfWork) -> User:
            agent = await uow.users.get(agent_id)
            if agent is None:
                raise ResourceNotFoundException("Agent", agent_id)
            if not agent.is_agent:
                raise ValidationException("Invalid agent", {"agent_id": agent_id})
            agent.is_available = dto.is_available
            return await uow.users.save(agent)

        agent = await run_in_transaction(
            self._uow_factory, work,
            operation="set_availability", max_attempts=self._max_attempts
        )
        logger.info(
            "Agent availability changed",
            extra={"agent_id": agent_id, "is_available": agent.is_available}
        )
        return agent
