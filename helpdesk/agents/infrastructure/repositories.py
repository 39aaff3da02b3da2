"""
Agent Infrastructure Repositories
=================================

SQLAlchemy implementation of the user repository.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.agents.domain import User
from helpdesk.agents.infrastructure.models import UserModel
from helpdesk.config import Category, UserRole
from helpdesk.core import ConflictException, IUserRepository, ResourceNotFoundException


def _to_domain(model: UserModel) -> User:
    return User(
        id=model.id,
        name=model.name,
        email=model.email,
        role=UserRole(model.role),
        department=Category(model.department) if model.department else None,
        is_available=model.is_available,
        assigned_tickets=model.assigned_tickets,
    )


class SQLAlchemyUserRepository(IUserRepository):
    """
    SQLAlchemy implementation of user repository.

    Profile writes never touch ``assigned_tickets``; the counter only moves
    through adjust_load().
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        stmt = (
            select(UserModel)
            .where(UserModel.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain(model) if model else None

    async def add(self, user: User) -> User:
        """Create new user."""
        model = UserModel(
            id=user.id,
            name=user.name,
            email=user.email,
            role=UserRole(user.role).value,
            department=Category(user.department).value if user.department else None,
            is_available=user.is_available,
            assigned_tickets=user.assigned_tickets,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ConflictException("User", user.id, {"reason": "duplicate id or email"}) from e
        return user

    async def save(self, user: User) -> User:
        """Update profile and availability."""
        result = await self._session.execute(
            update(UserModel)
            .where(UserModel.id == user.id)
            .values(
                name=user.name,
                email=user.email,
                role=UserRole(user.role).value,
                department=Category(user.department).value if user.department else None,
                is_available=user.is_available,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ResourceNotFoundException("User", user.id)
        return user

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        """List users with filters, ordered by id."""
        filters = filters or {}
        stmt = select(UserModel).execution_options(populate_existing=True)

        conditions = []
        for key, expected in filters.items():
            column = getattr(UserModel, key)
            if isinstance(expected, (list, tuple, set, frozenset)):
                conditions.append(column.in_([getattr(v, "value", v) for v in expected]))
            else:
                conditions.append(column == getattr(expected, "value", expected))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(UserModel.id)

        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]

    async def adjust_load(self, agent_id: str, expected: int, delta: int) -> int:
        """Conditional UPDATE of the load counter."""
        result = await self._session.execute(
            update(UserModel)
            .where(
                UserModel.id == agent_id,
                UserModel.assigned_tickets == expected,
            )
            .values(assigned_tickets=expected + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictException("Agent", agent_id, {"expected": expected})
        return expected + delta
