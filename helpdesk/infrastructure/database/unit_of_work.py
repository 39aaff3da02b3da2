"""
SQLAlchemy Unit of Work
=======================

One AsyncSession transaction spanning the ticket and user repositories.
Ticket and load-counter writes commit together or not at all.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from helpdesk.agents.infrastructure.repositories import SQLAlchemyUserRepository
from helpdesk.core import ConflictException, IUnitOfWork
from helpdesk.tickets.infrastructure.repositories import SQLAlchemyTicketRepository


class SQLAlchemyUnitOfWork(IUnitOfWork):
    """Unit of work backed by a single AsyncSession."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_maker()
        self.tickets = SQLAlchemyTicketRepository(self._session)
        self.users = SQLAlchemyUserRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except StaleDataError as e:
            raise ConflictException("Ticket", details={"error": str(e)}) from e
        except IntegrityError as e:
            raise ConflictException("Ticket", details={"error": str(e.orig)}) from e

    async def rollback(self) -> None:
        if self._session is not None:
            await self._session.rollback()


class SQLAlchemyUnitOfWorkFactory:
    """Callable producing SQLAlchemy units of work."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    def __call__(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(self._session_maker)
