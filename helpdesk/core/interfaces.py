"""
Core Interfaces
================

Abstractions the lifecycle core depends on. Concrete storage and
delivery live in the infrastructure packages of each module.

Following SOLID principles:
- Dependency Inversion: services depend on these interfaces only
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from helpdesk.config import NotificationEvent, UserRole

if TYPE_CHECKING:
    from helpdesk.agents.domain import User
    from helpdesk.tickets.domain import Ticket


@dataclass(frozen=True)
class Actor:
    """Acting identity as supplied (and vouched for) by the caller."""
    user_id: str
    role: UserRole


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by its human-readable identifier."""

    @abstractmethod
    async def add(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket."""

    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        """Persist changes to an existing ticket."""

    @abstractmethod
    async def delete(self, ticket_id: str) -> None:
        """Remove a ticket."""

    @abstractmethod
    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Ticket]:
        """List tickets matching equality filters, newest first."""

    @abstractmethod
    async def next_ticket_number(self) -> int:
        """Reserve the next sequential ticket number."""


class IUserRepository(ABC):
    """Interface for user and agent data access."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""

    @abstractmethod
    async def add(self, user: User) -> User:
        """Persist a new user."""

    @abstractmethod
    async def save(self, user: User) -> User:
        """Persist profile/availability changes (never the load counter)."""

    @abstractmethod
    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        """List users matching equality filters."""

    @abstractmethod
    async def adjust_load(self, agent_id: str, expected: int, delta: int) -> int:
        """
        Compare-and-increment an agent's load counter.

        Writes ``expected + delta`` only if the stored counter still equals
        ``expected``; raises ConflictException otherwise.

        Returns:
            The new counter value
        """


class IUnitOfWork(ABC):
    """
    Transaction boundary spanning tickets and users.

    Usage:
        async with uow_factory() as uow:
            ticket = await uow.tickets.get("TKT-00001")
            ...
            await uow.commit()

    Leaving the block without commit discards every staged change.
    """

    tickets: ITicketRepository
    users: IUserRepository

    async def __aenter__(self) -> IUnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Apply staged changes atomically."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard staged changes (no-op after commit)."""


class INotifier(ABC):
    """Interface for lifecycle event delivery."""

    @abstractmethod
    async def notify(self, event_kind: NotificationEvent, payload: Dict[str, Any]) -> None:
        """Deliver one event; may raise, callers isolate failures."""
