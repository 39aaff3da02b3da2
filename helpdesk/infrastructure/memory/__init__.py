"""
In-Memory Storage
=================

Process-local store for tickets and users, used as the default backend
and in tests.

Every unit of work reads copies of the stored entities, stages its
writes, and applies them at commit under the store lock after checking:
- ticket versions still match what the unit of work read
- each agent load adjustment still starts from the stored counter

A failed check raises ConflictException and nothing is applied. Ticket
numbers taken by a unit of work that never commits are handed back and
reused, so committed identifiers stay dense.
"""

import asyncio
import copy
import heapq
from typing import Any, Dict, List, Optional, Tuple

from helpdesk.agents.domain import User
from helpdesk.core.exceptions import ConflictException, ResourceNotFoundException
from helpdesk.core.interfaces import ITicketRepository, IUnitOfWork, IUserRepository
from helpdesk.tickets.domain import Ticket


def _matches(entity: Any, filters: Dict[str, Any]) -> bool:
    for key, expected in filters.items():
        value = getattr(entity, key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


class InMemoryStore:
    """Committed state shared by all units of work."""

    def __init__(self):
        self.tickets: Dict[str, Ticket] = {}
        self.users: Dict[str, User] = {}
        self.ticket_sequence = 0
        self.released_numbers: List[int] = []
        self.lock = asyncio.Lock()

    def reserve_ticket_number(self) -> int:
        if self.released_numbers:
            return heapq.heappop(self.released_numbers)
        self.ticket_sequence += 1
        return self.ticket_sequence

    def release_ticket_number(self, number: int) -> None:
        """Return a number whose ticket was never committed."""
        heapq.heappush(self.released_numbers, number)
        while self.ticket_sequence in self.released_numbers:
            self.released_numbers.remove(self.ticket_sequence)
            self.ticket_sequence -= 1
        heapq.heapify(self.released_numbers)


class InMemoryTicketRepository(ITicketRepository):
    """Ticket repository staging writes inside an InMemoryUnitOfWork."""

    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow
        self._store = uow.store

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        uow = self._uow
        if ticket_id in uow.deleted_tickets:
            return None
        if ticket_id in uow.loaded_tickets:
            return uow.loaded_tickets[ticket_id]

        stored = self._store.tickets.get(ticket_id)
        if stored is None:
            return None
        ticket = copy.deepcopy(stored)
        uow.loaded_tickets[ticket_id] = ticket
        uow.ticket_versions[ticket_id] = stored.version
        return ticket

    async def add(self, ticket: Ticket) -> Ticket:
        self._uow.loaded_tickets[ticket.ticket_id] = ticket
        self._uow.new_tickets.add(ticket.ticket_id)
        return ticket

    async def save(self, ticket: Ticket) -> Ticket:
        if ticket.ticket_id not in self._uow.loaded_tickets:
            raise ResourceNotFoundException("Ticket", ticket.ticket_id)
        self._uow.loaded_tickets[ticket.ticket_id] = ticket
        self._uow.dirty_tickets.add(ticket.ticket_id)
        return ticket

    async def delete(self, ticket_id: str) -> None:
        if await self.get(ticket_id) is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        self._uow.deleted_tickets.add(ticket_id)

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Ticket]:
        filters = filters or {}
        tickets = []
        for ticket_id in set(self._store.tickets) | set(self._uow.loaded_tickets):
            ticket = await self.get(ticket_id)
            if ticket is not None and _matches(ticket, filters):
                tickets.append(ticket)
        tickets.sort(key=lambda t: (t.created_at, t.ticket_id), reverse=True)
        return tickets

    async def next_ticket_number(self) -> int:
        number = self._store.reserve_ticket_number()
        self._uow.reserved_numbers.append(number)
        return number


class InMemoryUserRepository(IUserRepository):
    """User repository staging writes inside an InMemoryUnitOfWork."""

    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow
        self._store = uow.store

    async def get(self, user_id: str) -> Optional[User]:
        if user_id in self._uow.loaded_users:
            return self._uow.loaded_users[user_id]
        stored = self._store.users.get(user_id)
        if stored is None:
            return None
        user = copy.deepcopy(stored)
        self._uow.loaded_users[user_id] = user
        return user

    async def add(self, user: User) -> User:
        self._uow.loaded_users[user.id] = user
        self._uow.new_users.add(user.id)
        return user

    async def save(self, user: User) -> User:
        self._uow.loaded_users[user.id] = user
        self._uow.dirty_users.add(user.id)
        return user

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        filters = filters or {}
        users = []
        for user_id in sorted(set(self._store.users) | set(self._uow.loaded_users)):
            user = await self.get(user_id)
            if user is not None and _matches(user, filters):
                users.append(user)
        return users

    async def adjust_load(self, agent_id: str, expected: int, delta: int) -> int:
        user = await self.get(agent_id)
        if user is None:
            raise ResourceNotFoundException("Agent", agent_id)
        if user.assigned_tickets != expected:
            raise ConflictException("Agent", agent_id, {"expected": expected, "actual": user.assigned_tickets})
        user.assigned_tickets = expected + delta
        self._uow.load_adjustments.append((agent_id, expected, delta))
        return user.assigned_tickets


class InMemoryUnitOfWork(IUnitOfWork):
    """Unit of work over an InMemoryStore."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self._reset()
        self.tickets = InMemoryTicketRepository(self)
        self.users = InMemoryUserRepository(self)

    def _reset(self) -> None:
        self.loaded_tickets: Dict[str, Ticket] = {}
        self.ticket_versions: Dict[str, int] = {}
        self.new_tickets: set = set()
        self.dirty_tickets: set = set()
        self.deleted_tickets: set = set()
        self.loaded_users: Dict[str, User] = {}
        self.new_users: set = set()
        self.dirty_users: set = set()
        self.load_adjustments: List[Tuple[str, int, int]] = []
        self.reserved_numbers: List[int] = []

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self._reset()
        return self

    async def commit(self) -> None:
        async with self.store.lock:
            self._check_conflicts()
            self._apply()
        self._reset()

    async def rollback(self) -> None:
        for number in self.reserved_numbers:
            self.store.release_ticket_number(number)
        self._reset()

    def _check_conflicts(self) -> None:
        store = self.store

        for ticket_id in self.new_tickets:
            if ticket_id in store.tickets:
                raise ConflictException("Ticket", ticket_id, {"reason": "duplicate identifier"})

        for ticket_id in (self.dirty_tickets | self.deleted_tickets) - self.new_tickets:
            current = store.tickets.get(ticket_id)
            if current is None or current.version != self.ticket_versions.get(ticket_id):
                raise ConflictException("Ticket", ticket_id)

        for user_id in self.new_users:
            if user_id in store.users:
                raise ConflictException("User", user_id, {"reason": "duplicate identifier"})

        running: Dict[str, int] = {}
        for agent_id, expected, delta in self.load_adjustments:
            if agent_id in self.new_users:
                continue
            current = running.get(agent_id, store.users[agent_id].assigned_tickets)
            if current != expected:
                raise ConflictException("Agent", agent_id, {"expected": expected, "actual": current})
            running[agent_id] = current + delta

    def _apply(self) -> None:
        store = self.store

        for ticket_id in self.deleted_tickets:
            store.tickets.pop(ticket_id, None)

        for ticket_id in (self.new_tickets | self.dirty_tickets) - self.deleted_tickets:
            ticket = self.loaded_tickets[ticket_id]
            ticket.version += 1
            store.tickets[ticket_id] = copy.deepcopy(ticket)

        for user_id in self.new_users:
            store.users[user_id] = copy.deepcopy(self.loaded_users[user_id])

        for user_id in self.dirty_users - self.new_users:
            user = self.loaded_users[user_id]
            stored = store.users[user_id]
            # Profile fields only; the counter moves through load_adjustments
            stored.name = user.name
            stored.email = user.email
            stored.role = user.role
            stored.department = user.department
            stored.is_available = user.is_available

        for agent_id, _expected, delta in self.load_adjustments:
            if agent_id not in self.new_users:
                store.users[agent_id].assigned_tickets += delta


class InMemoryUnitOfWorkFactory:
    """Callable producing units of work bound to one store."""

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store or InMemoryStore()

    def __call__(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self.store)
