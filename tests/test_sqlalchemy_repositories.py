"""
Tests for the SQLAlchemy storage backend.

Runs against a SQLite file through aiosqlite so separate units of work
use separate connections, as they would against PostgreSQL.
"""

from datetime import timedelta, timezone

import pytest
import pytest_asyncio

from helpdesk.config import Category, TicketStatus, UserRole
from helpdesk.core import Actor, ConflictException, ValidationException
from helpdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_maker,
    init_database,
)
from helpdesk.infrastructure.database.unit_of_work import SQLAlchemyUnitOfWorkFactory
from helpdesk.main import build_container
from tests.factories import RecordingNotifier, ticket_data


@pytest_asyncio.fixture
async def sql_uow_factory(tmp_path):
    init_database(f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}")
    await create_tables()
    yield SQLAlchemyUnitOfWorkFactory(get_session_maker())
    await close_database()


@pytest_asyncio.fixture
async def sql_container(sql_uow_factory, clock, test_settings):
    container = build_container(
        sql_uow_factory, clock=clock, notifier=RecordingNotifier(), config=test_settings
    )
    await container.agents.register_user({
        "id": "agent-it-1", "name": "John Agent", "email": "agent1@company.com",
        "role": "agent", "department": "IT",
    })
    await container.agents.register_user({
        "id": "user-1", "name": "Regular User", "email": "user@company.com",
    })
    yield container
    await container.dispatcher.drain()


class TestSQLAlchemyLifecycle:

    @pytest.mark.asyncio
    async def test_create_resolve_round_trip(self, sql_container, requester, clock):
        ticket = await sql_container.tickets.create_ticket(ticket_data(priority="High"), requester)
        agent = await sql_container.agents.get_agent("agent-it-1")

        assert ticket.assigned_to == "agent-it-1"
        assert agent.assigned_tickets == 1

        clock.advance(hours=3)
        await sql_container.tickets.set_status(ticket.ticket_id, "Resolved")

        stored = await sql_container.tickets.get_ticket(ticket.ticket_id)
        agent = await sql_container.agents.get_agent("agent-it-1")
        assert stored.status == TicketStatus.RESOLVED
        assert stored.resolved_at == clock.now()
        assert stored.sla.due_date == ticket.created_at + timedelta(hours=8)
        assert agent.assigned_tickets == 0

    @pytest.mark.asyncio
    async def test_identifiers_are_sequential(self, sql_container, requester):
        ids = [
            (await sql_container.tickets.create_ticket(ticket_data(), requester)).ticket_id
            for _ in range(3)
        ]

        assert ids == ["TKT-00001", "TKT-00002", "TKT-00003"]

    @pytest.mark.asyncio
    async def test_timestamps_come_back_in_utc(self, sql_container, requester):
        ticket = await sql_container.tickets.create_ticket(ticket_data(), requester)

        stored = await sql_container.tickets.get_ticket(ticket.ticket_id)

        assert stored.created_at.tzinfo is not None
        assert stored.created_at.utcoffset() == timezone.utc.utcoffset(None)
        assert stored.assigned_at == ticket.assigned_at

    @pytest.mark.asyncio
    async def test_comments_keep_their_order(self, sql_container, requester, clock):
        ticket = await sql_container.tickets.create_ticket(ticket_data(), requester)
        agent = Actor(user_id="agent-it-1", role=UserRole.AGENT)

        for author, text in [(requester, "first"), (agent, "second"), (requester, "third")]:
            clock.advance(minutes=1)
            await sql_container.tickets.add_comment(ticket.ticket_id, text, author)

        stored = await sql_container.tickets.get_ticket(ticket.ticket_id)
        assert [c.text for c in stored.comments] == ["first", "second", "third"]
        assert stored.comments[1].author_id == "agent-it-1"

    @pytest.mark.asyncio
    async def test_delete_releases_load(self, sql_container, requester, admin):
        ticket = await sql_container.tickets.create_ticket(ticket_data(), requester)

        await sql_container.tickets.delete_ticket(ticket.ticket_id, admin)

        agent = await sql_container.agents.get_agent("agent-it-1")
        assert agent.assigned_tickets == 0
        assert await sql_container.tickets.list_tickets(admin) == []

    @pytest.mark.asyncio
    async def test_list_filters_and_agent_queries(self, sql_container, requester, admin):
        await sql_container.tickets.create_ticket(ticket_data(Category.IT), requester)
        hr = await sql_container.tickets.create_ticket(ticket_data(Category.HR), requester)

        open_tickets = await sql_container.tickets.list_tickets(admin, status="Open")
        it_agents = await sql_container.agents.list_agents(department="IT", available_only=True)

        assert [t.ticket_id for t in open_tickets] == [hr.ticket_id]
        assert [a.id for a in it_agents] == ["agent-it-1"]

    @pytest.mark.asyncio
    async def test_duplicate_user(self, sql_container):
        with pytest.raises(ValidationException):
            await sql_container.agents.register_user({
                "id": "agent-it-1", "name": "Again", "email": "other@company.com",
            })
        with pytest.raises(ConflictException):
            await sql_container.agents.register_user({
                "id": "agent-it-9", "name": "Copy", "email": "agent1@company.com",
            })


class TestSQLAlchemyConcurrencyGuards:

    @pytest.mark.asyncio
    async def test_stale_ticket_write_is_a_conflict(self, sql_container, sql_uow_factory, requester, clock):
        ticket = await sql_container.tickets.create_ticket(ticket_data(), requester)

        async with sql_uow_factory() as first:
            stale = await first.tickets.get(ticket.ticket_id)

            async with sql_uow_factory() as second:
                fresh = await second.tickets.get(ticket.ticket_id)
                fresh.title = "Updated elsewhere"
                await second.tickets.save(fresh)
                await second.commit()

            stale.title = "Lost update"
            with pytest.raises(ConflictException):
                await first.tickets.save(stale)

        stored = await sql_container.tickets.get_ticket(ticket.ticket_id)
        assert stored.title == "Updated elsewhere"

    @pytest.mark.asyncio
    async def test_load_adjustment_checks_expected_value(self, sql_container, sql_uow_factory):
        async with sql_uow_factory() as uow:
            assert await uow.users.adjust_load("agent-it-1", 0, 1) == 1
            with pytest.raises(ConflictException):
                await uow.users.adjust_load("agent-it-1", 0, 1)

    @pytest.mark.asyncio
    async def test_uncommitted_work_is_discarded(self, sql_container, sql_uow_factory):
        async with sql_uow_factory() as uow:
            await uow.users.adjust_load("agent-it-1", 0, 1)

        agent = await sql_container.agents.get_agent("agent-it-1")
        assert agent.assigned_tickets == 0
