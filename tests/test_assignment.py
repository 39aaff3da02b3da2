"""
Tests for agent selection, reassignment and the load counter.
"""

import pytest

from helpdesk.agents.domain import User
from helpdesk.assignment.domain import LeastLoadedPolicy
from helpdesk.config import Category, NotificationEvent, TicketStatus, UserRole
from helpdesk.core import ResourceNotFoundException, ValidationException
from tests.factories import agent_load, assert_load_invariant, put_agent, ticket_data


class TestLeastLoadedPolicy:

    def test_picks_lowest_load_then_lowest_id(self):
        agents = [
            User(id="b", name="B", email="b@x.io", role=UserRole.AGENT, department=Category.IT, assigned_tickets=1),
            User(id="a", name="A", email="a@x.io", role=UserRole.AGENT, department=Category.IT, assigned_tickets=1),
            User(id="c", name="C", email="c@x.io", role=UserRole.AGENT, department=Category.IT, assigned_tickets=2),
        ]

        assert LeastLoadedPolicy.select(agents, Category.IT).id == "a"

    def test_skips_unavailable_and_other_departments(self):
        agents = [
            User(id="a", name="A", email="a@x.io", role=UserRole.AGENT, department=Category.IT, is_available=False),
            User(id="b", name="B", email="b@x.io", role=UserRole.AGENT, department=Category.HR),
            User(id="c", name="C", email="c@x.io", role=UserRole.USER, department=Category.IT),
        ]

        assert LeastLoadedPolicy.select(agents, Category.IT) is None


class TestAutoAssign:

    @pytest.mark.asyncio
    async def test_uneven_backlog_is_balanced(self, container, store, requester):
        put_agent(store, "agent-a", Category.IT, load=2)
        put_agent(store, "agent-b", Category.IT, load=0)

        first = await container.tickets.create_ticket(ticket_data(Category.IT, "Critical"), requester)
        assert first.assigned_to == "agent-b"
        assert agent_load(store, "agent-b") == 1

        second = await container.tickets.create_ticket(ticket_data(Category.IT, "Critical"), requester)
        assert second.assigned_to == "agent-b"
        assert agent_load(store, "agent-b") == 2

        # Tied at 2, lowest id wins
        third = await container.tickets.create_ticket(ticket_data(Category.IT, "Critical"), requester)
        assert third.assigned_to == "agent-a"

        loads = [agent_load(store, "agent-a"), agent_load(store, "agent-b")]
        assert abs(loads[0] - loads[1]) <= 1

    @pytest.mark.asyncio
    async def test_never_selects_unavailable_or_foreign_agent(self, container, store, requester):
        put_agent(store, "agent-hr", Category.HR, load=0)
        put_agent(store, "agent-it-away", Category.IT, load=0, is_available=False)
        put_agent(store, "agent-it-busy", Category.IT, load=7)

        ticket = await container.tickets.create_ticket(ticket_data(Category.IT), requester)

        assert ticket.assigned_to == "agent-it-busy"
        assert agent_load(store, "agent-it-away") == 0
        assert agent_load(store, "agent-hr") == 0

    @pytest.mark.asyncio
    async def test_retry_assignment_once_an_agent_is_available(self, container, store, requester, notifier):
        put_agent(store, "agent-hr", Category.HR, is_available=False)
        ticket = await container.tickets.create_ticket(ticket_data(Category.HR), requester)
        assert ticket.assigned_to is None

        await container.agents.set_availability("agent-hr", True)
        agent = await container.tickets.auto_assign_ticket(ticket.ticket_id)
        await container.dispatcher.drain()

        stored = await container.tickets.get_ticket(ticket.ticket_id)
        assert agent.id == "agent-hr"
        assert stored.assigned_to == "agent-hr"
        assert stored.status == TicketStatus.IN_PROGRESS
        assert agent_load(store, "agent-hr") == 1
        assert NotificationEvent.TICKET_ASSIGNED in notifier.kinds()

    @pytest.mark.asyncio
    async def test_retry_without_candidates_returns_none(self, container, store, requester):
        ticket = await container.tickets.create_ticket(ticket_data(Category.GENERAL), requester)

        assert await container.tickets.auto_assign_ticket(ticket.ticket_id) is None

        stored = await container.tickets.get_ticket(ticket.ticket_id)
        assert stored.status == TicketStatus.OPEN

    @pytest.mark.asyncio
    async def test_auto_assign_moves_load_between_agents(self, container, store, requester):
        put_agent(store, "agent-a", Category.IT, load=0)
        ticket = await container.tickets.create_ticket(ticket_data(Category.IT), requester)
        put_agent(store, "agent-0", Category.IT, load=0)

        agent = await container.assignment.auto_assign(ticket.ticket_id)

        assert agent.id == "agent-0"
        assert agent_load(store, "agent-a") == 0
        assert agent_load(store, "agent-0") == 1
        assert_load_invariant(store)

    @pytest.mark.asyncio
    async def test_auto_assign_rejects_resolved_ticket(self, container, requester, it_agent):
        ticket = await container.tickets.create_ticket(ticket_data(), requester)
        await container.tickets.set_status(ticket.ticket_id, "Resolved")

        with pytest.raises(ValidationException):
            await container.assignment.auto_assign(ticket.ticket_id)


class TestReassign:

    @pytest.mark.asyncio
    async def test_moves_one_unit_of_load(self, container, store, requester):
        put_agent(store, "agent-a", Category.IT, load=2)
        ticket = await container.tickets.create_ticket(ticket_data(Category.IT), requester)
        assert ticket.assigned_to == "agent-a"
        assert agent_load(store, "agent-a") == 3
        put_agent(store, "agent-b", Category.HR, load=0)

        reassigned = await container.assignment.reassign(ticket.ticket_id, "agent-b")

        assert reassigned.assigned_to == "agent-b"
        assert agent_load(store, "agent-a") == 2
        assert agent_load(store, "agent-b") == 1

    @pytest.mark.asyncio
    async def test_keeps_status_and_refreshes_assigned_at(self, container, store, requester, it_agent, clock):
        ticket = await container.tickets.create_ticket(ticket_data(Category.HR), requester)
        clock.advance(hours=1)

        reassigned = await container.assignment.reassign(ticket.ticket_id, it_agent.id)

        assert reassigned.status == TicketStatus.OPEN
        assert reassigned.assigned_at == clock.now()
        assert agent_load(store, it_agent.id) == 1
        assert_load_invariant(store)

    @pytest.mark.asyncio
    async def test_same_agent_is_stable(self, container, store, requester, it_agent):
        ticket = await container.tickets.create_ticket(ticket_data(), requester)

        await container.assignment.reassign(ticket.ticket_id, it_agent.id)

        assert agent_load(store, it_agent.id) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("agent_id", ["user-1", "nobody"])
    async def test_invalid_agent(self, container, store, requester, it_agent, agent_id):
        store.users["user-1"] = User(id="user-1", name="U", email="u@x.io")
        ticket = await container.tickets.create_ticket(ticket_data(), requester)

        with pytest.raises(ValidationException, match="Invalid agent"):
            await container.assignment.reassign(ticket.ticket_id, agent_id)

        assert agent_load(store, it_agent.id) == 1

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, container, it_agent):
        with pytest.raises(ResourceNotFoundException):
            await container.assignment.reassign("TKT-00404", it_agent.id)

    @pytest.mark.asyncio
    async def test_emits_assigned_with_previous_agent(self, container, store, notifier, requester, it_agent):
        put_agent(store, "agent-it-2", Category.IT, load=5)
        ticket = await container.tickets.create_ticket(ticket_data(), requester)

        await container.assignment.reassign(ticket.ticket_id, "agent-it-2")
        await container.dispatcher.drain()

        last = notifier.of_kind(NotificationEvent.TICKET_ASSIGNED)[-1]
        assert last["agent"]["id"] == "agent-it-2"
        assert last["previous_agent_id"] == it_agent.id


class TestAgentDirectory:

    @pytest.mark.asyncio
    async def test_register_and_list_agents(self, container):
        await container.agents.register_user({
            "id": "agent-hr-1", "name": "Sarah Agent", "email": "agent2@company.com",
            "role": "agent", "department": "HR",
        })
        await container.agents.register_user({
            "id": "user-1", "name": "Regular User", "email": "user@company.com",
        })

        agents = await container.agents.list_agents()
        hr = await container.agents.list_agents(department="HR", available_only=True)

        assert [a.id for a in agents] == ["agent-hr-1"]
        assert [a.id for a in hr] == ["agent-hr-1"]
        assert agents[0].assigned_tickets == 0

    @pytest.mark.asyncio
    async def test_agent_requires_department(self, container):
        with pytest.raises(ValidationException):
            await container.agents.register_user({
                "id": "agent-x", "name": "X", "email": "x@company.com", "role": "agent",
            })

    @pytest.mark.asyncio
    async def test_duplicate_registration(self, container, it_agent):
        with pytest.raises(ValidationException):
            await container.agents.register_user({
                "id": it_agent.id, "name": "Again", "email": "again@company.com",
            })

    @pytest.mark.asyncio
    async def test_get_agent_rejects_plain_users(self, container, store):
        store.users["user-1"] = User(id="user-1", name="U", email="u@x.io")

        with pytest.raises(ValidationException):
            await container.agents.get_agent("user-1")
        with pytest.raises(ResourceNotFoundException):
            await container.agents.get_user("ghost")

    @pytest.mark.asyncio
    async def test_availability_does_not_touch_load(self, container, store):
        put_agent(store, "agent-a", Category.IT, load=4)

        agent = await container.agents.set_availability("agent-a", False)

        assert agent.is_available is False
        assert store.users["agent-a"].is_available is False
        assert agent_load(store, "agent-a") == 4
