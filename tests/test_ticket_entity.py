"""
Tests for the Ticket entity and its status state machine.
"""

from datetime import datetime, timedelta, timezone

import pytest

from helpdesk.config import Category, Priority, TicketStatus
from helpdesk.core import InvalidTransitionException, ValidationException
from helpdesk.tickets.domain import Ticket

NOW = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def make_ticket(priority: Priority = Priority.HIGH) -> Ticket:
    return Ticket.open(
        ticket_id="TKT-00001",
        title="VPN drops",
        description="Disconnects every five minutes",
        priority=priority,
        category=Category.IT,
        created_by="user-1",
        now=NOW,
    )


class TestTicketOpen:

    def test_new_ticket_is_open_and_unassigned(self):
        ticket = make_ticket()

        assert ticket.status == TicketStatus.OPEN
        assert ticket.assigned_to is None
        assert ticket.resolved_at is None
        assert ticket.sla.hours == 8
        assert ticket.sla.due_date == NOW + timedelta(hours=8)

    def test_assignee_requires_assigned_at(self):
        with pytest.raises(ValueError):
            Ticket(
                ticket_id="TKT-00001",
                title="t",
                description="d",
                priority=Priority.LOW,
                category=Category.HR,
                created_by="user-1",
                sla=make_ticket().sla,
                created_at=NOW,
                updated_at=NOW,
                assigned_to="agent-1",
            )


class TestTransitions:

    def test_resolve_stamps_resolved_at(self):
        ticket = make_ticket()
        later = NOW + timedelta(hours=2)

        transition = ticket.transition_to(TicketStatus.RESOLVED, later)

        assert transition.changed
        assert transition.entered_terminal
        assert ticket.resolved_at == later
        assert ticket.updated_at == later

    def test_open_can_close_directly(self):
        ticket = make_ticket()

        transition = ticket.transition_to(TicketStatus.CLOSED, NOW + timedelta(hours=1))

        assert transition.entered_terminal
        assert ticket.is_terminal

    def test_same_status_is_a_no_op(self):
        ticket = make_ticket()
        ticket.transition_to(TicketStatus.RESOLVED, NOW + timedelta(hours=1))

        transition = ticket.transition_to(TicketStatus.RESOLVED, NOW + timedelta(hours=5))

        assert not transition.changed
        assert ticket.resolved_at == NOW + timedelta(hours=1)

    def test_resolved_to_closed_keeps_resolved_at(self):
        ticket = make_ticket()
        ticket.transition_to(TicketStatus.RESOLVED, NOW + timedelta(hours=1))

        transition = ticket.transition_to(TicketStatus.CLOSED, NOW + timedelta(hours=3))

        assert transition.changed
        assert not transition.entered_terminal
        assert ticket.resolved_at == NOW + timedelta(hours=1)

    @pytest.mark.parametrize("target", [TicketStatus.OPEN, TicketStatus.IN_PROGRESS])
    def test_reopening_is_rejected(self, target):
        ticket = make_ticket()
        ticket.transition_to(TicketStatus.CLOSED, NOW + timedelta(hours=1))

        with pytest.raises(InvalidTransitionException):
            ticket.transition_to(target, NOW + timedelta(hours=2))

        assert ticket.status == TicketStatus.CLOSED
        assert ticket.resolved_at is not None


class TestAssignmentAndPriority:

    def test_auto_assignment_starts_progress(self):
        ticket = make_ticket()

        ticket.assign_to("agent-1", NOW, start_progress=True)

        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.assigned_at == NOW
        assert ticket.holds_agent_load

    def test_manual_assignment_keeps_status(self):
        ticket = make_ticket()

        ticket.assign_to("agent-1", NOW)

        assert ticket.status == TicketStatus.OPEN

    def test_priority_change_restamps_from_creation(self):
        ticket = make_ticket(Priority.LOW)
        later = NOW + timedelta(hours=3)

        assert ticket.change_priority(Priority.CRITICAL, later)

        assert ticket.sla.hours == 4
        assert ticket.sla.due_date == NOW + timedelta(hours=4)
        assert ticket.updated_at == later

    def test_unchanged_priority_keeps_due_date(self):
        ticket = make_ticket(Priority.LOW)
        due = ticket.sla.due_date

        assert not ticket.change_priority(Priority.LOW, NOW + timedelta(hours=3))
        assert ticket.sla.due_date == due


class TestComments:

    def test_comments_keep_insertion_order_and_duplicates(self):
        ticket = make_ticket()

        ticket.add_comment("user-1", "same", NOW)
        ticket.add_comment("agent-1", "other", NOW + timedelta(minutes=1))
        ticket.add_comment("user-1", "same", NOW + timedelta(minutes=2))

        assert [c.text for c in ticket.comments] == ["same", "other", "same"]
        assert [c.author_id for c in ticket.comments] == ["user-1", "agent-1", "user-1"]

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_comment_is_rejected(self, text):
        ticket = make_ticket()

        with pytest.raises(ValidationException):
            ticket.add_comment("user-1", text, NOW)

        assert ticket.comments == []
