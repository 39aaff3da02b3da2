"""
Ticket Domain Entities
======================

Pure Python domain entities for the ticket lifecycle.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns. Load counters
are not touched here; the assignment engine owns them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from helpdesk.config import (
    Category, Priority, TicketStatus,
    ACTIVE_STATUSES, TERMINAL_STATUSES,
)
from helpdesk.core.exceptions import InvalidTransitionException, ValidationException
from helpdesk.tickets.domain.value_objects import SLAPolicy, SLASnapshot


@dataclass
class Comment:
    """Entry in a ticket's comment log."""
    author_id: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class StatusTransition:
    """Outcome of a status change, consumed by services and notifiers."""
    old_status: TicketStatus
    new_status: TicketStatus

    @property
    def changed(self) -> bool:
        return self.old_status != self.new_status

    @property
    def entered_terminal(self) -> bool:
        return self.old_status in ACTIVE_STATUSES and self.new_status in TERMINAL_STATUSES


@dataclass
class Ticket:
    """
    Ticket entity representing a support ticket.

    Owns its status, timestamps, comment log and SLA snapshot. Users and
    agents are referenced by id only.
    """

    # Core attributes
    ticket_id: str
    title: str
    description: str
    priority: Priority
    category: Category
    created_by: str
    sla: SLASnapshot

    # Timestamps
    created_at: datetime
    updated_at: datetime

    status: TicketStatus = TicketStatus.OPEN

    # Assignment
    assigned_to: Optional[str] = None
    assigned_at: Optional[datetime] = None

    resolved_at: Optional[datetime] = None
    comments: List[Comment] = field(default_factory=list)

    # Optimistic concurrency token, bumped by storage on every write
    version: int = 0

    def __post_init__(self):
        """Validate ticket on initialization."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")

        if self.resolved_at and self.resolved_at < self.created_at:
            raise ValueError("resolved_at cannot be before created_at")

        if self.assigned_to and self.assigned_at is None:
            raise ValueError("assigned_to requires assigned_at")

    @classmethod
    def open(
        cls,
        ticket_id: str,
        title: str,
        description: str,
        priority: Priority,
        category: Category,
        created_by: str,
        now: datetime,
    ) -> "Ticket":
        """Create a new Open ticket with its SLA stamped from ``now``."""
        return cls(
            ticket_id=ticket_id,
            title=title,
            description=description,
            priority=priority,
            category=category,
            created_by=created_by,
            sla=SLAPolicy.compute(priority, now),
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        """Check if ticket has been resolved or closed."""
        return self.status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        """Check if ticket still counts toward an agent's load."""
        return self.status in ACTIVE_STATUSES

    @property
    def holds_agent_load(self) -> bool:
        return self.assigned_to is not None and self.is_active

    def is_overdue(self, now: datetime) -> bool:
        return self.is_active and self.sla.is_overdue(now)

    def change_priority(self, priority: Priority, now: datetime) -> bool:
        """
        Change priority and restamp the SLA from creation time.

        Returns:
            True if the priority actually changed
        """
        if priority == self.priority:
            return False
        self.priority = priority
        self.sla = SLAPolicy.compute(priority, self.created_at)
        self.updated_at = now
        return True

    def transition_to(self, new_status: TicketStatus, now: datetime) -> StatusTransition:
        """
        Move the ticket to ``new_status``.

        Entering Resolved/Closed from an active status stamps resolved_at.
        Moving between the two terminal statuses keeps the original
        resolved_at. Leaving a terminal status (reopening) is not supported.
        """
        transition = StatusTransition(old_status=self.status, new_status=new_status)
        if not transition.changed:
            return transition

        if self.is_terminal and new_status in ACTIVE_STATUSES:
            raise InvalidTransitionException(
                self.ticket_id, self.status.value, new_status.value
            )

        self.status = new_status
        if transition.entered_terminal:
            self.resolved_at = now
        self.updated_at = now
        return transition

    def assign_to(self, agent_id: str, now: datetime, start_progress: bool = False) -> None:
        """Point the ticket at an agent; auto-assignment also starts work."""
        self.assigned_to = agent_id
        self.assigned_at = now
        if start_progress and self.status == TicketStatus.OPEN:
            self.status = TicketStatus.IN_PROGRESS
        self.updated_at = now

    def add_comment(self, author_id: str, text: str, now: datetime) -> Comment:
        """Append to the comment log; order is never changed."""
        if not text or not text.strip():
            raise ValidationException(
                "Comment text is required",
                {"ticket_id": self.ticket_id, "field": "text"}
            )
        comment = Comment(author_id=author_id, text=text, created_at=now)
        self.comments.append(comment)
        self.updated_at = now
        return comment
