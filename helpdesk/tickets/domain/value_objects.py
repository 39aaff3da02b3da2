"""
Ticket Value Objects
====================

Immutable value objects for the ticket domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Union

from helpdesk.config import Priority


@dataclass(frozen=True)
class SLASnapshot:
    """Resolution deadline captured on the ticket."""
    hours: int
    due_date: datetime

    def is_met_by(self, resolved_at: datetime) -> bool:
        """Resolution strictly before the deadline counts as compliant."""
        return resolved_at < self.due_date

    def is_overdue(self, now: datetime) -> bool:
        return self.due_date < now


class SLAPolicy:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all SLA calculation logic in one place.
    The hours table is fixed by priority.
    """

    HOURS_BY_PRIORITY: Dict[Priority, int] = {
        Priority.CRITICAL: 4,
        Priority.HIGH: 8,
        Priority.MEDIUM: 24,
        Priority.LOW: 48,
    }

    @classmethod
    def hours_for(cls, priority: Union[Priority, str]) -> int:
        """
        Required resolution hours for a priority.

        Priorities are validated at the boundary; anything else falls back
        to the Medium target.
        """
        try:
            return cls.HOURS_BY_PRIORITY[Priority(priority)]
        except ValueError:
            return cls.HOURS_BY_PRIORITY[Priority.MEDIUM]

    @classmethod
    def compute(cls, priority: Union[Priority, str], reference: datetime) -> SLASnapshot:
        """
        Calculate the SLA snapshot for a ticket.

        Args:
            priority: Ticket priority
            reference: Instant the clock starts from (ticket creation)

        Returns:
            SLASnapshot with hours and due date
        """
        hours = cls.hours_for(priority)
        return SLASnapshot(hours=hours, due_date=reference + timedelta(hours=hours))


def compute_sla(priority: Union[Priority, str], now: datetime) -> SLASnapshot:
    """Shorthand for SLAPolicy.compute."""
    return SLAPolicy.compute(priority, now)


@dataclass(frozen=True)
class TicketIdentifier:
    """Sequential, human-readable ticket identifier such as TKT-00042."""
    prefix: str
    number: int
    width: int = 5

    def __str__(self) -> str:
        return f"{self.prefix}-{self.number:0{self.width}d}"

    @classmethod
    def format(cls, number: int, prefix: str = "TKT", width: int = 5) -> str:
        return str(cls(prefix=prefix, number=number, width=width))
