"""
Agent Domain Entities
=====================

Users as seen by the helpdesk core. Agents are users with the agent role
and carry the availability flag and load counter used for routing.
"""

from dataclasses import dataclass
from typing import Optional

from helpdesk.config import Category, UserRole


@dataclass
class User:
    """
    User entity supplied by the identity provider.

    ``assigned_tickets`` is the load counter: the number of Open or
    In Progress tickets currently pointing at this agent.
    """

    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
    department: Optional[Category] = None
    is_available: bool = True
    assigned_tickets: int = 0

    def __post_init__(self):
        if self.assigned_tickets < 0:
            raise ValueError("assigned_tickets cannot be negative")

    @property
    def is_agent(self) -> bool:
        return self.role == UserRole.AGENT

    def can_take(self, category: Category) -> bool:
        """Eligible for auto-assignment of a ticket in ``category``."""
        return self.is_agent and self.is_available and self.department == category

    @property
    def routing_key(self) -> tuple:
        """Least loaded first, agent id breaks ties."""
        return (self.assigned_tickets, self.id)
