"""
Agent Application Layer
=======================

Contains:
- Services: AgentDirectory
- DTOs: user registration and availability updates
"""

from helpdesk.agents.application.dto import AvailabilityUpdateDTO, UserCreateDTO
from helpdesk.agents.application.services import AgentDirectory

__all__ = [
    "AvailabilityUpdateDTO",
    "UserCreateDTO",
    "AgentDirectory",
]
