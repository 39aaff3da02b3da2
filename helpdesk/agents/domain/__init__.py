"""
Agent Domain Layer
==================

Contains the User entity; agents are users with the agent role.
"""

from helpdesk.agents.domain.entities import User

__all__ = ["User"]
