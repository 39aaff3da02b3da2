"""
Agent Infrastructure Layer
==========================

- Models: SQLAlchemy ORM model for users
- Repositories: SQLAlchemy user repository with compare-and-increment load updates
"""

from helpdesk.agents.infrastructure.models import UserModel
from helpdesk.agents.infrastructure.repositories import SQLAlchemyUserRepository

__all__ = ["UserModel", "SQLAlchemyUserRepository"]
