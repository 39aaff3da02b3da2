"""
Agent Application DTOs
======================

Pydantic models validating user and agent input at the boundary.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from helpdesk.agents.domain import User
from helpdesk.config import Category, UserRole


class UserCreateDTO(BaseModel):
    """DTO for registering a user or agent."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, max_length=64, description="Identity provider user id")
    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr = Field(..., description="Contact address")
    role: UserRole = Field(default=UserRole.USER)
    department: Optional[Category] = Field(default=None, description="Routing department for agents")
    is_available: bool = Field(default=True)

    @model_validator(mode="after")
    def validate_agent_department(self) -> "UserCreateDTO":
        """Agents are routed by department, so they need one."""
        if self.role == UserRole.AGENT and self.department is None:
            raise ValueError("agents require a department")
        return self

    def to_domain(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=str(self.email),
            role=self.role,
            department=self.department,
            is_available=self.is_available,
        )


class AvailabilityUpdateDTO(BaseModel):
    """DTO for toggling an agent's availability."""
    is_available: bool

