"""
Ticket Application DTOs
=======================

Data Transfer Objects for the ticket lifecycle.

These Pydantic models handle validation of caller input before any
state is touched, and shape tickets for callers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from helpdesk.config import Category, Priority, TicketStatus
from helpdesk.tickets.domain import Comment, Ticket


# ========== Request DTOs ==========

class TicketCreateDTO(BaseModel):
    """DTO for creating a ticket."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200, description="Short summary")
    description: str = Field(..., min_length=1, description="Problem description")
    priority: Priority = Field(default=Priority.MEDIUM, description="Ticket priority")
    category: Category = Field(..., description="Routing department")


class TicketUpdateDTO(BaseModel):
    """DTO for editing a ticket; omitted fields are left alone."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    priority: Optional[Priority] = None


class StatusUpdateDTO(BaseModel):
    """DTO for a status change."""
    status: TicketStatus


class CommentCreateDTO(BaseModel):
    """DTO for appending a comment."""
    text: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("comment text cannot be blank")
        return v


class TicketQueryDTO(BaseModel):
    """Optional list filters."""
    status: Optional[TicketStatus] = None
    priority: Optional[Priority] = None
    category: Optional[Category] = None


# ========== Response DTOs ==========

class CommentDTO(BaseModel):
    author_id: str
    text: str
    created_at: datetime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentDTO":
        return cls(author_id=comment.author_id, text=comment.text, created_at=comment.created_at)


class TicketEntityDTO(BaseModel):
    """Ticket as returned to callers."""
    ticket_id: str = Field(..., description="Human-readable identifier, e.g. TKT-00001")
    title: str
    description: str
    priority: Priority
    category: Category
    status: TicketStatus
    created_by: str
    assigned_to: Optional[str] = None
    sla_hours: int
    sla_due_date: datetime
    created_at: datetime
    updated_at: datetime
    assigned_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    comments: List[CommentDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketEntityDTO":
        """Convert domain entity to DTO."""
        return cls(
            ticket_id=ticket.ticket_id,
            title=ticket.title,
            description=ticket.description,
            priority=ticket.priority,
            category=ticket.category,
            status=ticket.status,
            created_by=ticket.created_by,
            assigned_to=ticket.assigned_to,
            sla_hours=ticket.sla.hours,
            sla_due_date=ticket.sla.due_date,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            assigned_at=ticket.assigned_at,
            resolved_at=ticket.resolved_at,
            comments=[CommentDTO.from_domain(c) for c in ticket.comments],
        )
