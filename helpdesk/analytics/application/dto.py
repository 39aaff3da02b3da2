"""
Analytics Application DTOs
==========================

Response models for analytics reports.
"""

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from helpdesk.analytics.domain import AgentPerformance, TrendPoint
from helpdesk.config import Category
from helpdesk.tickets.application.dto import TicketEntityDTO


class AgentPerformanceDTO(BaseModel):
    """Resolution record of one agent."""
    agent_id: str
    agent_name: str
    agent_email: str
    tickets_resolved: int = Field(..., ge=1)
    avg_resolution_time: float = Field(..., description="Mean hours from assignment to resolution")

    @classmethod
    def from_domain(cls, performance: AgentPerformance) -> "AgentPerformanceDTO":
        return cls(
            agent_id=performance.agent_id,
            agent_name=performance.agent_name,
            agent_email=performance.agent_email,
            tickets_resolved=performance.tickets_resolved,
            avg_resolution_time=performance.avg_resolution_hours,
        )


class TrendPointDTO(BaseModel):
    """Tickets created on one UTC day."""
    date: dt.date
    count: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, point: TrendPoint) -> "TrendPointDTO":
        return cls(date=point.day, count=point.count)


class DashboardResponse(BaseModel):
    """Response model for the analytics dashboard."""
    total_tickets: int
    resolved_tickets: int
    open_tickets: int = Field(..., description="Total minus Resolved/Closed")
    resolution_rate: float = Field(..., description="Percentage, 2 decimals")
    avg_resolution_time: float = Field(..., description="Mean hours from creation to resolution")
    sla_compliance_rate: float = Field(..., description="Percentage of resolved tickets within SLA")
    overdue_tickets: int
    tickets_by_status: Dict[str, int] = Field(default_factory=dict)
    tickets_by_priority: Dict[str, int] = Field(default_factory=dict)
    tickets_by_category: Dict[str, int] = Field(default_factory=dict)
    agent_performance: List[AgentPerformanceDTO] = Field(default_factory=list)
    recent_tickets: List[TicketEntityDTO] = Field(default_factory=list)


class AgentStatisticsDTO(BaseModel):
    """Workload view of one agent."""
    agent_id: str
    name: str
    email: str
    department: Optional[Category] = None
    is_available: bool
    active_tickets: int = Field(..., description="Open/In Progress tickets found by scan")
    resolved_tickets: int
    total_assigned: int = Field(..., description="Maintained load counter")
