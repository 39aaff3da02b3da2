"""
Analytics Application Layer
===========================

Contains:
- Services: AnalyticsService (dashboard, agent statistics, trends)
- DTOs: report response models
"""

from helpdesk.analytics.application.dto import (
    AgentPerformanceDTO,
    AgentStatisticsDTO,
    DashboardResponse,
    TrendPointDTO,
)
from helpdesk.analytics.application.services import AnalyticsService

__all__ = [
    "AgentPerformanceDTO",
    "AgentStatisticsDTO",
    "DashboardResponse",
    "TrendPointDTO",
    "AnalyticsService",
]
