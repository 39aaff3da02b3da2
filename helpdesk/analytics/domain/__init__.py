"""
Analytics Domain Layer
======================

Contains:
- Value Objects: AnalyticsSnapshot, AgentPerformance, TrendPoint
- Domain Services: AnalyticsCalculator (pure, clock passed in)
"""

from helpdesk.analytics.domain.calculators import (
    AgentPerformance,
    AnalyticsCalculator,
    AnalyticsSnapshot,
    TrendPoint,
)

__all__ = [
    "AgentPerformance",
    "AnalyticsCalculator",
    "AnalyticsSnapshot",
    "TrendPoint",
]
