"""
Analytics Infrastructure Layer
==============================

- Scheduler: APScheduler job logging a periodic analytics summary
"""

from helpdesk.analytics.infrastructure.scheduler import AnalyticsScheduler

__all__ = ["AnalyticsScheduler"]
