"""
Analytics Application Services
==============================

On-demand reports over the ticket and agent collections.

Reads run in their own unit of work and tolerate being a few
milliseconds stale; nothing computed here is persisted or cached.
"""

from typing import List, Optional

from helpdesk.analytics.application.dto import (
    AgentPerformanceDTO,
    AgentStatisticsDTO,
    DashboardResponse,
    TrendPointDTO,
)
from helpdesk.analytics.domain import AnalyticsCalculator, AnalyticsSnapshot
from helpdesk.config import UserRole, settings
from helpdesk.core import Clock, IUnitOfWork, SystemClock
from helpdesk.shared.infrastructure.logging import get_logger, log_latency
from helpdesk.shared.infrastructure.transactions import UnitOfWorkFactory, run_read_only
from helpdesk.tickets.application.dto import TicketEntityDTO

logger = get_logger(__name__)


class AnalyticsService:
    """
    Service for dashboard, agent and trend reports.

    Every report accepts an optional snapshot; without one the current
    tickets and agents are read from storage.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Optional[Clock] = None,
    ):
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()
        self.calculator = AnalyticsCalculator()

    async def snapshot(self) -> AnalyticsSnapshot:
        """Read all tickets and agents in one unit of work."""

        async def work(uow: IUnitOfWork) -> AnalyticsSnapshot:
            tickets = await uow.tickets.list()
            agents = await uow.users.list({"role": UserRole.AGENT})
            return AnalyticsSnapshot(tickets=tuple(tickets), agents=tuple(agents))

        return await run_read_only(self._uow_factory, work)

    async def dashboard(self, snapshot: Optional[AnalyticsSnapshot] = None) -> DashboardResponse:
        """
        Build the dashboard report.

        Returns:
            DashboardResponse with counts, rates, agent performance and
            the most recent tickets
        """
        snapshot = snapshot or await self.snapshot()
        tickets = snapshot.tickets
        calc = self.calculator
        now = self._clock.now()

        with log_latency(logger, "dashboard_analytics", tickets=len(tickets)):
            resolved = calc.resolved_count(tickets)
            report = DashboardResponse(
                total_tickets=len(tickets),
                resolved_tickets=resolved,
                open_tickets=len(tickets) - resolved,
                resolution_rate=calc.resolution_rate(tickets),
                avg_resolution_time=calc.average_resolution_hours(tickets),
                sla_compliance_rate=calc.sla_compliance_rate(tickets),
                overdue_tickets=calc.overdue_count(tickets, now),
                tickets_by_status=calc.count_by(tickets, "status"),
                tickets_by_priority=calc.count_by(tickets, "priority"),
                tickets_by_category=calc.count_by(tickets, "category"),
                agent_performance=[
                    AgentPerformanceDTO.from_domain(p)
                    for p in calc.agent_performance(
                        tickets, snapshot.agents, limit=settings.top_agents_limit
                    )
                ],
                recent_tickets=[
                    TicketEntityDTO.from_domain(t)
                    for t in calc.recent(tickets, limit=settings.recent_tickets_limit)
                ],
            )
        return report

    async def agent_statistics(
        self,
        snapshot: Optional[AnalyticsSnapshot] = None,
    ) -> List[AgentStatisticsDTO]:
        """Per-agent workload: scanned active/resolved counts beside the load counter."""
        snapshot = snapshot or await self.snapshot()
        stats = []
        for agent in self.calculator.agents_only(snapshot.agents):
            counts = self.calculator.agent_ticket_counts(snapshot.tickets, agent.id)
            stats.append(AgentStatisticsDTO(
                agent_id=agent.id,
                name=agent.name,
                email=agent.email,
                department=agent.department,
                is_available=agent.is_available,
                active_tickets=counts["active"],
                resolved_tickets=counts["resolved"],
                total_assigned=agent.assigned_tickets,
            ))
        return stats

    async def trends(
        self,
        zero_fill: Optional[bool] = None,
        snapshot: Optional[AnalyticsSnapshot] = None,
    ) -> List[TrendPointDTO]:
        """Tickets created per day over the trailing window, oldest first."""
        snapshot = snapshot or await self.snapshot()
        if zero_fill is None:
            zero_fill = settings.trend_zero_fill
        points = self.calculator.trends(
            snapshot.tickets,
            self._clock.now(),
            window_days=settings.trend_window_days,
            zero_fill=zero_fill,
        )
        return [TrendPointDTO.from_domain(p) for p in points]
