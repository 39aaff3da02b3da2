"""
Analytics Calculators
=====================

Pure functions for derived ticket statistics.

Stateless utility class - every metric is computed from a snapshot of
tickets and agents plus an explicit "now", so results are deterministic
under test. Percentages and hour figures are rounded to 2 decimals.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Sequence

from helpdesk.agents.domain import User
from helpdesk.config import TERMINAL_STATUSES, UserRole
from helpdesk.tickets.domain import Ticket


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Tickets and agents read together for one report."""
    tickets: Sequence[Ticket]
    agents: Sequence[User] = field(default_factory=tuple)


@dataclass(frozen=True)
class AgentPerformance:
    """Resolution record of one agent."""
    agent_id: str
    agent_name: str
    agent_email: str
    tickets_resolved: int
    avg_resolution_hours: float


@dataclass(frozen=True)
class TrendPoint:
    """Tickets created on one UTC calendar day."""
    day: date
    count: int


def _hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def _percentage(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round(part / whole * 100, 2)


def _resolved(tickets: Iterable[Ticket]) -> List[Ticket]:
    return [t for t in tickets if t.status in TERMINAL_STATUSES]


class AnalyticsCalculator:
    """Derived statistics over tickets and agents."""

    # ========== Counts ==========

    @staticmethod
    def count_by(tickets: Iterable[Ticket], attribute: str) -> Dict[str, int]:
        """Group-count tickets by an enum attribute (status, priority, category)."""
        return dict(Counter(getattr(t, attribute).value for t in tickets))

    @staticmethod
    def resolved_count(tickets: Iterable[Ticket]) -> int:
        return len(_resolved(tickets))

    @staticmethod
    def overdue_count(tickets: Iterable[Ticket], now: datetime) -> int:
        """Active tickets whose SLA deadline has passed."""
        return sum(1 for t in tickets if t.is_overdue(now))

    # ========== Rates ==========

    @staticmethod
    def resolution_rate(tickets: Sequence[Ticket]) -> float:
        """Resolved or Closed share of all tickets, 0 when there are none."""
        return _percentage(len(_resolved(tickets)), len(tickets))

    @staticmethod
    def average_resolution_hours(tickets: Iterable[Ticket]) -> float:
        """Mean of resolved_at - created_at over Resolved/Closed tickets."""
        durations = [
            _hours(t.created_at, t.resolved_at)
            for t in _resolved(tickets)
            if t.resolved_at is not None
        ]
        if not durations:
            return 0.0
        return round(sum(durations) / len(durations), 2)

    @staticmethod
    def sla_compliance_rate(tickets: Iterable[Ticket]) -> float:
        """
        Share of Resolved/Closed tickets resolved strictly before the deadline.

        Resolving exactly at the due date is a miss.
        """
        resolved = _resolved(tickets)
        compliant = sum(
            1 for t in resolved
            if t.resolved_at is not None and t.sla.is_met_by(t.resolved_at)
        )
        return _percentage(compliant, len(resolved))

    # ========== Agents ==========

    @staticmethod
    def agent_performance(
        tickets: Iterable[Ticket],
        agents: Iterable[User],
        limit: int = 10,
    ) -> List[AgentPerformance]:
        """
        Per-agent resolution record, best first.

        Resolution time runs from assignment, not creation. Agents with no
        resolved ticket, and assignees no longer in the directory, are left
        out. Ties on ticket count keep agent id order.
        """
        directory = {agent.id: agent for agent in agents}
        resolved_counts: Dict[str, int] = defaultdict(int)
        durations: Dict[str, List[float]] = defaultdict(list)

        for ticket in _resolved(tickets):
            if ticket.assigned_to is None:
                continue
            resolved_counts[ticket.assigned_to] += 1
            if ticket.assigned_at is not None and ticket.resolved_at is not None:
                durations[ticket.assigned_to].append(_hours(ticket.assigned_at, ticket.resolved_at))

        performance = []
        for agent_id in sorted(resolved_counts):
            agent = directory.get(agent_id)
            if agent is None:
                continue
            times = durations[agent_id]
            performance.append(AgentPerformance(
                agent_id=agent_id,
                agent_name=agent.name,
                agent_email=agent.email,
                tickets_resolved=resolved_counts[agent_id],
                avg_resolution_hours=round(sum(times) / len(times), 2) if times else 0.0,
            ))

        performance.sort(key=lambda p: p.tickets_resolved, reverse=True)
        return performance[:limit]

    @staticmethod
    def agent_ticket_counts(tickets: Iterable[Ticket], agent_id: str) -> Dict[str, int]:
        """Active and resolved tickets currently pointing at ``agent_id``."""
        active = resolved = 0
        for ticket in tickets:
            if ticket.assigned_to != agent_id:
                continue
            if ticket.is_terminal:
                resolved += 1
            else:
                active += 1
        return {"active": active, "resolved": resolved}

    # ========== Trends ==========

    @staticmethod
    def trends(
        tickets: Iterable[Ticket],
        now: datetime,
        window_days: int = 7,
        zero_fill: bool = False,
    ) -> List[TrendPoint]:
        """
        Tickets created per UTC day since ``now - window_days``, oldest first.

        Days without tickets are omitted unless ``zero_fill`` is set, in
        which case every day from the window start to today appears.
        """
        start = now - timedelta(days=window_days)
        counts: Counter = Counter(
            t.created_at.astimezone(timezone.utc).date()
            for t in tickets
            if start <= t.created_at <= now
        )

        if zero_fill:
            first = start.astimezone(timezone.utc).date()
            last = now.astimezone(timezone.utc).date()
            days = [first + timedelta(days=offset) for offset in range((last - first).days + 1)]
            return [TrendPoint(day=day, count=counts.get(day, 0)) for day in days]

        return [TrendPoint(day=day, count=counts[day]) for day in sorted(counts)]

    # ========== Listing ==========

    @staticmethod
    def recent(tickets: Iterable[Ticket], limit: int = 10) -> List[Ticket]:
        """Newest tickets first."""
        ordered = sorted(tickets, key=lambda t: (t.created_at, t.ticket_id), reverse=True)
        return ordered[:limit]

    @staticmethod
    def agents_only(users: Iterable[User]) -> List[User]:
        return sorted((u for u in users if u.role == UserRole.AGENT), key=lambda u: u.id)
