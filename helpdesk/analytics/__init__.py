"""
Analytics Module
================

Bounded Context for derived statistics over tickets and agents.

Responsibilities:
- Counts by status, priority and category
- Resolution rate, mean resolution time, SLA compliance, overdue tickets
- Per-agent performance and daily creation trends
- Optional periodic summary report

Everything is recomputed on demand from a snapshot; nothing is stored.
"""
