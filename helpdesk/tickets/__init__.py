"""
Ticket Lifecycle Module
=======================

Bounded Context for tickets from creation to resolution.

Responsibilities:
- Stamp SLA deadlines from priority (Critical 4h, High 8h, Medium 24h, Low 48h)
- Sequential human-readable identifiers
- Status state machine and its load-counter side effects
- Comment log, edits and administrative deletion
"""
