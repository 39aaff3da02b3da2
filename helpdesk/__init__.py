"""
Helpdesk Core
=============

Ticket lifecycle and assignment engine: SLA deadlines tied to priority,
load-balanced agent assignment per department, status-transition side
effects and analytics over ticket history.
"""

__version__ = "1.0.0"
