"""
Assignment Application Layer
============================

Contains the AssignmentEngine, the single owner of agent load counters.
"""

from helpdesk.assignment.application.services import AssignmentEngine

__all__ = ["AssignmentEngine"]
