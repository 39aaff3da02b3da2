"""
Assignment Domain Layer
=======================

Contains the agent selection policy.
"""

from helpdesk.assignment.domain.policies import LeastLoadedPolicy

__all__ = ["LeastLoadedPolicy"]
