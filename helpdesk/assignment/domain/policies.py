"""
Assignment Policies
===================

Pure agent selection rules, free of storage concerns.
"""

from typing import Iterable, Optional

from helpdesk.agents.domain import User
from helpdesk.config import Category


class LeastLoadedPolicy:
    """
    Route to the eligible agent holding the fewest active tickets.

    Ties go to the smallest agent id so the choice is deterministic.
    """

    @staticmethod
    def select(candidates: Iterable[User], category: Category) -> Optional[User]:
        eligible = [agent for agent in candidates if agent.can_take(category)]
        if not eligible:
            return None
        return min(eligible, key=lambda agent: agent.routing_key)
