"""
Notification Domain Layer
=========================

Contains the LifecycleEvent value object and payload builders.
"""

from helpdesk.notifications.domain.events import LifecycleEvent, agent_payload, ticket_payload

__all__ = ["LifecycleEvent", "agent_payload", "ticket_payload"]
