"""
Notification Application Layer
==============================

Contains the fire-and-forget NotificationDispatcher.
"""

from helpdesk.notifications.application.services import NotificationDispatcher

__all__ = ["NotificationDispatcher"]
