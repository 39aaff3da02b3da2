"""
Notification Infrastructure Layer
=================================

Notifier implementations (log, webhook, fan-out).
"""

from helpdesk.notifications.infrastructure.external import (
    CircuitBreaker,
    CircuitState,
    CompositeNotifier,
    LoggingNotifier,
    WebhookNotifier,
    build_notifier,
)

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "CompositeNotifier",
    "LoggingNotifier",
    "WebhookNotifier",
    "build_notifier",
]
