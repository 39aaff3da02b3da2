"""
Notification Application Services
=================================

Fire-and-forget dispatch of lifecycle events.

Lifecycle services hand events over only after their unit of work has
committed. Delivery runs in background tasks; a failing notifier is
logged and never reaches the caller.
"""

import asyncio
from typing import Iterable, Set

from helpdesk.core import INotifier
from helpdesk.notifications.domain.events import LifecycleEvent
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class NotificationDispatcher:
    """Schedules notifier calls without blocking lifecycle operations."""

    def __init__(self, notifier: INotifier):
        self._notifier = notifier
        self._pending: Set[asyncio.Task] = set()

    def dispatch(self, event: LifecycleEvent) -> None:
        """Schedule delivery of one event and return immediately."""
        task = asyncio.get_running_loop().create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def dispatch_all(self, events: Iterable[LifecycleEvent]) -> None:
        for event in events:
            self.dispatch(event)

    async def _deliver(self, event: LifecycleEvent) -> None:
        try:
            await self._notifier.notify(event.kind, event.payload)
        except Exception as e:
            logger.error(
                "Notification delivery failed",
                extra={
                    "event": event.kind.value,
                    "ticket_id": event.ticket_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                }
            )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled delivery (shutdown, tests)."""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
