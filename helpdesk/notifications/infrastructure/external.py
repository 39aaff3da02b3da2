"""
Notification External Integrations
==================================

Notifier implementations:
- Structured log notifier (always available)
- JSON webhook notifier with retry and circuit breaker
- Composite fan-out
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from helpdesk.config import NotificationEvent, settings
from helpdesk.core import INotifier, NotificationException
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class LoggingNotifier(INotifier):
    """Writes every lifecycle event to the structured log."""

    async def notify(self, event_kind: NotificationEvent, payload: Dict[str, Any]) -> None:
        ticket = payload.get("ticket", {})
        logger.info(
            "Lifecycle event",
            extra={
                "event": event_kind.value,
                "ticket_id": ticket.get("ticket_id"),
                "status": ticket.get("status"),
                "assigned_to": ticket.get("assigned_to"),
                "old_status": payload.get("old_status"),
                "new_status": payload.get("new_status"),
            }
        )


class CircuitState:
    """Webhook circuit states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Stops calling a webhook that keeps failing.

    After ``failure_threshold`` consecutive failed deliveries the circuit
    opens and events are dropped without a request. Once
    ``recovery_timeout`` seconds have passed one trial delivery is let
    through (half open); its outcome closes or re-opens the circuit.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._now = time_source
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> str:
        if self._state == CircuitState.OPEN and self._now() - self._opened_at >= self.recovery_timeout:
            self._state = CircuitState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        return self.state != CircuitState.OPEN

    def record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("Webhook circuit closed")
        self._consecutive_failures = 0
        self._state = CircuitState.CLOSED
        self._opened_at = None

    def record_failure(self) -> None:
        self._consecutive_failures += 1
        trial_failed = self._state == CircuitState.HALF_OPEN
        if trial_failed or self._consecutive_failures >= self.failure_threshold:
            self._state = CircuitState.OPEN
            self._opened_at = self._now()
            logger.warning(
                "Webhook circuit opened",
                extra={
                    "consecutive_failures": self._consecutive_failures,
                    "recovery_timeout": self.recovery_timeout,
                }
            )


class WebhookNotifier(INotifier):
    """
    POSTs lifecycle events as JSON to one webhook URL.

    Each event gets ``max_retries`` attempts with exponential backoff
    (``backoff_base * 2**n`` seconds). A non-2xx answer or a transport
    error counts as a failed attempt. Only an event whose attempts all
    failed is reported to the circuit breaker.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base: float = 1.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._url = url
        self._timeout = timeout_seconds or settings.notification_timeout_seconds
        self._max_retries = max_retries or settings.notification_max_retries
        self._backoff_base = backoff_base
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.notification_failure_threshold,
            recovery_timeout=settings.notification_recovery_timeout,
        )
        self._client = client

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _attempt(self, message: Dict[str, Any], attempt: int) -> bool:
        """One POST; True when the webhook accepted the event."""
        try:
            response = await self._http().post(
                self._url, json=message, headers={"X-Helpdesk-Event": message["event"]}
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Webhook delivery attempt failed",
                extra={"event": message["event"], "attempt": attempt, "error": str(e)}
            )
            return False

        if response.is_success:
            return True
        logger.warning(
            "Webhook rejected event",
            extra={"event": message["event"], "attempt": attempt, "status_code": response.status_code}
        )
        return False

    async def notify(self, event_kind: NotificationEvent, payload: Dict[str, Any]) -> None:
        """
        Deliver the event to the webhook.

        Raises:
            NotificationException: circuit open or every attempt failed
        """
        if not self._circuit_breaker.allow_request():
            raise NotificationException(
                "Circuit breaker open, event dropped",
                {"event": event_kind.value}
            )

        message = {
            "event": event_kind.value,
            "occurred_at": payload.get("occurred_at"),
            "payload": payload,
        }
        for attempt in range(1, self._max_retries + 1):
            if await self._attempt(message, attempt):
                self._circuit_breaker.record_success()
                logger.debug("Webhook event delivered", extra={"event": event_kind.value, "attempt": attempt})
                return
            if attempt < self._max_retries:
                await asyncio.sleep(self._backoff_base * 2 ** (attempt - 1))

        self._circuit_breaker.record_failure()
        raise NotificationException(
            f"Webhook delivery failed after {self._max_retries} attempts",
            {"event": event_kind.value}
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class CompositeNotifier(INotifier):
    """Fans every event out to several notifiers."""

    def __init__(self, notifiers: List[INotifier]):
        self._notifiers = list(notifiers)

    async def notify(self, event_kind: NotificationEvent, payload: Dict[str, Any]) -> None:
        results = await asyncio.gather(
            *(notifier.notify(event_kind, payload) for notifier in self._notifiers),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, Exception)]
        if failures:
            raise NotificationException(
                f"{len(failures)} of {len(self._notifiers)} notifiers failed",
                {"errors": [str(f) for f in failures]}
            )

    async def close(self) -> None:
        for notifier in self._notifiers:
            close = getattr(notifier, "close", None)
            if close is not None:
                await close()


def build_notifier(webhook_url: Optional[str] = None) -> INotifier:
    """Logging notifier, plus the webhook when one is configured."""
    url = webhook_url or settings.notification_webhook_url
    if not url:
        return LoggingNotifier()
    return CompositeNotifier([LoggingNotifier(), WebhookNotifier(url)])
