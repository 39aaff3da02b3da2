"""
Helpdesk Core - Main Application
================================

Composition root for the ticket lifecycle and assignment engine.

Modules:
- Tickets: SLA stamping, state machine, comments
- Agents: directory of users, agents and availability
- Assignment: least-loaded routing and reassignment
- Analytics: on-demand reports and an optional periodic summary
- Notifications: fire-and-forget lifecycle events

Transport layers (HTTP, CLI, workers) embed the core through
``lifespan()`` and call the services on the yielded container.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from helpdesk.agents.application import AgentDirectory
from helpdesk.analytics.application import AnalyticsService
from helpdesk.analytics.infrastructure import AnalyticsScheduler
from helpdesk.assignment.application import AssignmentEngine
from helpdesk.config import Settings, settings as default_settings
from helpdesk.core import Clock, INotifier, SystemClock
from helpdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_maker,
    init_database,
)
from helpdesk.infrastructure.database.unit_of_work import SQLAlchemyUnitOfWorkFactory
from helpdesk.infrastructure.memory import InMemoryUnitOfWorkFactory
from helpdesk.notifications.application import NotificationDispatcher
from helpdesk.notifications.infrastructure import build_notifier
from helpdesk.shared.infrastructure.logging import get_logger, setup_logging
from helpdesk.shared.infrastructure.transactions import UnitOfWorkFactory
from helpdesk.tickets.application import TicketService

logger = get_logger(__name__)


@dataclass
class HelpdeskContainer:
    """Wired services sharing one store, clock and dispatcher."""
    uow_factory: UnitOfWorkFactory
    clock: Clock
    notifier: INotifier
    dispatcher: NotificationDispatcher
    agents: AgentDirectory
    assignment: AssignmentEngine
    tickets: TicketService
    analytics: AnalyticsService
    scheduler: Optional[AnalyticsScheduler] = None


def build_container(
    uow_factory: UnitOfWorkFactory,
    clock: Optional[Clock] = None,
    notifier: Optional[INotifier] = None,
    config: Optional[Settings] = None,
) -> HelpdeskContainer:
    """Wire every service around the given storage."""
    config = config or default_settings
    clock = clock or SystemClock()
    notifier = notifier or build_notifier(config.notification_webhook_url)
    dispatcher = NotificationDispatcher(notifier)
    retries = config.assignment_max_retries

    assignment = AssignmentEngine(uow_factory, dispatcher, clock, max_attempts=retries)
    analytics = AnalyticsService(uow_factory, clock)
    scheduler = None
    if config.analytics_report_interval > 0:
        scheduler = AnalyticsScheduler(analytics, interval_seconds=config.analytics_report_interval)

    return HelpdeskContainer(
        uow_factory=uow_factory,
        clock=clock,
        notifier=notifier,
        dispatcher=dispatcher,
        agents=AgentDirectory(uow_factory, max_attempts=retries),
        assignment=assignment,
        tickets=TicketService(uow_factory, assignment, dispatcher, clock, max_attempts=retries),
        analytics=analytics,
        scheduler=scheduler,
    )


async def create_uow_factory(config: Settings) -> UnitOfWorkFactory:
    """Storage selected by ``storage_backend``."""
    if config.storage_backend == "memory":
        logger.info("Using in-memory store")
        return InMemoryUnitOfWorkFactory()

    logger.info("Initializing database")
    init_database(config.database_url)
    if config.create_tables_on_startup:
        # Development convenience; production uses migrations
        logger.info("Creating database tables")
        await create_tables()
    return SQLAlchemyUnitOfWorkFactory(get_session_maker())


@asynccontextmanager
async def lifespan(
    config: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    notifier: Optional[INotifier] = None,
) -> AsyncGenerator[HelpdeskContainer, None]:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize storage (memory or database)
    3. Build services and notifier
    4. Start the analytics scheduler when enabled

    SHUTDOWN:
    1. Stop the scheduler
    2. Wait for in-flight notifications
    3. Close the notifier and database connections
    """
    config = config or default_settings

    # === STARTUP ===
    setup_logging(config.log_level, config.environment, service=config.app_name)
    logger.info("Starting Helpdesk Core", extra={
        "version": config.app_version,
        "environment": config.environment,
        "storage_backend": config.storage_backend,
    })

    uow_factory = await create_uow_factory(config)
    container = build_container(uow_factory, clock=clock, notifier=notifier, config=config)

    if container.scheduler is not None:
        await container.scheduler.start()

    logger.info("Helpdesk Core started successfully")

    try:
        yield container
    finally:
        # === SHUTDOWN ===
        logger.info("Shutting down Helpdesk Core")

        if container.scheduler is not None:
            await container.scheduler.stop()

        await container.dispatcher.drain()

        close = getattr(container.notifier, "close", None)
        if close is not None:
            await close()

        if config.storage_backend == "database":
            await close_database()

        logger.info("Helpdesk Core stopped")


async def serve() -> None:
    """Run the core with its background jobs until cancelled."""
    async with lifespan():
        await asyncio.Event().wait()


def main() -> None:
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
