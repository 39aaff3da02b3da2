"""
Shared fixtures: a fixed clock, an in-memory store, a recording notifier
and the wired service container.
"""

import pytest

from helpdesk.agents.domain import User
from helpdesk.config import Category, Settings, UserRole
from helpdesk.core import Actor, FixedClock
from helpdesk.infrastructure.memory import InMemoryStore, InMemoryUnitOfWorkFactory
from helpdesk.main import HelpdeskContainer, build_container
from tests.factories import RecordingNotifier, put_agent


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> InMemoryUnitOfWorkFactory:
    return InMemoryUnitOfWorkFactory(store)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(assignment_max_retries=5, notification_webhook_url=None)


@pytest.fixture
def container(
    uow_factory: InMemoryUnitOfWorkFactory,
    clock: FixedClock,
    notifier: RecordingNotifier,
    test_settings: Settings,
) -> HelpdeskContainer:
    return build_container(uow_factory, clock=clock, notifier=notifier, config=test_settings)


@pytest.fixture
def requester() -> Actor:
    return Actor(user_id="user-1", role=UserRole.USER)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="admin", role=UserRole.ADMIN)


@pytest.fixture
def it_agent(store: InMemoryStore) -> User:
    return put_agent(store, "agent-it-1", Category.IT)
