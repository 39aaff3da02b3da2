"""
Tests for the composition root, the analytics scheduler and seeding.
"""

import importlib.util
from pathlib import Path

import pytest

from helpdesk.config import Settings
from helpdesk.main import lifespan
from tests.factories import RecordingNotifier

ROOT = Path(__file__).resolve().parent.parent


def load_seed_module():
    spec = importlib.util.spec_from_file_location("seed_script", ROOT / "scripts" / "seed.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(
        storage_backend="memory",
        analytics_report_interval=3600,
        notification_webhook_url=None,
    )


class TestLifespan:

    @pytest.mark.asyncio
    async def test_starts_and_stops_scheduler(self, memory_settings, clock):
        async with lifespan(memory_settings, clock=clock, notifier=RecordingNotifier()) as container:
            assert container.scheduler is not None
            assert container.scheduler.is_running
            await container.scheduler.report()

        assert not container.scheduler.is_running

    @pytest.mark.asyncio
    async def test_scheduler_disabled_by_default(self, clock):
        config = Settings(storage_backend="memory", notification_webhook_url=None)

        async with lifespan(config, clock=clock, notifier=RecordingNotifier()) as container:
            assert container.scheduler is None


class TestSeed:

    @pytest.mark.asyncio
    async def test_seed_file_goes_through_the_lifecycle(self, memory_settings, clock):
        seed = load_seed_module()
        data = seed.load_seed_file(ROOT / "seed.yaml")
        notifier = RecordingNotifier()

        async with lifespan(memory_settings, clock=clock, notifier=notifier) as container:
            summary = await seed.apply_seed(container, data)
            stats = {s.agent_id: s for s in await container.analytics.agent_statistics()}

        assert summary == {
            "users.admin": 1,
            "users.agent": 3,
            "users.user": 2,
            "tickets.In Progress": 4,
            "tickets.Resolved": 1,
        }
        assert stats["agent-it-1"].total_assigned == 3
        assert stats["agent-hr-1"].total_assigned == 1
        assert stats["agent-hr-1"].resolved_tickets == 1
        assert stats["agent-general-1"].total_assigned == 0

    def test_rejects_non_mapping(self, tmp_path):
        seed = load_seed_module()
        path = tmp_path / "seed.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            seed.load_seed_file(path)


class TestPackageSurface:

    def test_error_taxonomy_exports_only_raised_types(self):
        import helpdesk.core as core

        assert {"DomainException", "RepositoryException", "ConfigurationException"}.isdisjoint(core.__all__)
        assert not hasattr(core, "RepositoryException")

    def test_agent_layer_exports_no_response_dto(self):
        import helpdesk.agents.application as agents_application

        assert "AgentDTO" not in agents_application.__all__
