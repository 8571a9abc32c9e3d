"""Tests for the polling dashboard monitor."""

import asyncio
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from automation_dashboard.config import DashboardConfig
from automation_dashboard.core.types import DataSource
from automation_dashboard.errors import ResolutionError
from automation_dashboard.services.monitor import MAX_OVERLAPPING_REFRESHES, REFRESH_JOB_ID, DashboardMonitor


class GatedResolver:
    """Holds every metrics query until its gate is opened."""

    def __init__(self, inner):
        self._inner = inner
        self.gates: list[asyncio.Event] = []

    async def resolve_metrics(self, time_range):
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await self._inner.resolve_metrics(time_range)

    def __getattr__(self, name):
        return getattr(self._inner, name)


@pytest.fixture
def scheduler():
    scheduler = MagicMock()
    scheduler.running = False
    return scheduler


@pytest.fixture
def dashboard_config():
    return DashboardConfig(refresh_interval_ms=30000, message_limit=5)


@pytest.fixture
def monitor(make_resolver, dashboard_config, scheduler):
    return DashboardMonitor(make_resolver(), dashboard_config, scheduler=scheduler)


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_builds_snapshot(self, monitor):
        snapshot = await monitor.refresh()

        assert snapshot.request_id == 1
        assert snapshot.metrics.data_source == DataSource.MOCK
        assert len(snapshot.messages) == 5
        assert snapshot.messages_source == DataSource.MOCK
        assert snapshot.workflow_status.active is True
        assert snapshot.error is None
        assert monitor.latest is snapshot

    @pytest.mark.asyncio
    async def test_listeners_notified(self, monitor):
        received = []
        monitor.on_snapshot(received.append)

        await monitor.refresh()
        await monitor.refresh()

        assert [s.request_id for s in received] == [1, 2]

    @pytest.mark.asyncio
    async def test_stale_refresh_discarded(self, make_resolver, dashboard_config, scheduler):
        resolver = GatedResolver(make_resolver())
        monitor = DashboardMonitor(resolver, dashboard_config, scheduler=scheduler)

        older = asyncio.create_task(monitor.refresh())
        newer = asyncio.create_task(monitor.refresh())
        while len(resolver.gates) < 2:
            await asyncio.sleep(0)

        resolver.gates[1].set()
        applied = await newer
        resolver.gates[0].set()

        assert applied.request_id == 2
        assert await older is None
        assert monitor.latest.request_id == 2

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_data(self, monitor, mock_generator, monkeypatch):
        first = await monitor.refresh()

        def broken():
            raise RuntimeError("generator broke")

        monkeypatch.setattr(mock_generator, "metrics", broken)
        second = await monitor.refresh()

        assert second.request_id == 2
        assert "generator broke" in second.error
        assert second.metrics == first.metrics
        assert second.messages == first.messages

    @pytest.mark.asyncio
    async def test_failure_without_history(self, dashboard_config, scheduler):
        resolver = MagicMock()

        async def fail(*args):
            raise ResolutionError("nothing answered", query="metrics")

        resolver.resolve_metrics = fail
        resolver.resolve_messages = fail
        resolver.resolve_workflow_status = fail
        monitor = DashboardMonitor(resolver, dashboard_config, scheduler=scheduler)

        snapshot = await monitor.refresh()

        assert snapshot.metrics is None
        assert snapshot.messages == []
        assert snapshot.error == "nothing answered"


class TestToggle:
    @pytest.mark.asyncio
    async def test_toggle_flips_known_state(self, monitor):
        assert monitor.workflow_active is True

        assert await monitor.toggle() is False
        assert monitor.workflow_active is False
        assert await monitor.toggle() is True

    @pytest.mark.asyncio
    async def test_refresh_updates_known_state(self, monitor):
        await monitor.toggle()
        await monitor.refresh()

        # The mock tier does not persist toggles and reports active again.
        assert monitor.workflow_active is True


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_schedules_refresh(self, monitor, scheduler):
        await monitor.start()

        args, kwargs = scheduler.add_job.call_args
        assert args[0] == monitor.refresh
        assert args[1].interval == timedelta(seconds=30)
        assert kwargs["id"] == REFRESH_JOB_ID
        assert kwargs["max_instances"] == MAX_OVERLAPPING_REFRESHES
        assert kwargs["replace_existing"] is True
        scheduler.start.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_only_when_running(self, monitor, scheduler):
        await monitor.stop()
        scheduler.shutdown.assert_not_called()

        scheduler.running = True
        await monitor.stop()
        scheduler.shutdown.assert_called_once_with(wait=False)

    @pytest.mark.asyncio
    async def test_health_check(self, monitor, scheduler):
        assert await monitor.health_check() is False
        scheduler.running = True
        assert await monitor.health_check() is True

    @pytest.mark.asyncio
    async def test_context_manager_starts_and_stops(self, monitor, scheduler):
        async with monitor as running:
            assert running is monitor
            scheduler.start.assert_called_once()
            scheduler.running = True

        scheduler.shutdown.assert_called_once_with(wait=False)

    def test_service_name(self, monitor):
        assert monitor.service_name == "monitor"
