"""APScheduler-based polling monitor that keeps the latest dashboard snapshot."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from automation_dashboard.config import DashboardConfig
from automation_dashboard.core.models import DashboardSnapshot
from automation_dashboard.errors import DashboardError
from automation_dashboard.log import get_logger
from automation_dashboard.resolver.resolver import AutomationDataResolver
from automation_dashboard.services.base import Service

logger = get_logger(__name__)

REFRESH_JOB_ID = "dashboard_refresh"
# Ticks fire on the wall clock even if the previous refresh is still running.
MAX_OVERLAPPING_REFRESHES = 3

SnapshotListener = Callable[[DashboardSnapshot], None]


class DashboardMonitor(Service):
    """Refreshes metrics, messages and workflow status on a fixed interval.

    Each refresh gets an increasing request id. A refresh that completes
    after a newer one has already been applied is discarded, so overlapping
    ticks can never roll the snapshot back.
    """

    def __init__(
        self,
        resolver: AutomationDataResolver,
        config: DashboardConfig,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self._resolver = resolver
        self._config = config
        self._scheduler = scheduler or AsyncIOScheduler(timezone=config.timezone)
        self._listeners: list[SnapshotListener] = []
        self._next_request_id = 0
        self._applied_request_id = 0
        self._latest: DashboardSnapshot | None = None
        self._workflow_active = True

    @property
    def service_name(self) -> str:
        return "monitor"

    @property
    def latest(self) -> DashboardSnapshot | None:
        return self._latest

    @property
    def workflow_active(self) -> bool:
        return self._workflow_active

    def on_snapshot(self, listener: SnapshotListener) -> None:
        """Register a callback invoked with every applied snapshot."""
        self._listeners.append(listener)

    async def start(self) -> None:
        interval = self._config.refresh_interval_ms / 1000
        self._scheduler.add_job(
            self.refresh,
            IntervalTrigger(seconds=interval),
            id=REFRESH_JOB_ID,
            next_run_time=datetime.now(timezone.utc),
            max_instances=MAX_OVERLAPPING_REFRESHES,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("monitor_started", interval_seconds=interval)

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info("monitor_stopped")

    async def health_check(self) -> bool:
        return self._scheduler.running

    async def refresh(self) -> DashboardSnapshot | None:
        """Run one concurrent refresh. Returns the snapshot if it was applied."""
        self._next_request_id += 1
        request_id = self._next_request_id

        try:
            metrics, messages, status = await asyncio.gather(
                self._resolver.resolve_metrics(self._config.time_range),
                self._resolver.resolve_messages(self._config.message_limit),
                self._resolver.resolve_workflow_status(),
            )
            snapshot = DashboardSnapshot(
                request_id=request_id,
                metrics=metrics.value,
                messages=messages.value,
                messages_source=messages.source,
                workflow_status=status.value,
            )
        except DashboardError as e:
            logger.error("refresh_failed", request_id=request_id, error=str(e))
            previous = self._latest
            snapshot = DashboardSnapshot(
                request_id=request_id,
                metrics=previous.metrics if previous else None,
                messages=previous.messages if previous else [],
                messages_source=previous.messages_source if previous else None,
                workflow_status=previous.workflow_status if previous else None,
                error=str(e),
            )

        if request_id <= self._applied_request_id:
            logger.debug(
                "stale_refresh_discarded",
                request_id=request_id,
                applied_request_id=self._applied_request_id,
            )
            return None

        self._applied_request_id = request_id
        self._latest = snapshot
        if snapshot.workflow_status is not None:
            self._workflow_active = snapshot.workflow_status.active
        logger.info(
            "refresh_applied",
            request_id=request_id,
            metrics_source=snapshot.metrics.data_source.value if snapshot.metrics else None,
            messages=len(snapshot.messages),
            error=snapshot.error,
        )

        for listener in self._listeners:
            listener(snapshot)
        return snapshot

    async def toggle(self) -> bool:
        """Flip the workflow relative to the last known state and return the new state."""
        resolution = await self._resolver.resolve_toggle(not self._workflow_active)
        self._workflow_active = resolution.value
        logger.info("workflow_toggled", active=resolution.value, source=resolution.source.value)
        return resolution.value
