"""Automation data resolver: answers dashboard queries through a fixed tier chain.

Each query tries, in order, the local dashboard API, the workflow engine and
finally the mock generator. The first tier that answers wins and the result
is labelled with the data source that produced it. Upstream failures never
reach the caller; they are reported as ``TierEvent`` objects to whichever
listeners were registered.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Iterable, Literal, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from automation_dashboard.clients.local_api import LocalApiClient
from automation_dashboard.clients.workflow_engine import WorkflowEngineClient
from automation_dashboard.core.models import AutomationMetrics, ProcessedMessage, WorkflowStatus
from automation_dashboard.core.types import DataSource, Tier
from automation_dashboard.errors import DashboardError, ResolutionError, UpstreamError
from automation_dashboard.log import get_logger
from automation_dashboard.resolver.mock import MockDataGenerator

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

Outcome = Literal["success", "failed", "skipped"]

# Labels the local API uses when it is itself serving placeholder data.
SIMULATED_LABELS = frozenset({"mock", "simulation", "fallback", "n8n-fallback"})


@dataclass(frozen=True, slots=True)
class TierEvent:
    query: str
    tier: Tier
    outcome: Outcome
    elapsed_seconds: float = 0.0
    error: Optional[str] = None


@dataclass(frozen=True)
class Resolution(Generic[T]):
    value: T
    source: DataSource
    events: tuple[TierEvent, ...] = field(default_factory=tuple)


TierListener = Callable[[TierEvent], None]
Fetch = Callable[[], Awaitable[tuple[T, DataSource]]]


@dataclass(frozen=True)
class _Attempt(Generic[T]):
    tier: Tier
    configured: bool
    fetch: Fetch[T]


def _local_source(reported: Any) -> DataSource:
    if isinstance(reported, str) and reported.lower() in SIMULATED_LABELS:
        return DataSource.SIMULATION
    return DataSource.LIVE_API


def _parse(model: type[M], payload: Any, query: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise UpstreamError(502, f"invalid {query} payload ({e.error_count()} errors)") from e


def _unwrap_single(payload: Any) -> Any:
    # n8n webhooks answer with a one-item list when "respond with all items" is set.
    if isinstance(payload, list) and len(payload) == 1 and isinstance(payload[0], dict):
        return payload[0]
    return payload


def _message_items(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("messages", "data", "items"):
            if isinstance(payload.get(key), list):
                return payload[key]
    raise UpstreamError(502, "messages payload is not a list")


class AutomationDataResolver:
    """Resolves metrics, messages, workflow status and workflow toggles."""

    def __init__(
        self,
        local_api: LocalApiClient,
        engine: WorkflowEngineClient,
        mock: MockDataGenerator,
        listeners: Iterable[TierListener] = (),
    ):
        self._local_api = local_api
        self._engine = engine
        self._mock = mock
        self._listeners: list[TierListener] = list(listeners)
        # Toggles are queued and applied in arrival order; the last request wins.
        self._toggle_lock = asyncio.Lock()

    def add_listener(self, listener: TierListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: TierEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.debug("tier_listener_failed", query=event.query, tier=event.tier.value, error=str(e))

    async def _resolve(
        self,
        query: str,
        attempts: list[_Attempt[T]],
        fallback: Callable[[], T],
    ) -> Resolution[T]:
        events: list[TierEvent] = []

        def record(event: TierEvent) -> None:
            events.append(event)
            self._emit(event)

        for attempt in attempts:
            if not attempt.configured:
                record(TierEvent(query, attempt.tier, "skipped", error="not configured"))
                continue
            started = time.perf_counter()
            try:
                value, source = await attempt.fetch()
            except DashboardError as e:
                record(
                    TierEvent(
                        query,
                        attempt.tier,
                        "failed",
                        time.perf_counter() - started,
                        f"{e.code}: {e}",
                    )
                )
                continue
            record(TierEvent(query, attempt.tier, "success", time.perf_counter() - started))
            return Resolution(value, source, tuple(events))

        started = time.perf_counter()
        try:
            value = fallback()
        except Exception as e:
            record(TierEvent(query, Tier.MOCK, "failed", time.perf_counter() - started, str(e)))
            raise ResolutionError(f"No tier could answer {query}: {e}", query=query) from e
        record(TierEvent(query, Tier.MOCK, "success", time.perf_counter() - started))
        return Resolution(value, DataSource.MOCK, tuple(events))

    # ------------------------------------------------------------------ #
    #  Metrics                                                           #
    # ------------------------------------------------------------------ #
    @staticmethod
    def _metrics_from_payload(payload: Any, source: DataSource) -> AutomationMetrics:
        payload = _unwrap_single(payload)
        if not isinstance(payload, dict):
            raise UpstreamError(502, "metrics payload is not an object")
        data = dict(payload)
        data.pop("dataSource", None)
        data.pop("data_source", None)
        metrics = _parse(AutomationMetrics, data, "metrics")
        if metrics.category_counts.total() > metrics.total_messages:
            # Tolerated on live data; only the mock generator enforces the bound.
            logger.debug(
                "category_counts_exceed_total",
                category_total=metrics.category_counts.total(),
                total_messages=metrics.total_messages,
                source=source.value,
            )
        return metrics.model_copy(update={"data_source": source})

    async def resolve_metrics(self, time_range: str = "24h") -> Resolution[AutomationMetrics]:
        async def from_local() -> tuple[AutomationMetrics, DataSource]:
            payload = await self._local_api.metrics(time_range)
            reported = payload.get("dataSource") if isinstance(payload, dict) else None
            source = _local_source(reported)
            return self._metrics_from_payload(payload, source), source

        async def from_webhook() -> tuple[AutomationMetrics, DataSource]:
            payload = await self._engine.webhook_metrics(time_range)
            source = DataSource.LIVE_WEBHOOK
            return self._metrics_from_payload(payload, source), source

        return await self._resolve(
            "metrics",
            [
                _Attempt(Tier.LOCAL_API, self._local_api.configured, from_local),
                _Attempt(Tier.WORKFLOW_ENGINE, self._engine.webhooks_configured, from_webhook),
            ],
            self._mock.metrics,
        )

    async def get_metrics(self, time_range: str = "24h") -> AutomationMetrics:
        return (await self.resolve_metrics(time_range)).value

    # ------------------------------------------------------------------ #
    #  Messages                                                          #
    # ------------------------------------------------------------------ #
    @staticmethod
    def _messages_from_payload(payload: Any, limit: int) -> list[ProcessedMessage]:
        messages = [_parse(ProcessedMessage, item, "message") for item in _message_items(payload)]
        messages.sort(key=lambda m: m.timestamp_ms, reverse=True)
        return messages[:limit]

    async def resolve_messages(self, limit: int = 20) -> Resolution[list[ProcessedMessage]]:
        limit = max(0, limit)

        async def from_local() -> tuple[list[ProcessedMessage], DataSource]:
            payload = await self._local_api.messages(limit)
            return self._messages_from_payload(payload, limit), DataSource.LIVE_API

        async def from_webhook() -> tuple[list[ProcessedMessage], DataSource]:
            payload = await self._engine.webhook_messages(limit)
            return self._messages_from_payload(payload, limit), DataSource.LIVE_WEBHOOK

        return await self._resolve(
            "messages",
            [
                _Attempt(Tier.LOCAL_API, self._local_api.configured, from_local),
                _Attempt(Tier.WORKFLOW_ENGINE, self._engine.webhooks_configured, from_webhook),
            ],
            lambda: self._mock.messages(limit),
        )

    async def get_recent_messages(self, limit: int = 20) -> list[ProcessedMessage]:
        return (await self.resolve_messages(limit)).value

    # ------------------------------------------------------------------ #
    #  Workflow status                                                   #
    # ------------------------------------------------------------------ #
    async def resolve_workflow_status(self) -> Resolution[WorkflowStatus]:
        async def from_local() -> tuple[WorkflowStatus, DataSource]:
            payload = await self._local_api.workflow_status()
            if not isinstance(payload, dict):
                raise UpstreamError(502, "workflow status payload is not an object")
            source = _local_source(payload.get("dataSource"))
            data = {k: v for k, v in payload.items() if k not in ("dataSource", "data_source")}
            status = _parse(WorkflowStatus, data, "workflow status")
            return status.model_copy(update={"data_source": source}), source

        async def from_engine() -> tuple[WorkflowStatus, DataSource]:
            workflow = await self._engine.get_workflow()
            if not isinstance(workflow.get("active"), bool):
                raise UpstreamError(502, "workflow payload has no 'active' flag")
            try:
                last_execution = await self._engine.last_execution()
            except DashboardError:
                last_execution = None
            source = DataSource.LIVE_ENGINE
            return (
                WorkflowStatus(
                    active=workflow["active"],
                    last_execution=last_execution,
                    data_source=source,
                ),
                source,
            )

        return await self._resolve(
            "workflow_status",
            [
                _Attempt(Tier.LOCAL_API, self._local_api.configured, from_local),
                _Attempt(Tier.WORKFLOW_ENGINE, self._engine.management_configured, from_engine),
            ],
            self._mock.workflow_status,
        )

    async def get_workflow_status(self) -> WorkflowStatus:
        return (await self.resolve_workflow_status()).value

    # ------------------------------------------------------------------ #
    #  Workflow toggle                                                   #
    # ------------------------------------------------------------------ #
    async def resolve_toggle(self, desired_active: bool) -> Resolution[bool]:
        async def from_local() -> tuple[bool, DataSource]:
            payload = await self._local_api.toggle_workflow(desired_active)
            if not isinstance(payload, dict) or not isinstance(payload.get("active"), bool):
                raise UpstreamError(502, "toggle payload has no 'active' flag")
            return payload["active"], _local_source(payload.get("dataSource"))

        async def from_engine() -> tuple[bool, DataSource]:
            payload = await self._engine.set_active(desired_active)
            active = desired_active
            if isinstance(payload, dict) and isinstance(payload.get("active"), bool):
                active = payload["active"]
            return active, DataSource.LIVE_ENGINE

        async with self._toggle_lock:
            return await self._resolve(
                "toggle_workflow",
                [
                    _Attempt(Tier.LOCAL_API, self._local_api.configured, from_local),
                    _Attempt(Tier.WORKFLOW_ENGINE, self._engine.management_configured, from_engine),
                ],
                lambda: self._mock.toggle(desired_active),
            )

    async def toggle_workflow(self, desired_active: bool) -> bool:
        return (await self.resolve_toggle(desired_active)).value
