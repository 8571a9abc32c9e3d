"""Application orchestrator - wires all components from one config object."""

from __future__ import annotations

import random
import time
from typing import Awaitable, Callable, Optional

import httpx

from automation_dashboard.ai.client import OpenRouterClient
from automation_dashboard.ai.tester import AITestInvoker
from automation_dashboard.clients.local_api import LocalApiClient
from automation_dashboard.clients.workflow_engine import WorkflowEngineClient
from automation_dashboard.config import AppConfig
from automation_dashboard.core.models import ConnectionCheck, HealthReport
from automation_dashboard.errors import DashboardError
from automation_dashboard.log import get_logger, log_tier_event
from automation_dashboard.resolver.mock import MockDataGenerator
from automation_dashboard.resolver.resolver import AutomationDataResolver
from automation_dashboard.services.monitor import DashboardMonitor

logger = get_logger(__name__)


async def _timed_check(target: str, call: Callable[[], Awaitable[object]]) -> ConnectionCheck:
    started = time.perf_counter()
    try:
        await call()
    except DashboardError as e:
        return ConnectionCheck(
            target=target,
            ok=False,
            detail=f"{e.code}: {e}",
            elapsed_seconds=time.perf_counter() - started,
        )
    return ConnectionCheck(target=target, ok=True, elapsed_seconds=time.perf_counter() - started)


class DashboardApp:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config: AppConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.local_api = LocalApiClient(config.local_api, client=http_client)
        self.engine = WorkflowEngineClient(config.workflow_engine, client=http_client)
        self.ai_client = OpenRouterClient(config.openrouter, client=http_client)
        self.mock = MockDataGenerator(
            model=config.openrouter.model,
            workflow_id=config.workflow_engine.workflow_id,
            rng=rng,
        )
        self.resolver = AutomationDataResolver(
            self.local_api, self.engine, self.mock, listeners=[log_tier_event]
        )
        self.ai_tester = AITestInvoker(self.ai_client)
        self.monitor = DashboardMonitor(self.resolver, config.dashboard)

    async def __aenter__(self) -> DashboardApp:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Release monitor and HTTP clients."""
        await self.monitor.stop()
        for client in (self.local_api, self.engine, self.ai_client):
            try:
                await client.aclose()
            except Exception as e:
                logger.error("client_close_error", error=str(e))
        logger.info("dashboard_closed")

    async def local_health(self) -> HealthReport:
        return await self.local_api.health()

    async def check_connections(self) -> list[ConnectionCheck]:
        """Probe every configured upstream; unconfigured ones are reported as such."""
        checks: list[ConnectionCheck] = []

        if self.local_api.configured:
            checks.append(await _timed_check("local_api", self.local_api.health))
        else:
            checks.append(ConnectionCheck(target="local_api", ok=False, detail="not configured"))

        if self.engine.webhooks_configured:
            checks.append(await _timed_check("workflow_engine", self.engine.list_workflows))
        else:
            checks.append(ConnectionCheck(target="workflow_engine", ok=False, detail="not configured"))

        if self.ai_client.configured:
            checks.append(await _timed_check("openrouter", self.ai_client.check_connection))
        else:
            checks.append(ConnectionCheck(target="openrouter", ok=False, detail="not configured"))

        for check in checks:
            logger.info("connection_checked", target=check.target, ok=check.ok, detail=check.detail)
        return checks
