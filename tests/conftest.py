"""Shared fixtures: a routable fake upstream behind httpx.MockTransport."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from automation_dashboard.clients.local_api import LocalApiClient
from automation_dashboard.clients.workflow_engine import WorkflowEngineClient
from automation_dashboard.config import LocalApiConfig, OpenRouterConfig, WorkflowEngineConfig
from automation_dashboard.resolver.mock import MockDataGenerator
from automation_dashboard.resolver.resolver import AutomationDataResolver

LOCAL_URL = "http://local.test"
ENGINE_URL = "http://n8n.test"
OPENROUTER_URL = "http://openrouter.test/api/v1"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

Route = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """Routes requests by (method, host, path); unknown routes answer 404."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        route: Optional[Route] = None,
        *,
        json: Any = None,
        status: int = 200,
    ) -> None:
        parsed = httpx.URL(url)
        if route is None:
            # Fresh response per request; a route may be hit more than once.
            route = lambda request: httpx.Response(status, json=json)  # noqa: E731
        self.routes[(method, parsed.host, parsed.path)] = route

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"message": "no route"}})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    def calls(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


def metrics_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "totalMessages": 500,
        "autoReplies": 480,
        "responseRate": 96.0,
        "avgResponseTime": 1.4,
        "categoryCounts": {
            "websites": 200,
            "portfolios": 100,
            "projects": 100,
            "customProjects": 50,
            "other": 10,
        },
        "hourlyStats": [{"hour": h, "messages": 20, "replies": 19} for h in range(24)],
        "aiMetrics": {
            "totalTokensUsed": 60000,
            "avgTokensPerResponse": 125,
            "modelUsage": {"google/gemma-3-12b-it": 480},
            "costEstimate": 0.9,
        },
        "lastUpdated": "2026-03-01T11:59:00Z",
    }
    payload.update(overrides)
    return payload


def message_payload(msg_id: str, timestamp: int, **overrides: Any) -> dict[str, Any]:
    payload = {
        "id": msg_id,
        "recipientNumber": "+15550001",
        "timestamp": timestamp,
        "input": "Hi, I need a website",
        "output": "Websites range from ₹800 to ₹2000+",
        "type": "product_inquiry",
        "domain": "websites",
        "status": "replied",
        "responseTime": 1.1,
        "aiModel": "google/gemma-3-12b-it",
        "tokenUsage": {"prompt": 80, "completion": 120, "total": 200},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream: FakeUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def local_config() -> LocalApiConfig:
    return LocalApiConfig(base_url=LOCAL_URL)


@pytest.fixture
def engine_config() -> WorkflowEngineConfig:
    return WorkflowEngineConfig(base_url=ENGINE_URL, workflow_id="wf1", api_key="engine-key")


@pytest.fixture
def openrouter_config() -> OpenRouterConfig:
    return OpenRouterConfig(api_key="sk-test", base_url=OPENROUTER_URL)


@pytest.fixture
def mock_generator() -> MockDataGenerator:
    return MockDataGenerator(
        workflow_id="wf1",
        rng=random.Random(1234),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_resolver(http_client: httpx.AsyncClient, mock_generator: MockDataGenerator):
    """Build a resolver with only the given tiers configured."""

    def _make(
        local: Optional[LocalApiConfig] = None,
        engine: Optional[WorkflowEngineConfig] = None,
        listeners: tuple = (),
    ) -> AutomationDataResolver:
        return AutomationDataResolver(
            LocalApiClient(local or LocalApiConfig(), client=http_client),
            WorkflowEngineClient(engine or WorkflowEngineConfig(), client=http_client),
            mock_generator,
            listeners=listeners,
        )

    return _make
