"""Client for the intermediary dashboard API (resolver tier 1)."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from automation_dashboard.clients.base import JsonHttpClient
from automation_dashboard.config import LocalApiConfig
from automation_dashboard.core.models import HealthReport
from automation_dashboard.errors import ConfigurationError


class LocalApiClient:
    """Thin wrapper over the ``/api/*`` routes. Returns raw JSON payloads."""

    def __init__(self, config: LocalApiConfig, client: Optional[httpx.AsyncClient] = None):
        self._config = config
        self._http: JsonHttpClient | None = None
        if config.base_url:
            headers = {"Accept": "application/json"}
            if config.api_key:
                headers["Authorization"] = f"Bearer {config.api_key}"
            self._http = JsonHttpClient(
                config.base_url,
                timeout=config.timeout,
                headers=headers,
                client=client,
                name="local_api",
            )

    @property
    def configured(self) -> bool:
        return self._http is not None

    def _require(self) -> JsonHttpClient:
        if self._http is None:
            raise ConfigurationError("Local API base URL is not configured", setting="local_api.base_url")
        return self._http

    async def aclose(self) -> None:
        if self._http:
            await self._http.aclose()

    async def health(self) -> HealthReport:
        payload = await self._require().get_json("/api/health")
        return HealthReport.model_validate(payload or {"status": "unknown"})

    async def metrics(self, time_range: str) -> Any:
        return await self._require().get_json("/api/metrics", params={"timeRange": time_range})

    async def messages(self, limit: int) -> Any:
        return await self._require().get_json("/api/messages", params={"limit": limit})

    async def workflow_status(self) -> Any:
        return await self._require().get_json("/api/workflow/status")

    async def toggle_workflow(self, active: bool) -> Any:
        return await self._require().post_json("/api/workflow/toggle", json_body={"active": active})
