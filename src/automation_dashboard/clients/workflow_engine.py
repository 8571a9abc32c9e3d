"""Client for the n8n workflow engine (resolver tier 2).

Two surfaces are used: the dashboard webhooks exposed by the workflow itself
(read-only metrics and messages) and the engine's management API (workflow
status, activation, executions). The management API always needs the
workflow id and API key; the webhooks only need the base URL.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import httpx

from automation_dashboard.clients.base import JsonHttpClient
from automation_dashboard.config import WorkflowEngineConfig
from automation_dashboard.core.models import WorkflowExecution
from automation_dashboard.core.types import ExecutionStatus
from automation_dashboard.errors import ConfigurationError

_STATUS_MAP = {
    "success": ExecutionStatus.SUCCESS,
    "error": ExecutionStatus.ERROR,
    "crashed": ExecutionStatus.ERROR,
    "canceled": ExecutionStatus.ERROR,
    "running": ExecutionStatus.RUNNING,
    "new": ExecutionStatus.RUNNING,
    "waiting": ExecutionStatus.WAITING,
}


class WorkflowEngineClient:
    def __init__(self, config: WorkflowEngineConfig, client: Optional[httpx.AsyncClient] = None):
        self._config = config
        self._http: JsonHttpClient | None = None
        if config.base_url:
            self._http = JsonHttpClient(
                config.base_url,
                timeout=config.timeout,
                headers={"Accept": "application/json"},
                client=client,
                name="workflow_engine",
            )

    @property
    def webhooks_configured(self) -> bool:
        return self._config.webhooks_configured

    @property
    def management_configured(self) -> bool:
        return self._config.management_configured

    async def aclose(self) -> None:
        if self._http:
            await self._http.aclose()

    def _webhook_http(self) -> JsonHttpClient:
        if self._http is None:
            raise ConfigurationError(
                "Workflow engine base URL is not configured", setting="workflow_engine.base_url"
            )
        return self._http

    def _management_http(self) -> tuple[JsonHttpClient, str]:
        http = self._webhook_http()
        if not self._config.workflow_id:
            raise ConfigurationError(
                "Workflow id is not configured", setting="workflow_engine.workflow_id"
            )
        if not self._config.api_key:
            raise ConfigurationError(
                "Workflow engine API key is not configured", setting="workflow_engine.api_key"
            )
        return http, self._config.workflow_id

    def _key_header(self) -> dict[str, str]:
        if not self._config.api_key:
            return {}
        return {self._config.api_key_header: self._config.api_key}

    # ------------------------------------------------------------------ #
    #  Webhooks                                                          #
    # ------------------------------------------------------------------ #
    async def webhook_metrics(self, time_range: str) -> Any:
        return await self._webhook_http().get_json(
            "/webhook/dashboard-metrics",
            params={"timeRange": time_range},
            headers=self._key_header(),
        )

    async def webhook_messages(self, limit: int) -> Any:
        return await self._webhook_http().get_json(
            "/webhook/dashboard-messages",
            params={"limit": limit},
            headers=self._key_header(),
        )

    # ------------------------------------------------------------------ #
    #  Management API                                                    #
    # ------------------------------------------------------------------ #
    async def get_workflow(self) -> dict[str, Any]:
        http, workflow_id = self._management_http()
        payload = await http.get_json(f"/api/v1/workflows/{workflow_id}", headers=self._key_header())
        return payload if isinstance(payload, dict) else {}

    async def set_active(self, active: bool) -> Any:
        http, workflow_id = self._management_http()
        action = "activate" if active else "deactivate"
        return await http.post_json(
            f"/api/v1/workflows/{workflow_id}/{action}", headers=self._key_header()
        )

    async def last_execution(self) -> Optional[WorkflowExecution]:
        """Most recent execution of the workflow, or None if the engine has none."""
        http, workflow_id = self._management_http()
        payload = await http.get_json(
            "/api/v1/executions",
            params={"workflowId": workflow_id, "limit": 1},
            headers=self._key_header(),
        )
        items = payload.get("data", []) if isinstance(payload, dict) else []
        if not items or not isinstance(items[0], dict):
            return None
        try:
            return self._execution_from_api(items[0], workflow_id)
        except (KeyError, TypeError, ValueError, AttributeError):
            # Unparseable execution record; status is still usable without it.
            return None

    async def list_workflows(self) -> Any:
        """Used as a connection test: succeeds only with a valid key."""
        http = self._webhook_http()
        if not self._config.api_key:
            raise ConfigurationError(
                "Workflow engine API key is not configured", setting="workflow_engine.api_key"
            )
        return await http.get_json("/api/v1/workflows", headers=self._key_header())

    # -------- converters -------------------------------------------------- #
    @staticmethod
    def _execution_from_api(item: dict[str, Any], workflow_id: str) -> WorkflowExecution:
        raw_status = item.get("status")
        if raw_status in _STATUS_MAP:
            status = _STATUS_MAP[raw_status]
        elif item.get("finished"):
            status = ExecutionStatus.SUCCESS
        elif not item.get("stoppedAt"):
            status = ExecutionStatus.RUNNING
        else:
            status = ExecutionStatus.ERROR

        stopped_at = item.get("stoppedAt")
        return WorkflowExecution(
            id=str(item.get("id", "")),
            workflow_id=str(item.get("workflowId") or workflow_id),
            status=status,
            started_at=datetime.fromisoformat(item["startedAt"].replace("Z", "+00:00")),
            finished_at=(
                datetime.fromisoformat(stopped_at.replace("Z", "+00:00")) if stopped_at else None
            ),
            data=item.get("data"),
        )
