"""Tests for the HTTP client layer."""

import json

import httpx
import pytest

from automation_dashboard.clients.base import JsonHttpClient
from automation_dashboard.clients.local_api import LocalApiClient
from automation_dashboard.clients.workflow_engine import WorkflowEngineClient
from automation_dashboard.config import LocalApiConfig, WorkflowEngineConfig
from automation_dashboard.core.models import HealthReport
from automation_dashboard.core.types import ExecutionStatus
from automation_dashboard.errors import ConfigurationError, NetworkError, UpstreamError

from conftest import ENGINE_URL, LOCAL_URL


@pytest.fixture
def json_client(http_client):
    return JsonHttpClient(LOCAL_URL, timeout=2, client=http_client, name="test")


class TestJsonHttpClient:
    @pytest.mark.asyncio
    async def test_decodes_json(self, json_client, upstream):
        upstream.add("GET", f"{LOCAL_URL}/api/health", json={"status": "ok"})

        assert await json_client.get_json("/api/health") == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, json_client, upstream):
        upstream.add("POST", f"{LOCAL_URL}/x", httpx.Response(204))

        assert await json_client.post_json("x") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"error": {"message": "nested"}}, "nested"),
            ({"error": "flat"}, "flat"),
            ({"message": "plain"}, "plain"),
            ({}, "Not Found"),
        ],
    )
    async def test_error_status_message(self, json_client, upstream, body, expected):
        upstream.add("GET", f"{LOCAL_URL}/missing", json=body, status=404)

        with pytest.raises(UpstreamError) as exc_info:
            await json_client.get_json("/missing")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == expected
        assert exc_info.value.url == f"{LOCAL_URL}/missing"

    @pytest.mark.asyncio
    async def test_non_json_body(self, json_client, upstream):
        upstream.add("GET", f"{LOCAL_URL}/html", httpx.Response(200, text="<html></html>"))

        with pytest.raises(UpstreamError, match="non-JSON"):
            await json_client.get_json("/html")

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self, json_client, upstream):
        upstream.add("GET", f"{LOCAL_URL}/slow", httpx.ReadTimeout("slow"))

        with pytest.raises(NetworkError, match="timed out"):
            await json_client.get_json("/slow")

    @pytest.mark.asyncio
    async def test_every_request_has_timeout(self, json_client, upstream):
        upstream.add("GET", f"{LOCAL_URL}/ok", json={})

        await json_client.get_json("/ok")

        assert upstream.requests[0].extensions["timeout"]["read"] == 2

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, json_client, http_client):
        await json_client.aclose()
        assert not http_client.is_closed


class TestLocalApiClient:
    @pytest.mark.asyncio
    async def test_unconfigured(self):
        client = LocalApiClient(LocalApiConfig())

        assert client.configured is False
        with pytest.raises(ConfigurationError):
            await client.metrics("24h")

    @pytest.mark.asyncio
    async def test_bearer_key(self, http_client, upstream):
        upstream.add("GET", f"{LOCAL_URL}/api/health", json={"status": "healthy", "n8nConnected": True})
        client = LocalApiClient(LocalApiConfig(base_url=LOCAL_URL, api_key="secret"), client=http_client)

        report = await client.health()

        assert report.status == "healthy"
        assert report.n8n_connected is True
        assert upstream.requests[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_toggle_body(self, http_client, upstream):
        upstream.add("POST", f"{LOCAL_URL}/api/workflow/toggle", json={"active": True})
        client = LocalApiClient(LocalApiConfig(base_url=LOCAL_URL), client=http_client)

        await client.toggle_workflow(True)

        assert json.loads(upstream.requests[0].content) == {"active": True}


class TestWorkflowEngineClient:
    @pytest.mark.asyncio
    async def test_management_requires_workflow_id(self, http_client):
        client = WorkflowEngineClient(WorkflowEngineConfig(base_url=ENGINE_URL, api_key="k"), client=http_client)

        assert client.webhooks_configured is True
        assert client.management_configured is False
        with pytest.raises(ConfigurationError) as exc_info:
            await client.get_workflow()
        assert exc_info.value.setting == "workflow_engine.workflow_id"

    @pytest.mark.asyncio
    async def test_custom_key_header(self, http_client, upstream):
        config = WorkflowEngineConfig(
            base_url=ENGINE_URL, workflow_id="wf1", api_key="k", api_key_header="X-N8N-API-KEY"
        )
        upstream.add("GET", f"{ENGINE_URL}/api/v1/workflows", json={"data": []})

        await WorkflowEngineClient(config, client=http_client).list_workflows()

        assert upstream.requests[0].headers["X-N8N-API-KEY"] == "k"

    @pytest.mark.asyncio
    async def test_last_execution_empty(self, http_client, upstream, engine_config):
        upstream.add("GET", f"{ENGINE_URL}/api/v1/executions", json={"data": []})

        assert await WorkflowEngineClient(engine_config, client=http_client).last_execution() is None

    @pytest.mark.asyncio
    async def test_last_execution_unparseable(self, http_client, upstream, engine_config):
        upstream.add("GET", f"{ENGINE_URL}/api/v1/executions", json={"data": [{"id": 1, "startedAt": "soon"}]})

        assert await WorkflowEngineClient(engine_config, client=http_client).last_execution() is None

    @pytest.mark.parametrize(
        "item, expected",
        [
            ({"status": "crashed"}, ExecutionStatus.ERROR),
            ({"status": "waiting"}, ExecutionStatus.WAITING),
            ({"finished": True}, ExecutionStatus.SUCCESS),
            ({"finished": False}, ExecutionStatus.RUNNING),
            ({"finished": False, "stoppedAt": "2026-03-01T10:00:05Z"}, ExecutionStatus.ERROR),
        ],
    )
    def test_execution_status_mapping(self, item, expected):
        item = {"id": "9", "startedAt": "2026-03-01T10:00:00Z", **item}

        execution = WorkflowEngineClient._execution_from_api(item, "wf1")

        assert execution.status == expected
        assert execution.workflow_id == "wf1"


class TestResponseDecoding:
    @pytest.mark.asyncio
    async def test_bad_content_encoding_is_network_error(self, json_client, upstream):
        upstream.add(
            "GET",
            f"{LOCAL_URL}/api/metrics",
            lambda request: httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip")
            ),
        )

        with pytest.raises(NetworkError, match="request failed"):
            await json_client.get_json("/api/metrics")

    def test_health_report_digit_alias(self):
        report = HealthReport.model_validate({"status": "healthy", "n8nConnected": True})

        assert report.n8n_connected is True
        assert report.to_wire()["n8nConnected"] is True
