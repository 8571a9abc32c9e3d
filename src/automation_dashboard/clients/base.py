"""Timeout-bounded JSON over HTTP, with upstream failures mapped to dashboard errors."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from automation_dashboard.errors import NetworkError, UpstreamError
from automation_dashboard.log import get_logger

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Best-effort human message from an error response body."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:200] or response.reason_phrase or "Unknown error"

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase or "Unknown error"


class JsonHttpClient:
    """Small wrapper over ``httpx.AsyncClient`` used by every upstream client.

    Every request carries an explicit timeout. An injected client is used
    as-is and left open on ``aclose()``; it lets tests route traffic through
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        name: str = "upstream",
    ):
        self.base_url = base_url.rstrip("/")
        self.name = name
        self._timeout = httpx.Timeout(timeout)
        self._headers = dict(headers or {})
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (``None`` when empty)."""
        url = self.url(path)
        merged = {**self._headers, **(headers or {})}
        log = logger.bind(upstream=self.name, method=method, url=url)

        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=merged,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            log.debug("http_timeout", error=str(e))
            raise NetworkError(f"{self.name} timed out: {url}", url=url) from e
        except httpx.TransportError as e:
            log.debug("http_transport_error", error=str(e))
            raise NetworkError(f"{self.name} unreachable: {e}", url=url) from e
        except httpx.RequestError as e:
            # Decoding failures and redirect loops while reading the response.
            log.debug("http_request_error", error=str(e))
            raise NetworkError(f"{self.name} request failed: {e}", url=url) from e

        if not response.is_success:
            message = _error_message(response)
            log.debug("http_error_status", status=response.status_code, message=message)
            raise UpstreamError(response.status_code, message, url=url)

        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamError(
                response.status_code, f"{self.name} returned a non-JSON body", url=url
            ) from e

    async def get_json(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post_json(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)
