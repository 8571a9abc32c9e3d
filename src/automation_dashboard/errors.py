"""Dashboard error hierarchy.

Every failure raised by an upstream client is one of these types. The data
resolver catches them per tier; the AI test invoker lets them propagate.
"""

from __future__ import annotations

from typing import Any, Optional


class DashboardError(Exception):
    """Base error for all dashboard exceptions."""

    code = "DASHBOARD_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NetworkError(DashboardError):
    """Connection failure or timeout talking to an upstream."""

    code = "NETWORK_ERROR"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, {"url": url})
        self.url = url


class UpstreamError(DashboardError):
    """A reachable upstream answered with a non-2xx status or an unusable body."""

    code = "UPSTREAM_ERROR"

    def __init__(self, status_code: int, message: str, url: Optional[str] = None):
        super().__init__(message, {"status_code": status_code, "url": url})
        self.status_code = status_code
        self.url = url

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


class ConfigurationError(DashboardError):
    """A required base URL, identifier or credential is not configured."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message, {"setting": setting})
        self.setting = setting


class ResolutionError(DashboardError):
    """Every tier, including the mock generator, failed to produce a value."""

    code = "RESOLUTION_ERROR"

    def __init__(self, message: str, query: Optional[str] = None):
        super().__init__(message, {"query": query})
        self.query = query
