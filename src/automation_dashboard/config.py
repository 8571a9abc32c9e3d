"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_MODEL = "google/gemma-3-12b-it"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class LocalApiConfig(BaseModel):
    """Tier 1: the intermediary dashboard API."""

    base_url: Optional[str] = None  # e.g. "http://localhost:3001"
    api_key: Optional[str] = None
    timeout: float = 10.0

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def _normalize(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value

    @property
    def configured(self) -> bool:
        return self.base_url is not None


class WorkflowEngineConfig(BaseModel):
    """Tier 2: the n8n instance running the WhatsApp workflow."""

    base_url: Optional[str] = None
    workflow_id: Optional[str] = None
    api_key: Optional[str] = None
    api_key_header: str = "X-Workflow-Api-Key"  # n8n itself expects "X-N8N-API-KEY"
    timeout: float = 10.0

    @field_validator("base_url", "workflow_id", "api_key", mode="before")
    @classmethod
    def _normalize(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value

    @property
    def webhooks_configured(self) -> bool:
        return self.base_url is not None

    @property
    def management_configured(self) -> bool:
        return all([self.base_url, self.workflow_id, self.api_key])


class OpenRouterConfig(BaseModel):
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = "https://openrouter.ai/api/v1"
    timeout: float = 60.0
    temperature: float = 0.7
    max_tokens: int = 1000
    referer: Optional[str] = None
    app_title: str = "WhatsApp Automation Dashboard"

    @field_validator("api_key", "referer", mode="before")
    @classmethod
    def _normalize(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("model", mode="before")
    @classmethod
    def _default_model(cls, value: Optional[str]) -> str:
        return _blank_to_none(value) or DEFAULT_MODEL

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class DashboardConfig(BaseModel):
    refresh_interval_ms: int = Field(default=30000, gt=0)
    time_range: str = "24h"
    message_limit: int = Field(default=20, ge=0)
    timezone: str = "UTC"


class AppConfig(BaseModel):
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    local_api: LocalApiConfig = Field(default_factory=LocalApiConfig)
    workflow_engine: WorkflowEngineConfig = Field(default_factory=WorkflowEngineConfig)
    openrouter: OpenRouterConfig = Field(default_factory=OpenRouterConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values.

    Unset variables become empty strings, which the models read as
    "not configured".
    """

    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, text)


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation.

    A missing config file yields the all-default configuration, in which no
    live tier is configured.
    """
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        return AppConfig()

    raw_text = config_file.read_text(encoding="utf-8")
    data = yaml.safe_load(_interpolate_env_vars(raw_text)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_file}")

    return AppConfig(**data)
