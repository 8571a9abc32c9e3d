"""Dashboard data models.

Attributes are snake_case; the JSON wire format of the local API and the
workflow webhooks is camelCase, so every model accepts and emits both.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from automation_dashboard.core.types import (
    DataSource,
    Domain,
    ExecutionStatus,
    MessageStatus,
    MessageType,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        protected_namespaces=(),
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TokenUsage(WireModel):
    prompt: int = Field(ge=0)
    completion: int = Field(ge=0)
    total: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> TokenUsage:
        if self.total != self.prompt + self.completion:
            raise ValueError(
                f"total ({self.total}) must equal prompt + completion "
                f"({self.prompt} + {self.completion})"
            )
        return self

    @classmethod
    def of(cls, prompt: int, completion: int) -> TokenUsage:
        return cls(prompt=prompt, completion=completion, total=prompt + completion)


class CategoryCounts(WireModel):
    websites: int = Field(default=0, ge=0)
    portfolios: int = Field(default=0, ge=0)
    projects: int = Field(default=0, ge=0)
    custom_projects: int = Field(default=0, ge=0)
    other: int = Field(default=0, ge=0)

    def total(self) -> int:
        return self.websites + self.portfolios + self.projects + self.custom_projects + self.other


class HourlyStat(WireModel):
    hour: int = Field(ge=0, le=23)
    messages: int = Field(ge=0)
    replies: int = Field(ge=0)


class AIMetrics(WireModel):
    total_tokens_used: int = Field(default=0, ge=0)
    avg_tokens_per_response: int = Field(default=0, ge=0)
    model_usage: dict[str, int] = Field(default_factory=dict)
    cost_estimate_usd: float = Field(default=0.0, ge=0, alias="costEstimate")


class AutomationMetrics(WireModel):
    """Aggregate activity over one reporting window."""

    total_messages: int = Field(ge=0)
    auto_replies: int = Field(ge=0)
    response_rate: float = Field(ge=0, le=100)
    avg_response_time_seconds: float = Field(ge=0, alias="avgResponseTime")
    category_counts: CategoryCounts = Field(default_factory=CategoryCounts)
    hourly_stats: list[HourlyStat] = Field(default_factory=list)
    ai_metrics: AIMetrics = Field(default_factory=AIMetrics)
    last_updated: datetime = Field(default_factory=utcnow)
    data_source: DataSource = DataSource.ERROR


class ProcessedMessage(WireModel):
    """One logged conversation turn."""

    id: str
    recipient_number: str
    timestamp_ms: int = Field(alias="timestamp")
    input: str
    output: Optional[str] = None
    type: MessageType
    intent: Optional[str] = None
    domain: Optional[Domain] = None
    price_range: Optional[str] = None
    status: MessageStatus
    response_time_seconds: Optional[float] = Field(default=None, alias="responseTime")
    ai_model: Optional[str] = None
    token_usage: Optional[TokenUsage] = None


class WorkflowExecution(WireModel):
    id: str
    workflow_id: str
    status: ExecutionStatus
    started_at: datetime
    finished_at: Optional[datetime] = None
    data: Any = None  # raw engine payload, passed through untouched


class WorkflowStatus(WireModel):
    active: bool
    last_execution: Optional[WorkflowExecution] = None
    data_source: DataSource = DataSource.ERROR


class AITestResult(WireModel):
    response: str
    token_usage: TokenUsage
    response_time_seconds: float = Field(ge=0)


class HealthReport(WireModel):
    status: str
    timestamp: Optional[datetime] = None
    n8n_connected: bool = Field(default=False, alias="n8nConnected")  # to_camel gives "n8NConnected"
    workflow_id: Optional[str] = None


class ConnectionCheck(WireModel):
    target: str
    ok: bool
    detail: Optional[str] = None
    elapsed_seconds: float = 0.0


class ModelInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: Optional[str] = None
    context_length: Optional[int] = None
    pricing: dict[str, Any] = Field(default_factory=dict)


class DashboardSnapshot(WireModel):
    """Everything one refresh produced."""

    request_id: int
    refreshed_at: datetime = Field(default_factory=utcnow)
    metrics: Optional[AutomationMetrics] = None
    messages: list[ProcessedMessage] = Field(default_factory=list)
    messages_source: Optional[DataSource] = None
    workflow_status: Optional[WorkflowStatus] = None
    error: Optional[str] = None
