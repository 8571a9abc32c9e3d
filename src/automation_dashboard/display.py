"""Plain-text rendering of dashboard objects for the CLI."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from automation_dashboard.core.models import (
    AITestResult,
    AutomationMetrics,
    ConnectionCheck,
    DashboardSnapshot,
    ProcessedMessage,
    WorkflowStatus,
)
from automation_dashboard.core.types import DataSource

_SPARK = " ▁▂▃▄▅▆▇█"


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return "Not configured"
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}…{value[-4:]}"


def source_label(source: Optional[DataSource]) -> str:
    if source is None:
        return "unknown"
    if source in (DataSource.MOCK, DataSource.SIMULATION):
        return f"{source.value} (placeholder data)"
    return source.value


def _sparkline(values: list[int]) -> str:
    if not values:
        return ""
    peak = max(values) or 1
    return "".join(_SPARK[round(v / peak * (len(_SPARK) - 1))] for v in values)


def format_metrics(metrics: AutomationMetrics) -> str:
    c = metrics.category_counts
    ai = metrics.ai_metrics
    lines = [
        f"Metrics [{source_label(metrics.data_source)}] updated {metrics.last_updated:%Y-%m-%d %H:%M:%S}",
        f"  Messages     : {metrics.total_messages} total, {metrics.auto_replies} auto-replied "
        f"({metrics.response_rate:.1f}%)",
        f"  Avg response : {metrics.avg_response_time_seconds:.2f}s",
        f"  Categories   : websites={c.websites} portfolios={c.portfolios} projects={c.projects} "
        f"custom={c.custom_projects} other={c.other}",
        f"  Tokens       : {ai.total_tokens_used} total, {ai.avg_tokens_per_response}/response, "
        f"~${ai.cost_estimate_usd:.2f}",
    ]
    if ai.model_usage:
        usage = ", ".join(f"{model}={count}" for model, count in ai.model_usage.items())
        lines.append(f"  Models       : {usage}")
    if metrics.hourly_stats:
        lines.append(f"  Hourly       : {_sparkline([h.messages for h in metrics.hourly_stats])}")
    return "\n".join(lines)


def format_message(message: ProcessedMessage) -> str:
    when = datetime.fromtimestamp(message.timestamp_ms / 1000, tz=timezone.utc)
    tag = message.domain.value if message.domain else message.type.value
    line = f"  [{when:%H:%M:%S}] {message.recipient_number} ({tag}, {message.status.value}) {message.input}"
    details = []
    if message.price_range:
        details.append(f"price {message.price_range}")
    if message.response_time_seconds is not None:
        details.append(f"{message.response_time_seconds:.2f}s")
    if message.token_usage:
        details.append(f"{message.token_usage.total} tokens")
    if details:
        line += f"  [{', '.join(details)}]"
    return line


def format_messages(messages: list[ProcessedMessage], source: Optional[DataSource] = None) -> str:
    header = f"Recent messages [{source_label(source)}]: {len(messages)}"
    if not messages:
        return header + "\n  (none)"
    return "\n".join([header, *(format_message(m) for m in messages)])


def format_status(status: WorkflowStatus) -> str:
    state = "ACTIVE" if status.active else "INACTIVE"
    line = f"Workflow {state} [{source_label(status.data_source)}]"
    execution = status.last_execution
    if execution:
        line += f"\n  Last execution {execution.id}: {execution.status.value} at {execution.started_at:%Y-%m-%d %H:%M:%S}"
    return line


def format_snapshot(snapshot: DashboardSnapshot) -> str:
    parts = [f"=== Refresh #{snapshot.request_id} at {snapshot.refreshed_at:%H:%M:%S} ==="]
    if snapshot.error:
        parts.append(f"ERROR: {snapshot.error} (retrying on next refresh)")
    if snapshot.workflow_status:
        parts.append(format_status(snapshot.workflow_status))
    if snapshot.metrics:
        parts.append(format_metrics(snapshot.metrics))
    parts.append(format_messages(snapshot.messages, snapshot.messages_source))
    return "\n".join(parts)


def format_ai_result(result: AITestResult) -> str:
    usage = result.token_usage
    return (
        f"{result.response}\n\n"
        f"--- {result.response_time_seconds:.2f}s, tokens: "
        f"{usage.prompt} prompt + {usage.completion} completion = {usage.total}"
    )


def format_checks(checks: list[ConnectionCheck]) -> str:
    lines = []
    for check in checks:
        mark = "OK  " if check.ok else "FAIL"
        detail = f" - {check.detail}" if check.detail else ""
        lines.append(f"  {mark} {check.target} ({check.elapsed_seconds:.2f}s){detail}")
    return "\n".join(lines)
