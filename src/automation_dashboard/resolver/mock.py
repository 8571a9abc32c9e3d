"""Placeholder data used when no live source answers.

Generation is pure computation over an injected ``random.Random`` and
clock, so it cannot fail and is reproducible under a fixed seed.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from automation_dashboard.config import DEFAULT_MODEL
from automation_dashboard.core.classifier import extract_price_range
from automation_dashboard.core.models import (
    AIMetrics,
    AutomationMetrics,
    CategoryCounts,
    HourlyStat,
    ProcessedMessage,
    TokenUsage,
    WorkflowExecution,
    WorkflowStatus,
)
from automation_dashboard.core.types import (
    DataSource,
    Domain,
    ExecutionStatus,
    MessageStatus,
    MessageType,
)

# Baselines observed on the production workflow.
BASE_TOTAL_MESSAGES = 1247
BASE_AUTO_REPLIES = 1189
BASE_AVG_RESPONSE_TIME = 1.2
BASE_TOTAL_TOKENS = 156789
BASE_CATEGORIES = {
    "websites": 456,
    "portfolios": 289,
    "projects": 312,
    "custom_projects": 190,
    "other": 0,
}
COST_PER_TOKEN_USD = 2.34 / BASE_TOTAL_TOKENS

JITTER = 0.08
TOKEN_JITTER = 0.10
RESPONSE_TIME_JITTER = 0.2
MIN_RESPONSE_TIME = 0.1
MAX_MOCK_MESSAGES = 100
WINDOW_MS = 24 * 60 * 60 * 1000

RECIPIENT_POOL = (
    "+1234567890",
    "+1234567891",
    "+1234567892",
    "+1234567893",
    "+1234567894",
)


@dataclass(frozen=True, slots=True)
class MessageTemplate:
    input: str
    output: str
    type: MessageType
    domain: Optional[Domain]
    intent: Optional[str]
    response_time: float
    prompt_tokens: int
    completion_tokens: int


MESSAGE_TEMPLATES: tuple[MessageTemplate, ...] = (
    MessageTemplate(
        input="Hi, I need a website for my business. What are your prices?",
        output=(
            "Hello! Our website prices range from ₹800 to ₹2000+ depending on complexity. "
            "For business websites, we typically charge ₹1200-₹2000. "
            "Would you like more details about features included?"
        ),
        type=MessageType.PRODUCT_INQUIRY,
        domain=Domain.WEBSITES,
        intent="pricing",
        response_time=1.1,
        prompt_tokens=89,
        completion_tokens=156,
    ),
    MessageTemplate(
        input="Can you show me some portfolio examples?",
        output=(
            "I'd be happy to share our portfolio examples! Our portfolio websites range "
            "from ₹400 to ₹800. Here are some recent examples: [Portfolio links would be shared here]"
        ),
        type=MessageType.PRODUCT_INQUIRY,
        domain=Domain.PORTFOLIOS,
        intent="examples",
        response_time=0.9,
        prompt_tokens=67,
        completion_tokens=98,
    ),
    MessageTemplate(
        input="I need a custom AI chatbot for my website",
        output=(
            "That sounds like an interesting custom project! To provide an accurate quote, "
            "I'll need more details: What's the purpose of the chatbot? What features do you "
            "need? What's your deadline? Custom projects vary in price based on complexity."
        ),
        type=MessageType.PRODUCT_INQUIRY,
        domain=Domain.CUSTOM_PROJECTS,
        intent="custom_quote",
        response_time=1.5,
        prompt_tokens=78,
        completion_tokens=187,
    ),
    MessageTemplate(
        input="What kind of projects do you work on?",
        output=(
            "We work on various types of projects ranging from ₹400 to ₹1000+: Mini-projects, "
            "Academic projects, AI/ML projects, Web applications, and more. "
            "What specific type of project are you looking for?"
        ),
        type=MessageType.PRODUCT_INQUIRY,
        domain=Domain.PROJECTS,
        intent="inquiry",
        response_time=1.3,
        prompt_tokens=56,
        completion_tokens=134,
    ),
    MessageTemplate(
        input="Hello there!",
        output=(
            "Hello! Welcome to our digital services. We specialize in websites, portfolios, "
            "and custom projects. How can I help you today?"
        ),
        type=MessageType.GREETING,
        domain=None,
        intent=None,
        response_time=0.8,
        prompt_tokens=45,
        completion_tokens=89,
    ),
)


class MockDataGenerator:
    """Produces jittered, always-valid placeholder dashboard data."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        workflow_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._model = model
        self._workflow_id = workflow_id or "unknown"
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _jitter(self, base: float, spread: float = JITTER) -> float:
        return max(0.0, base * (1 + self._rng.uniform(-spread, spread)))

    def _jitter_int(self, base: int, spread: float = JITTER) -> int:
        return max(0, round(self._jitter(base, spread)))

    def metrics(self) -> AutomationMetrics:
        total = self._jitter_int(BASE_TOTAL_MESSAGES)
        replies = min(self._jitter_int(BASE_AUTO_REPLIES), total)

        categories = {name: self._jitter_int(base) for name, base in BASE_CATEGORIES.items()}
        category_sum = sum(categories.values())
        if category_sum > total:
            scale = total / category_sum
            categories = {name: int(count * scale) for name, count in categories.items()}

        hourly = []
        for hour in range(24):
            messages = self._rng.randint(10, 59)
            hourly.append(
                HourlyStat(hour=hour, messages=messages, replies=min(messages, self._rng.randint(8, 52)))
            )

        tokens = self._jitter_int(BASE_TOTAL_TOKENS)
        return AutomationMetrics(
            total_messages=total,
            auto_replies=replies,
            response_rate=round(replies / total * 100, 1) if total else 0.0,
            avg_response_time_seconds=round(self._jitter(BASE_AVG_RESPONSE_TIME), 2),
            category_counts=CategoryCounts(**categories),
            hourly_stats=hourly,
            ai_metrics=AIMetrics(
                total_tokens_used=tokens,
                avg_tokens_per_response=tokens // replies if replies else 0,
                model_usage={self._model: replies},
                cost_estimate_usd=round(tokens * COST_PER_TOKEN_USD, 2),
            ),
            last_updated=self._clock(),
            data_source=DataSource.MOCK,
        )

    def messages(self, limit: int) -> list[ProcessedMessage]:
        """Up to ``MAX_MOCK_MESSAGES`` messages, newest first, unique timestamps."""
        count = max(0, min(limit, MAX_MOCK_MESSAGES))
        if count == 0:
            return []

        now_ms = int(self._clock().timestamp() * 1000)
        offsets = self._rng.sample(range(WINDOW_MS), count)

        messages = []
        for i, offset in enumerate(offsets):
            template = MESSAGE_TEMPLATES[i % len(MESSAGE_TEMPLATES)]
            prompt = self._jitter_int(template.prompt_tokens, TOKEN_JITTER)
            completion = self._jitter_int(template.completion_tokens, TOKEN_JITTER)
            response_time = template.response_time + self._rng.uniform(
                -RESPONSE_TIME_JITTER, RESPONSE_TIME_JITTER
            )
            messages.append(
                ProcessedMessage(
                    id=f"mock_{uuid.UUID(int=self._rng.getrandbits(128)).hex[:12]}",
                    recipient_number=RECIPIENT_POOL[i % len(RECIPIENT_POOL)],
                    timestamp_ms=now_ms - offset,
                    input=template.input,
                    output=template.output,
                    type=template.type,
                    intent=template.intent,
                    domain=template.domain,
                    price_range=extract_price_range(template.output),
                    status=MessageStatus.REPLIED,
                    response_time_seconds=round(max(MIN_RESPONSE_TIME, response_time), 2),
                    ai_model=self._model,
                    token_usage=TokenUsage.of(prompt, completion),
                )
            )

        messages.sort(key=lambda m: m.timestamp_ms, reverse=True)
        return messages

    def workflow_status(self) -> WorkflowStatus:
        now = self._clock()
        return WorkflowStatus(
            active=True,
            last_execution=WorkflowExecution(
                id="mock_exec",
                workflow_id=self._workflow_id,
                status=ExecutionStatus.SUCCESS,
                started_at=now - timedelta(seconds=120),
                finished_at=now - timedelta(seconds=119),
            ),
            data_source=DataSource.MOCK,
        )

    def toggle(self, desired_active: bool) -> bool:
        # Nothing is persisted: a later workflow_status() still reports active.
        return desired_active
