"""AI test invoker: one ad-hoc prompt against the business reply agent."""

from __future__ import annotations

import time

from pydantic import ValidationError

from automation_dashboard.ai.client import AIClient
from automation_dashboard.ai.prompts import BUSINESS_SYSTEM_PROMPT, NO_RESPONSE_PLACEHOLDER
from automation_dashboard.core.models import AITestResult, TokenUsage
from automation_dashboard.errors import UpstreamError
from automation_dashboard.log import get_logger

logger = get_logger(__name__)

TEST_TEMPERATURE = 0.7
TEST_MAX_TOKENS = 1000


class AITestInvoker:
    """Sends a user prompt with the business system prompt and times the round trip.

    There is no retry and no fallback: ``ConfigurationError``,
    ``UpstreamError`` and ``NetworkError`` propagate to the caller.
    """

    def __init__(self, client: AIClient, system_prompt: str = BUSINESS_SYSTEM_PROMPT):
        self._client = client
        self._system_prompt = system_prompt

    async def test_business_response(self, user_text: str) -> AITestResult:
        started = time.perf_counter()
        response = await self._client.chat(
            system=self._system_prompt,
            messages=[{"role": "user", "content": user_text}],
            max_tokens=TEST_MAX_TOKENS,
            temperature=TEST_TEMPERATURE,
        )
        elapsed = time.perf_counter() - started

        try:
            usage = TokenUsage(
                prompt=response.prompt_tokens,
                completion=response.completion_tokens,
                total=response.total_tokens,
            )
        except ValidationError as e:
            raise UpstreamError(502, f"provider returned inconsistent token usage: {e.errors()[0]['msg']}") from e

        logger.info(
            "ai_test_completed",
            model=self._client.model_name,
            total_tokens=usage.total,
            elapsed=round(elapsed, 3),
        )
        return AITestResult(
            response=response.text or NO_RESPONSE_PLACEHOLDER,
            token_usage=usage,
            response_time_seconds=elapsed,
        )
