"""AI client abstraction with an OpenRouter chat-completions backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from automation_dashboard.clients.base import JsonHttpClient
from automation_dashboard.config import OpenRouterConfig
from automation_dashboard.core.models import ModelInfo
from automation_dashboard.errors import ConfigurationError, UpstreamError
from automation_dashboard.log import get_logger

logger = get_logger(__name__)


@dataclass
class AIResponse:
    """Unified response from any AI backend."""

    text: Optional[str]  # None when the provider returned no choices
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    model: str = ""
    raw: Any = None  # Backend-specific raw response


class AIClient(ABC):
    """Abstract base class for AI backends."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> AIResponse:
        """Send a conversation to the AI and return a response."""
        ...

    async def aclose(self) -> None:
        return None


class OpenRouterClient(AIClient):
    """OpenRouter backend (OpenAI-compatible ``/chat/completions``)."""

    def __init__(self, config: OpenRouterConfig, client: Optional[httpx.AsyncClient] = None):
        self._config = config
        headers = {"Content-Type": "application/json", "X-Title": config.app_title}
        if config.referer:
            headers["HTTP-Referer"] = config.referer
        self._http = JsonHttpClient(
            config.base_url,
            timeout=config.timeout,
            headers=headers,
            client=client,
            name="openrouter",
        )

    @property
    def model_name(self) -> str:
        return self._config.model

    @property
    def configured(self) -> bool:
        return self._config.api_key is not None

    async def aclose(self) -> None:
        await self._http.aclose()

    def _auth(self) -> dict[str, str]:
        if not self._config.api_key:
            raise ConfigurationError("OpenRouter API key not configured", setting="openrouter.api_key")
        return {"Authorization": f"Bearer {self._config.api_key}"}

    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> AIResponse:
        headers = self._auth()
        body = {
            "model": self._config.model,
            "messages": ([{"role": "system", "content": system}] if system else []) + messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }

        logger.debug("api_request", model=self._config.model, message_count=len(body["messages"]))
        data = await self._http.post_json("/chat/completions", json_body=body, headers=headers)
        if not isinstance(data, dict):
            raise UpstreamError(502, "chat completion payload is not an object")

        try:
            choices = data.get("choices") or []
            text = None
            if choices:
                text = (choices[0].get("message") or {}).get("content")

            usage = data.get("usage") or {}
            response = AIResponse(
                text=text,
                prompt_tokens=int(usage.get("prompt_tokens", 0)),
                completion_tokens=int(usage.get("completion_tokens", 0)),
                total_tokens=int(usage.get("total_tokens", 0)),
                model=data.get("model", self._config.model),
                raw=data,
            )
        except (AttributeError, TypeError, ValueError, KeyError) as e:
            raise UpstreamError(502, f"malformed chat completion payload: {e}") from e
        logger.debug(
            "api_response",
            model=response.model,
            prompt_tokens=response.prompt_tokens,
            completion_tokens=response.completion_tokens,
        )
        return response

    async def generate_response(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AIResponse:
        """Single user prompt with an optional system message."""
        return await self.chat(
            system=system or "",
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens if max_tokens is not None else self._config.max_tokens,
            temperature=temperature if temperature is not None else self._config.temperature,
        )

    async def list_models(self) -> list[dict[str, Any]]:
        data = await self._http.get_json("/models", headers=self._auth())
        if isinstance(data, dict) and isinstance(data.get("data"), list):
            return data["data"]
        raise UpstreamError(502, "models payload has no 'data' list")

    async def check_connection(self) -> bool:
        """Connection test: succeeds only when the key is accepted."""
        await self.list_models()
        return True

    async def get_model_info(self) -> Optional[ModelInfo]:
        """Catalogue entry for the configured model, or None if the provider doesn't list it."""
        for entry in await self.list_models():
            if isinstance(entry, dict) and entry.get("id") == self._config.model:
                return ModelInfo.model_validate(entry)
        return None
