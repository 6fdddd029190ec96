"""LLM adapters for sales analysis.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for testing.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
CREDITS_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add credits."
ANALYSIS_FAILED_MESSAGE = "AI analysis failed"


class LLMServiceError(Exception):
    """Transport-level failure talking to the model provider.

    Attributes:
        message: User-facing error text.
        status_code: HTTP status the API layer should answer with.
    """

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The user prompt.
            system_prompt: Optional system instructions sent ahead of it.

        Returns:
            Raw string response from the model (expected to contain JSON).

        Raises:
            LLMServiceError: On provider or transport failure.
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 2048,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            api_key: API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible gateways.
        """
        try:
            import openai  # type: ignore[import-untyped]
        except ImportError as exc:
            raise ImportError(
                "openai package is required for OpenAILLMAdapter. "
                "Install it with: pip install openai"
            ) from exc

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        client_kwargs: dict = {"api_key": resolved_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._openai = openai
        self._client = openai.OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Call the chat completion API with a system and a user message."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=self._max_tokens,
                stream=False,
            )
        except self._openai.APIError as exc:
            raise map_provider_error(exc) from exc

        return response.choices[0].message.content or ""


def map_provider_error(exc: Exception) -> LLMServiceError:
    """Translate an OpenAI client exception into an LLMServiceError."""
    status_code = getattr(exc, "status_code", None)
    code = getattr(exc, "code", None)

    if status_code == 402 or code == "insufficient_quota":
        logger.warning("AI provider reports exhausted credits: %s", exc)
        return LLMServiceError(CREDITS_EXHAUSTED_MESSAGE, 402)
    if status_code == 429:
        logger.warning("AI provider rate limit hit: %s", exc)
        return LLMServiceError(RATE_LIMIT_MESSAGE, 429)

    logger.error("AI provider error status=%s: %s", status_code, exc)
    return LLMServiceError(ANALYSIS_FAILED_MESSAGE, 502)


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "trends": ["Mock trend for testing purposes."],
    "patterns": ["Mock pattern for testing purposes."],
    "predictions": ["Mock prediction for testing purposes."],
    "risks": ["No real risk - this is a test fixture."],
    "insights": ["Verify integration with the dashboard."],
    "summary": "Mock summary for testing purposes.",
}

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid JSON response.

    Used for local testing and CI pipelines where no LLM API
    is available.
    """

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        return _MOCK_RESPONSE_JSON


def build_adapter(settings) -> BaseLLMAdapter:
    """Create the adapter named by ``settings.adapter``.

    Args:
        settings: An ``app.config.LLMSettings`` instance.
    """
    if settings.adapter == "mock":
        return MockLLMAdapter()
    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )
