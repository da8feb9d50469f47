"""AI client factory - returns the configured AI provider."""

from functools import lru_cache
from typing import Protocol
from uuid import UUID

from contractsathi.config import Settings, get_settings
from contractsathi.infrastructure.ai.anthropic_client import AnthropicClient
from contractsathi.infrastructure.ai.client import AIResponse, OpenAIClient
from contractsathi.infrastructure.ai.cost_tracker import CostTracker
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)


class AIClient(Protocol):
    """Protocol for AI clients."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.1,
        action: str = "ai_completion",
        resource_id: UUID | None = None,
    ) -> AIResponse: ...

    async def complete_with_document(
        self,
        system_prompt: str,
        user_prompt: str,
        document_base64: str,
        mime_type: str,
        filename: str = "document",
        max_tokens: int | None = None,
        temperature: float = 0.0,
        action: str = "document_extraction",
        resource_id: UUID | None = None,
    ) -> AIResponse: ...

    async def close(self) -> None: ...


@lru_cache(maxsize=1)
def get_cost_tracker() -> CostTracker:
    """Get a shared CostTracker instance."""
    return CostTracker()


def build_ai_client(
    settings: Settings,
    *,
    cost_tracker: CostTracker | None = None,
) -> OpenAIClient | AnthropicClient | None:
    """Build the configured client, or None when the provider has no API key.

    A missing key is not fatal: extraction and analysis fall back to their
    fixed content.
    """
    provider = settings.ai_provider
    if not settings.ai_api_key:
        logger.warning("ai_provider_not_configured", provider=provider)
        return None

    logger.info(
        "using_ai_provider",
        provider=provider,
        model=settings.anthropic_model if provider == "anthropic" else settings.openai_model,
    )
    if provider == "anthropic":
        return AnthropicClient(cost_tracker=cost_tracker, settings=settings)
    return OpenAIClient(cost_tracker=cost_tracker, settings=settings)


@lru_cache(maxsize=1)
def _get_cached_ai_client() -> OpenAIClient | AnthropicClient | None:
    return build_ai_client(get_settings(), cost_tracker=get_cost_tracker())


def get_ai_client() -> OpenAIClient | AnthropicClient | None:
    """Get the shared AI client based on settings.

    Usage:
        # In .env:
        AI_PROVIDER=openai  # or "anthropic"
        OPENAI_API_KEY=sk-...

        # In code:
        client = get_ai_client()
        if client is not None:
            response = await client.complete(system, user)
    """
    return _get_cached_ai_client()


async def close_ai_client() -> None:
    """Close and clear the shared AI client (used at app shutdown)."""
    if _get_cached_ai_client.cache_info().currsize:
        client = _get_cached_ai_client()
        if client is not None:
            await client.close()
    _get_cached_ai_client.cache_clear()
    get_cost_tracker.cache_clear()
