"""Anthropic Claude API client wrapper."""

import time
from typing import Any
from uuid import UUID

import anthropic

from contractsathi.config import Settings, get_settings
from contractsathi.infrastructure.ai.client import AIResponse, ai_retry
from contractsathi.infrastructure.ai.cost_tracker import CostTracker
from contractsathi.shared.exceptions import AIRateLimitError, AIServiceError, AITimeoutError
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

IMAGE_MIME_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class AnthropicClient:
    """Wrapper for Anthropic Claude API.

    Features:
    - Automatic cost tracking
    - Explicit timeout plus one bounded retry
    - Native PDF document blocks for extraction
    """

    def __init__(
        self,
        cost_tracker: CostTracker | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.client = anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.ai_timeout_seconds,
            max_retries=0,
        )
        self.default_model = settings.anthropic_model
        self.default_max_tokens = settings.ai_max_tokens
        self.max_attempts = settings.ai_max_attempts
        self.cost_tracker = cost_tracker or CostTracker()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.1,
        action: str = "ai_completion",
        resource_id: UUID | None = None,
    ) -> AIResponse:
        """Send a completion request to Claude."""
        return await self._create(
            system_prompt,
            [{"role": "user", "content": user_prompt}],
            model=model or self.default_model,
            max_tokens=max_tokens or self.default_max_tokens,
            temperature=temperature,
            action=action,
            resource_id=resource_id,
        )

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
    ) -> AIResponse:
        """Send a PDF or image to Claude for transcription."""
        _ = filename
        source = {"type": "base64", "media_type": mime_type, "data": document_base64}
        if mime_type == "application/pdf":
            block: dict[str, Any] = {"type": "document", "source": source}
        elif mime_type in IMAGE_MIME_TYPES:
            block = {"type": "image", "source": source}
        else:
            raise AIServiceError(f"Document type {mime_type} is not supported by Claude")

        return await self._create(
            system_prompt,
            [{"role": "user", "content": [block, {"type": "text", "text": user_prompt}]}],
            model=self.default_model,
            max_tokens=max_tokens or self.default_max_tokens,
            temperature=temperature,
            action=action,
            resource_id=resource_id,
        )

    @ai_retry
    async def _create(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        *,
        model: str,
        max_tokens: int,
        temperature: float,
        action: str,
        resource_id: UUID | None,
    ) -> AIResponse:
        start_time = time.monotonic()

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=messages,  # type: ignore[arg-type]
            )
        except anthropic.APITimeoutError as e:
            logger.warning("ai_timeout", provider="anthropic", model=model, error=str(e))
            raise AITimeoutError("AI request timed out")
        except anthropic.RateLimitError as e:
            logger.warning("ai_rate_limited", provider="anthropic", error=str(e))
            raise AIRateLimitError("AI service is overloaded. Please try again later.")
        except anthropic.APIStatusError as e:
            logger.error("ai_api_error", provider="anthropic", status=e.status_code, error=str(e))
            raise AIServiceError(f"AI service error: {e.status_code}")
        except anthropic.APIConnectionError as e:
            logger.error("ai_connection_error", provider="anthropic", error=str(e))
            raise AIServiceError("Connection to AI service failed")
        except Exception as e:
            logger.exception("ai_unexpected_error", provider="anthropic", error=str(e))
            raise AIServiceError(f"Unexpected AI error: {e}")

        latency_ms = (time.monotonic() - start_time) * 1000

        usage_record = self.cost_tracker.record(
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            action=action,
            resource_id=resource_id,
        )

        logger.debug(
            "ai_completion_success",
            provider="anthropic",
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            latency_ms=round(latency_ms, 2),
        )

        text = "".join(
            getattr(block, "text", "") for block in response.content if block.type == "text"
        )

        return AIResponse(
            content=text,
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            total_tokens=usage_record.total_tokens,
            cost_cents=usage_record.cost_cents,
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        await self.client.close()
