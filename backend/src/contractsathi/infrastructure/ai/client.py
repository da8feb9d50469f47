"""OpenAI chat-completion client wrapper (default AI provider)."""

import time
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import openai
from openai import AsyncOpenAI
from tenacity import RetryCallState, retry, retry_if_exception_type, wait_exponential

from contractsathi.config import Settings, get_settings
from contractsathi.infrastructure.ai.cost_tracker import CostTracker
from contractsathi.shared.exceptions import AIRateLimitError, AIServiceError, AITimeoutError
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AIResponse:
    """Response from AI completion."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    cost_cents: float
    latency_ms: float


def stop_after_configured_attempts(retry_state: RetryCallState) -> bool:
    """Stop once the client's ``max_attempts`` is reached (client is ``args[0]``)."""
    client = retry_state.args[0]
    return retry_state.attempt_number >= client.max_attempts


# Shared by both provider clients: SDK-level retries are disabled so this is
# the only retry policy on outbound AI calls.
ai_retry = retry(
    stop=stop_after_configured_attempts,
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type(AIServiceError),
    reraise=True,
)


def document_data_url(document_base64: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{document_base64}"


class OpenAIClient:
    """Wrapper for the OpenAI chat completions API.

    Also works with OpenAI-compatible endpoints via ``OPENAI_BASE_URL``.
    Every call has an explicit timeout and at most ``AI_MAX_ATTEMPTS`` tries.
    """

    def __init__(
        self,
        cost_tracker: CostTracker | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.ai_timeout_seconds,
            max_retries=0,
        )
        self.default_model = settings.openai_model
        self.vision_model = settings.openai_vision_model
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
        """Send a text completion request.

        Raises:
            AIRateLimitError: If rate limited
            AITimeoutError: If the request timed out
            AIServiceError: For other API errors
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self._create(
            messages,
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
        """Send a document (base64) to the vision-capable model.

        PDFs and other files go as ``file`` parts, images as ``image_url`` parts.
        """
        url = document_data_url(document_base64, mime_type)
        if mime_type.startswith("image/"):
            document_part: dict[str, Any] = {"type": "image_url", "image_url": {"url": url}}
        else:
            document_part = {
                "type": "file",
                "file": {"filename": filename, "file_data": url},
            }

        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [{"type": "text", "text": user_prompt}, document_part],
            },
        ]
        return await self._create(
            messages,
            model=self.vision_model,
            max_tokens=max_tokens or self.default_max_tokens,
            temperature=temperature,
            action=action,
            resource_id=resource_id,
        )

    @ai_retry
    async def _create(
        self,
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
            response = await self.client.chat.completions.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=messages,  # type: ignore[arg-type]
            )
        except openai.APITimeoutError as e:
            logger.warning("ai_timeout", provider="openai", model=model, error=str(e))
            raise AITimeoutError("AI request timed out")
        except openai.RateLimitError as e:
            logger.warning("ai_rate_limited", provider="openai", error=str(e))
            raise AIRateLimitError("AI service is overloaded. Please try again later.")
        except openai.APIStatusError as e:
            logger.error("ai_api_error", provider="openai", status=e.status_code, error=str(e))
            raise AIServiceError(f"AI service error: {e.status_code}")
        except openai.APIConnectionError as e:
            logger.error("ai_connection_error", provider="openai", error=str(e))
            raise AIServiceError("Connection to AI service failed")
        except Exception as e:
            logger.exception("ai_unexpected_error", provider="openai", error=str(e))
            raise AIServiceError(f"Unexpected AI error: {e}")

        latency_ms = (time.monotonic() - start_time) * 1000
        input_tokens = response.usage.prompt_tokens if response.usage else 0
        output_tokens = response.usage.completion_tokens if response.usage else 0

        usage_record = self.cost_tracker.record(
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            action=action,
            resource_id=resource_id,
        )

        logger.debug(
            "ai_completion_success",
            provider="openai",
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            latency_ms=round(latency_ms, 2),
        )

        return AIResponse(
            content=response.choices[0].message.content or "",
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=usage_record.total_tokens,
            cost_cents=usage_record.cost_cents,
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        await self.client.close()
