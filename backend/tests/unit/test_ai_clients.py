"""Unit tests for the AI provider clients and the client factory.

The provider SDK calls are mocked; no network traffic.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import openai
import pytest

from contractsathi.config import Settings
from contractsathi.infrastructure.ai.anthropic_client import AnthropicClient
from contractsathi.infrastructure.ai.client import OpenAIClient
from contractsathi.infrastructure.ai.cost_tracker import DEFAULT_PRICING, CostTracker
from contractsathi.infrastructure.ai.factory import build_ai_client
from contractsathi.shared.exceptions import AIRateLimitError, AIServiceError, AITimeoutError

REQUEST = httpx.Request("POST", "https://api.test/v1/chat/completions")


def _settings(**overrides) -> Settings:
    values = {
        "openai_api_key": "sk-test",
        "anthropic_api_key": "sk-ant-test",
        "ai_max_attempts": 1,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _openai_completion(content: str) -> MagicMock:
    completion = MagicMock()
    completion.choices = [MagicMock(message=MagicMock(content=content))]
    completion.usage = MagicMock(prompt_tokens=1_000, completion_tokens=500)
    return completion


def _openai_client(settings: Settings | None = None) -> OpenAIClient:
    client = OpenAIClient(settings=settings or _settings())
    client.client = MagicMock()
    client.client.chat.completions.create = AsyncMock()
    return client


class TestOpenAIClient:
    """Chat completions wrapper."""

    @pytest.mark.asyncio
    async def test_complete_records_usage(self):
        client = _openai_client()
        client.client.chat.completions.create.return_value = _openai_completion('{"a": 1}')
        resource_id = uuid.uuid4()

        response = await client.complete("system", "user", resource_id=resource_id)

        assert response.content == '{"a": 1}'
        assert response.total_tokens == 1_500
        assert response.cost_cents > 0
        [record] = client.cost_tracker.records
        assert record.resource_id == resource_id
        messages = client.client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "system"}

    @pytest.mark.asyncio
    async def test_pdf_sent_as_file_part(self):
        client = _openai_client()
        client.client.chat.completions.create.return_value = _openai_completion("text")

        await client.complete_with_document(
            "system", "transcribe", "JVBERi0=", "application/pdf", filename="scan.pdf"
        )

        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == client.vision_model
        part = kwargs["messages"][1]["content"][1]
        assert part["type"] == "file"
        assert part["file"]["filename"] == "scan.pdf"
        assert part["file"]["file_data"] == "data:application/pdf;base64,JVBERi0="

    @pytest.mark.asyncio
    async def test_image_sent_as_image_url(self):
        client = _openai_client()
        client.client.chat.completions.create.return_value = _openai_completion("text")

        await client.complete_with_document("system", "transcribe", "iVBOR", "image/png")

        part = client.client.chat.completions.create.call_args.kwargs["messages"][1]["content"][1]
        assert part == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBOR"}}

    @pytest.mark.asyncio
    async def test_timeout_mapped(self):
        client = _openai_client()
        client.client.chat.completions.create.side_effect = openai.APITimeoutError(REQUEST)

        with pytest.raises(AITimeoutError):
            await client.complete("system", "user")

    @pytest.mark.asyncio
    async def test_rate_limit_mapped(self):
        client = _openai_client()
        client.client.chat.completions.create.side_effect = openai.RateLimitError(
            "slow down",
            response=httpx.Response(429, request=REQUEST),
            body=None,
        )

        with pytest.raises(AIRateLimitError):
            await client.complete("system", "user")

    @pytest.mark.asyncio
    async def test_one_bounded_retry(self):
        client = _openai_client(_settings(ai_max_attempts=2))
        client.client.chat.completions.create.side_effect = [
            openai.APIConnectionError(request=REQUEST),
            _openai_completion("ok"),
        ]

        response = await client.complete("system", "user")

        assert response.content == "ok"
        assert client.client.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_retries_exhausted(self):
        client = _openai_client(_settings(ai_max_attempts=2))
        client.client.chat.completions.create.side_effect = openai.APITimeoutError(REQUEST)

        with pytest.raises(AITimeoutError):
            await client.complete("system", "user")

        assert client.client.chat.completions.create.await_count == 2


class TestAnthropicClient:
    """Messages API wrapper."""

    def _client(self) -> AnthropicClient:
        client = AnthropicClient(settings=_settings(ai_provider="anthropic"))
        client.client = MagicMock()
        client.client.messages.create = AsyncMock()
        return client

    def _message(self, text: str) -> MagicMock:
        message = MagicMock()
        message.content = [MagicMock(type="text", text=text)]
        message.usage = MagicMock(input_tokens=200, output_tokens=100)
        return message

    @pytest.mark.asyncio
    async def test_pdf_sent_as_document_block(self):
        client = self._client()
        client.client.messages.create.return_value = self._message("contract text")

        response = await client.complete_with_document(
            "system", "transcribe", "JVBERi0=", "application/pdf"
        )

        assert response.content == "contract text"
        kwargs = client.client.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        block = kwargs["messages"][0]["content"][0]
        assert block["type"] == "document"
        assert block["source"] == {
            "type": "base64",
            "media_type": "application/pdf",
            "data": "JVBERi0=",
        }

    @pytest.mark.asyncio
    async def test_docx_not_supported(self):
        client = self._client()

        with pytest.raises(AIServiceError):
            await client.complete_with_document(
                "system",
                "transcribe",
                "UEsDBA==",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            )

        client.client.messages.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout_mapped(self):
        client = self._client()
        client.client.messages.create.side_effect = anthropic.APITimeoutError(REQUEST)

        with pytest.raises(AITimeoutError):
            await client.complete("system", "user")


class TestFactory:
    """Provider selection."""

    def test_no_key_means_no_client(self):
        assert build_ai_client(_settings(openai_api_key="")) is None

    def test_openai_selected(self):
        assert isinstance(build_ai_client(_settings()), OpenAIClient)

    def test_anthropic_selected(self):
        assert isinstance(build_ai_client(_settings(ai_provider="anthropic")), AnthropicClient)


class TestCostTracker:
    """Cost accounting."""

    def test_known_model_pricing(self):
        cost = CostTracker().calculate_cost("gpt-4o", 1_000_000, 0)

        assert cost == pytest.approx(250.0)

    def test_unknown_model_uses_default(self):
        cost = CostTracker().calculate_cost("mystery-model", 0, 1_000_000)

        assert cost == pytest.approx(DEFAULT_PRICING[1] * 100)

    def test_history_bounded(self):
        tracker = CostTracker(max_records=2)
        for _ in range(3):
            tracker.record("gpt-4o", 10, 10, action="contract_analysis")

        summary = tracker.summary()
        assert summary["call_count"] == 2
        assert summary["by_action"] == {"contract_analysis": 2}

    def test_cost_for_contract(self):
        tracker = CostTracker()
        contract_id = uuid.uuid4()
        tracker.record("gpt-4o", 1_000_000, 0, action="document_extraction", resource_id=contract_id)
        tracker.record("gpt-4o", 1_000_000, 0, action="contract_analysis", resource_id=contract_id)
        tracker.record("gpt-4o", 1_000_000, 0, action="contract_analysis")

        assert tracker.cost_for(contract_id) == pytest.approx(500.0)
