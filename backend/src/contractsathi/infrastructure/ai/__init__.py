"""AI infrastructure for contract extraction and analysis."""

from contractsathi.infrastructure.ai.anthropic_client import AnthropicClient
from contractsathi.infrastructure.ai.client import AIResponse, OpenAIClient
from contractsathi.infrastructure.ai.cost_tracker import CostTracker

__all__ = [
    "AnthropicClient",
    "AIResponse",
    "CostTracker",
    "OpenAIClient",
]
