"""Token usage and cost accounting for model calls.

Every call is logged and exported to Prometheus. A bounded in-memory history
supports per-contract lookups while a pipeline run is still in flight; the
logs remain the durable record.
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from contractsathi.observability.metrics import record_ai_usage
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

# USD per 1M tokens (input, output)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4o": (2.50, 10.00),
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4.1": (2.00, 8.00),
    "claude-sonnet-4-20250514": (3.00, 15.00),
    "claude-3-5-haiku-20241022": (0.80, 4.00),
}
DEFAULT_PRICING = (5.00, 15.00)


@dataclass
class UsageRecord:
    model: str
    input_tokens: int
    output_tokens: int
    cost_cents: float
    action: str
    resource_id: UUID | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class CostTracker:
    def __init__(self, max_records: int = 1_000) -> None:
        self._buffer: deque[UsageRecord] = deque(maxlen=max_records)

    def calculate_cost(self, model: str, input_tokens: int, output_tokens: int) -> float:
        """Cost in US cents; unknown models are priced at ``DEFAULT_PRICING``."""
        if model in MODEL_PRICING:
            input_rate, output_rate = MODEL_PRICING[model]
        else:
            logger.warning("unknown_model_pricing", model=model)
            input_rate, output_rate = DEFAULT_PRICING
        dollars = (input_tokens * input_rate + output_tokens * output_rate) / 1_000_000
        return dollars * 100

    def record(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        action: str,
        resource_id: UUID | None = None,
    ) -> UsageRecord:
        record = UsageRecord(
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_cents=self.calculate_cost(model, input_tokens, output_tokens),
            action=action,
            resource_id=resource_id,
        )
        self._buffer.append(record)
        record_ai_usage(model, action, input_tokens, output_tokens, record.cost_cents)

        logger.debug(
            "ai_usage_recorded",
            model=model,
            action=action,
            total_tokens=record.total_tokens,
            cost_cents=round(record.cost_cents, 4),
        )
        return record

    @property
    def records(self) -> list[UsageRecord]:
        return list(self._buffer)

    def cost_for(self, resource_id: UUID) -> float:
        """Summed cost in cents of the buffered calls made for one contract."""
        return sum(r.cost_cents for r in self._buffer if r.resource_id == resource_id)

    def summary(self) -> dict[str, float | int | dict[str, int]]:
        return {
            "total_cost_cents": round(sum(r.cost_cents for r in self._buffer), 4),
            "total_tokens": sum(r.total_tokens for r in self._buffer),
            "call_count": len(self._buffer),
            "by_action": dict(Counter(r.action for r in self._buffer)),
        }
