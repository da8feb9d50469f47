"""Tagged outcome for pipeline stages that degrade instead of failing.

Extraction and analysis never raise on upstream model problems; they return
either the real result or a fixed substitute. ``Outcome`` keeps the two
distinguishable for callers and tests. Hard failures (database, storage)
are still raised as exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class OutcomeKind(str, Enum):
    """Kind of a stage outcome."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a stage: genuine output or fallback output plus a reason."""

    kind: OutcomeKind
    value: T
    reason: str | None = None

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(kind=OutcomeKind.OK, value=value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(kind=OutcomeKind.DEGRADED, value=value, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.kind == OutcomeKind.OK

    @property
    def is_degraded(self) -> bool:
        return self.kind == OutcomeKind.DEGRADED
