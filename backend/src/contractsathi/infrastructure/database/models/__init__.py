"""SQLAlchemy ORM models."""

from contractsathi.infrastructure.database.models.base import Base, TimestampMixin
from contractsathi.infrastructure.database.models.chat import ChatQuery
from contractsathi.infrastructure.database.models.contract import (
    AnalysisSource,
    AnalysisStatus,
    Clause,
    ClauseRisk,
    Contract,
    RiskLevel,
)
from contractsathi.infrastructure.database.models.report import Report
from contractsathi.infrastructure.database.models.user import (
    LanguagePreference,
    SubscriptionPlan,
    User,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "LanguagePreference",
    "SubscriptionPlan",
    "Contract",
    "Clause",
    "AnalysisStatus",
    "AnalysisSource",
    "RiskLevel",
    "ClauseRisk",
    "Report",
    "ChatQuery",
]
