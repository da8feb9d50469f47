"""Contract and clause models."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contractsathi.infrastructure.database.models.base import (
    Base,
    JSONType,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

if TYPE_CHECKING:
    from contractsathi.infrastructure.database.models.report import Report
    from contractsathi.infrastructure.database.models.user import User

# Length cap of the stored extracted text; the capped text is the dedup key
CONTENT_TEXT_MAX_CHARS = 10_000


class AnalysisStatus(str, Enum):
    """Lifecycle of a contract analysis."""

    PENDING = "pending"  # Row created at upload
    ANALYZING = "analyzing"  # Extraction/analysis in progress
    COMPLETED = "completed"  # Analysis persisted
    FAILED = "failed"  # Persistence failed


class RiskLevel(str, Enum):
    """Aggregate contract risk."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClauseRisk(str, Enum):
    """Per-clause risk tag."""

    SAFE = "safe"
    CAUTION = "caution"
    RISKY = "risky"


class AnalysisSource(str, Enum):
    """Where the stored analysis came from."""

    MODEL = "model"
    FALLBACK = "fallback"


class Contract(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Uploaded contract and its derived analysis fields."""

    __tablename__ = "contracts"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # File info
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Lifecycle
    status: Mapped[AnalysisStatus] = mapped_column(
        "analysis_status",
        String(20),
        default=AnalysisStatus.PENDING,
        nullable=False,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Derived fields (set only by the analysis write)
    contract_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    risk_score: Mapped[RiskLevel | None] = mapped_column(String(20), nullable=True)
    jurisdiction: Mapped[str | None] = mapped_column(String(255), nullable=True)
    arbitration_present: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    content_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    analysis_source: Mapped[AnalysisSource | None] = mapped_column(String(20), nullable=True)
    # executiveSummary, hindiSummary, redFlags, clientContext, extractionSource, degradedReasons
    analysis_metadata: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        default=dict,
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="contracts")
    clauses: Mapped[list["Clause"]] = relationship(
        "Clause",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="Clause.clause_number",
    )
    report: Mapped["Report | None"] = relationship(
        "Report",
        back_populates="contract",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Contract {self.filename} [{self.status}]>"

    @property
    def is_degraded(self) -> bool:
        return self.analysis_source == AnalysisSource.FALLBACK


class Clause(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One analyzed provision of a contract.

    ``clause_number`` is contiguous from 1 per contract; the repository
    assigns it at write time.
    """

    __tablename__ = "clauses"
    __table_args__ = (
        UniqueConstraint("contract_id", "clause_number", name="uq_clauses_contract_number"),
    )

    contract_id: Mapped[UUID] = mapped_column(
        ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    clause_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    clause_text: Mapped[str] = mapped_column(Text, nullable=False)
    summary_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary_hi: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk_score: Mapped[ClauseRisk] = mapped_column(String(20), nullable=False)
    suggestion: Mapped[str | None] = mapped_column(Text, nullable=True)
    flag_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    contract: Mapped["Contract"] = relationship("Contract", back_populates="clauses")

    def __repr__(self) -> str:
        return f"<Clause {self.clause_number}: {self.title}>"
