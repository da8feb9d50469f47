"""Generated PDF report reference."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contractsathi.infrastructure.database.models.base import Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from contractsathi.infrastructure.database.models.contract import Contract


class Report(Base, UUIDPrimaryKeyMixin):
    """Latest PDF report of a contract (one row per contract)."""

    __tablename__ = "reports"

    contract_id: Mapped[UUID] = mapped_column(
        ForeignKey("contracts.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    pdf_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    generated_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    contract: Mapped["Contract"] = relationship("Contract", back_populates="report")

    def __repr__(self) -> str:
        return f"<Report contract={self.contract_id}>"
