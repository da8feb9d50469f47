"""Logged user questions."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contractsathi.infrastructure.database.models.base import Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from contractsathi.infrastructure.database.models.user import User


class ChatQuery(Base, UUIDPrimaryKeyMixin):
    """A user question, optionally about one contract."""

    __tablename__ = "chat_queries"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    contract_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("contracts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="chat_queries")

    def __repr__(self) -> str:
        return f"<ChatQuery {self.message[:30]}>"
