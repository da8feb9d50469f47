"""User model."""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contractsathi.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

if TYPE_CHECKING:
    from contractsathi.infrastructure.database.models.chat import ChatQuery
    from contractsathi.infrastructure.database.models.contract import Contract


class LanguagePreference(str, Enum):
    """UI and summary language."""

    ENGLISH = "en"
    HINDI = "hi"


class SubscriptionPlan(str, Enum):
    """Subscription plans."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """User profile.

    Created at signup by the external auth system; edited on profile
    changes; never hard-deleted by this service.
    """

    __tablename__ = "users"

    # External auth reference
    auth_id: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    organization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(50), default="user", nullable=False)
    language_pref: Mapped[LanguagePreference] = mapped_column(
        String(10),
        default=LanguagePreference.ENGLISH,
        nullable=False,
    )
    plan: Mapped[SubscriptionPlan] = mapped_column(
        String(50),
        default=SubscriptionPlan.FREE,
        nullable=False,
    )

    # Relationships
    contracts: Mapped[list["Contract"]] = relationship(
        "Contract",
        back_populates="user",
    )
    chat_queries: Mapped[list["ChatQuery"]] = relationship(
        "ChatQuery",
        back_populates="user",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"

    @property
    def prefers_hindi(self) -> bool:
        return self.language_pref == LanguagePreference.HINDI
