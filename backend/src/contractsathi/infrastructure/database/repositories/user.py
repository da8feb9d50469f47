"""User and chat query repositories."""

from collections.abc import Sequence
from uuid import UUID

from contractsathi.infrastructure.database.models.chat import ChatQuery
from contractsathi.infrastructure.database.models.user import User
from contractsathi.infrastructure.database.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entities."""

    model_class = User


class ChatQueryRepository(BaseRepository[ChatQuery]):
    """Repository for logged chat queries."""

    model_class = ChatQuery

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        contract_id: UUID | None = None,
        limit: int = 100,
    ) -> Sequence[ChatQuery]:
        """A user's questions, oldest first, optionally for one contract."""
        query = self._base_query().where(ChatQuery.user_id == user_id)
        if contract_id is not None:
            query = query.where(ChatQuery.contract_id == contract_id)
        query = query.order_by(ChatQuery.created_at.asc()).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()
