"""Chat query log routes."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Request
from pydantic import Field

from contractsathi.api.deps import CurrentUserId
from contractsathi.api.ratelimit import RATE_LIMIT_DEFAULT, limiter
from contractsathi.api.schemas import APIRequestModel, APIResponseModel
from contractsathi.infrastructure.database.connection import SessionDep
from contractsathi.infrastructure.database.models.chat import ChatQuery
from contractsathi.infrastructure.database.repositories import (
    ChatQueryRepository,
    ContractRepository,
    UserRepository,
)
from contractsathi.shared.exceptions import NotFoundError
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/chat-queries", tags=["Chat"])


class ChatQueryRequest(APIRequestModel):
    message: str = Field(min_length=1, max_length=4000)
    contract_id: UUID | None = None


class ChatQueryResponse(APIResponseModel):
    id: UUID
    message: str
    response: str | None
    contract_id: UUID | None
    created_at: datetime


def _to_response(query: ChatQuery) -> ChatQueryResponse:
    return ChatQueryResponse(
        id=query.id,
        message=query.message,
        response=query.response,
        contract_id=query.contract_id,
        created_at=query.created_at,
    )


@router.post("", response_model=ChatQueryResponse, status_code=201)
@limiter.limit(RATE_LIMIT_DEFAULT)
async def create_chat_query(
    request: Request,
    body: ChatQueryRequest,
    user_id: CurrentUserId,
    session: SessionDep,
) -> ChatQueryResponse:
    """Log a user question, optionally about one of the user's contracts."""
    if await UserRepository(session).get_by_id(user_id) is None:
        raise NotFoundError("User", str(user_id))
    if body.contract_id is not None:
        contract = await ContractRepository(session).get_by_id(body.contract_id)
        if contract is None or contract.user_id != user_id:
            raise NotFoundError("Contract", str(body.contract_id))

    query = await ChatQueryRepository(session).create(
        ChatQuery(user_id=user_id, contract_id=body.contract_id, message=body.message)
    )
    logger.info(
        "chat_query_logged",
        query_id=str(query.id),
        contract_id=str(body.contract_id) if body.contract_id else None,
    )
    return _to_response(query)


@router.get("", response_model=list[ChatQueryResponse])
@limiter.limit(RATE_LIMIT_DEFAULT)
async def list_chat_queries(
    request: Request,
    user_id: CurrentUserId,
    session: SessionDep,
    contract_id: Annotated[UUID | None, Query(alias="contractId")] = None,
) -> list[ChatQueryResponse]:
    """The caller's questions, oldest first."""
    queries = await ChatQueryRepository(session).list_for_user(user_id, contract_id=contract_id)
    return [_to_response(q) for q in queries]
