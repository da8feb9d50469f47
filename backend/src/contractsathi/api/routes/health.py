"""Health check endpoints."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from contractsathi import __version__
from contractsathi.infrastructure.database.connection import database_reachable, get_session
from contractsathi.infrastructure.storage.s3 import S3Storage
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check - always returns OK if service is running."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> ReadyResponse:
    """Readiness check - verifies the database and report storage."""
    storage = getattr(request.app.state, "s3_storage", None)
    if storage is None:
        storage = S3Storage()
        request.app.state.s3_storage = storage

    checks = {
        "database": await database_reachable(session),
        "storage": await storage.bucket_reachable(),
    }
    if not all(checks.values()):
        logger.warning("readiness_check_failed", checks=checks)
    return ReadyResponse(ready=all(checks.values()), checks=checks)
