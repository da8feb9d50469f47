"""FastAPI dependencies shared by the routes."""

from collections.abc import Callable
from typing import Annotated, TypeVar
from uuid import UUID

from fastapi import Depends, Header, Request

from contractsathi.config import get_settings
from contractsathi.domain.contracts.analyzer import ContractAnalyzer
from contractsathi.domain.contracts.extraction import TextExtractionService
from contractsathi.domain.contracts.services import ContractAnalysisService
from contractsathi.domain.reports.renderer import ReportRenderer
from contractsathi.domain.reports.services import ReportService
from contractsathi.infrastructure.ai.factory import get_ai_client
from contractsathi.infrastructure.database.connection import SessionDep
from contractsathi.infrastructure.database.repositories import (
    ClauseRepository,
    ContractRepository,
    ReportRepository,
    UserRepository,
)
from contractsathi.infrastructure.document.extractor import DocumentExtractor
from contractsathi.infrastructure.storage.s3 import S3Storage
from contractsathi.shared.exceptions import ValidationError


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Caller identity: the ``X-User-ID`` header, or the default user."""
    if not x_user_id:
        return get_settings().default_user_id
    try:
        return UUID(x_user_id)
    except ValueError as e:
        raise ValidationError("X-User-ID header must be a UUID") from e


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]

T = TypeVar("T")


def _state(request: Request, name: str, factory: Callable[[], T]) -> T:
    """Process-wide collaborator kept on app.state, created on first use."""
    value = getattr(request.app.state, name, None)
    if value is None:
        value = factory()
        setattr(request.app.state, name, value)
    return value


async def get_contract_service(request: Request, session: SessionDep) -> ContractAnalysisService:
    """Get contract analysis service."""
    settings = get_settings()
    ai_client = get_ai_client()
    extractor = _state(request, "document_extractor", DocumentExtractor)
    return ContractAnalysisService(
        contract_repo=ContractRepository(session),
        clause_repo=ClauseRepository(session),
        user_repo=UserRepository(session),
        extractor=TextExtractionService(
            ai_client,
            extractor,
            native_enabled=settings.extraction_native_enabled,
        ),
        analyzer=ContractAnalyzer(ai_client, max_tokens=settings.ai_max_tokens),
        transaction=session,
    )


async def get_report_service(request: Request, session: SessionDep) -> ReportService:
    """Get report service."""
    settings = get_settings()
    return ReportService(
        contract_repo=ContractRepository(session),
        clause_repo=ClauseRepository(session),
        report_repo=ReportRepository(session),
        storage=_state(request, "s3_storage", S3Storage),
        renderer=_state(
            request,
            "report_renderer",
            lambda: ReportRenderer(settings.report_unicode_font_path),
        ),
        transaction=session,
    )


ContractServiceDep = Annotated[ContractAnalysisService, Depends(get_contract_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
