"""PDF report routes."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Request

from contractsathi.api.deps import CurrentUserId, ReportServiceDep
from contractsathi.api.ratelimit import RATE_LIMIT_REPORT, limiter
from contractsathi.api.schemas import APIRequestModel, APIResponseModel
from contractsathi.observability.metrics import record_report

router = APIRouter(tags=["Reports"])


class GenerateReportRequest(APIRequestModel):
    contract_id: UUID


class GenerateReportResponse(APIResponseModel):
    success: bool = True
    pdf_url: str


class ReportResponse(APIResponseModel):
    success: bool = True
    pdf_url: str
    generated_on: datetime
    reused: bool


@router.post("/generate-pdf-report", response_model=GenerateReportResponse)
@limiter.limit(RATE_LIMIT_REPORT)
async def generate_pdf_report(
    request: Request,
    body: GenerateReportRequest,
    user_id: CurrentUserId,
    service: ReportServiceDep,
) -> GenerateReportResponse:
    """Render, upload and record a fresh report."""
    report = await service.generate_report(body.contract_id, owner_id=user_id)
    record_report(reused=False)
    return GenerateReportResponse(pdf_url=report.pdf_url or "")


@router.get("/contracts/{contract_id}/report", response_model=ReportResponse)
@limiter.limit(RATE_LIMIT_REPORT)
async def get_report(
    request: Request,
    contract_id: UUID,
    user_id: CurrentUserId,
    service: ReportServiceDep,
) -> ReportResponse:
    """Existing report of a contract, generated on first request."""
    report, reused = await service.get_or_generate_report(contract_id, owner_id=user_id)
    record_report(reused)
    return ReportResponse(
        pdf_url=report.pdf_url or "",
        generated_on=report.generated_on,
        reused=reused,
    )
