"""Contract upload and analysis routes."""

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, File, Form, Request, UploadFile
from pydantic import Field

from contractsathi.api.deps import ContractServiceDep, CurrentUserId
from contractsathi.api.ratelimit import RATE_LIMIT_DEFAULT, RATE_LIMIT_UPLOAD, limiter
from contractsathi.api.schemas import APIRequestModel, APIResponseModel
from contractsathi.domain.contracts.services import AnalysisRun
from contractsathi.infrastructure.database.models.contract import Clause, Contract
from contractsathi.observability.metrics import record_analysis_run
from contractsathi.shared.exceptions import NotFoundError

router = APIRouter(tags=["Contracts"])


# ----- Schemas -----


class AnalyzeContractRequest(APIRequestModel):
    """Analyze an existing contract row from a base64 or data-URI payload."""

    contract_id: UUID
    file: str = Field(min_length=1)
    client_name: str | None = Field(default=None, max_length=255)
    client_notes: str | None = Field(default=None, max_length=2000)


class AnalyzeContractResponse(APIResponseModel):
    success: bool = True
    contract_id: UUID
    status: str
    analysis: dict[str, Any]
    degraded: bool
    degraded_reasons: list[str]


class ClauseResponse(APIResponseModel):
    clause_number: int
    title: str
    clause_text: str
    summary_en: str | None
    summary_hi: str | None
    risk_score: str
    suggestion: str | None
    flag_type: str | None


class ContractResponse(APIResponseModel):
    id: UUID
    filename: str
    file_size: int | None
    mime_type: str | None
    status: str
    upload_date: datetime
    contract_type: str | None
    risk_score: str | None
    jurisdiction: str | None
    arbitration_present: bool | None
    analysis_source: str | None
    error_message: str | None
    executive_summary: str | None = None
    hindi_summary: str | None = None
    red_flags: list[str] = []
    clauses: list[ClauseResponse] = []
    report_url: str | None = None


class ContractListResponse(APIResponseModel):
    items: list[ContractResponse]
    limit: int
    offset: int


# ----- Mapping -----


def _plain(value: Any) -> Any:
    """Enum members as their stored string value."""
    return getattr(value, "value", value)


def _clause_response(clause: Clause) -> ClauseResponse:
    return ClauseResponse(
        clause_number=clause.clause_number,
        title=clause.title,
        clause_text=clause.clause_text,
        summary_en=clause.summary_en,
        summary_hi=clause.summary_hi,
        risk_score=_plain(clause.risk_score),
        suggestion=clause.suggestion,
        flag_type=clause.flag_type,
    )


def _contract_response(contract: Contract, *, detail: bool = False) -> ContractResponse:
    metadata = contract.analysis_metadata or {}
    response = ContractResponse(
        id=contract.id,
        filename=contract.filename,
        file_size=contract.file_size,
        mime_type=contract.mime_type,
        status=_plain(contract.status),
        upload_date=contract.upload_date,
        contract_type=contract.contract_type,
        risk_score=_plain(contract.risk_score),
        jurisdiction=contract.jurisdiction,
        arbitration_present=contract.arbitration_present,
        analysis_source=_plain(contract.analysis_source),
        error_message=contract.error_message,
        executive_summary=metadata.get("executiveSummary"),
        hindi_summary=metadata.get("hindiSummary"),
        red_flags=metadata.get("redFlags") or [],
    )
    if detail:
        response.clauses = [_clause_response(c) for c in contract.clauses]
        response.report_url = contract.report.pdf_url if contract.report else None
    return response


def _run_response(run: AnalysisRun) -> AnalyzeContractResponse:
    record_analysis_run(run.extraction_source, run.degraded_reasons)
    return AnalyzeContractResponse(
        contract_id=run.contract.id,
        status=_plain(run.contract.status),
        analysis=run.analysis.to_dict(),
        degraded=run.degraded,
        degraded_reasons=run.degraded_reasons,
    )


# ----- Routes -----


@router.post("/analyze-contract", response_model=AnalyzeContractResponse)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def analyze_contract(
    request: Request,
    body: AnalyzeContractRequest,
    service: ContractServiceDep,
) -> AnalyzeContractResponse:
    """Run extraction and analysis for an existing contract.

    Model failures do not fail the request: the response is marked
    ``degraded`` and carries fixed substitute content.
    """
    run = await service.analyze_encoded(
        body.contract_id,
        body.file,
        client_name=body.client_name,
        client_notes=body.client_notes,
    )
    return _run_response(run)


@router.post("/contracts", response_model=AnalyzeContractResponse, status_code=201)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def upload_contract(
    request: Request,
    user_id: CurrentUserId,
    service: ContractServiceDep,
    file: UploadFile = File(...),
    client_name: str | None = Form(None, alias="clientName"),
    client_notes: str | None = Form(None, alias="clientNotes"),
) -> AnalyzeContractResponse:
    """Upload a PDF or DOCX contract (max 10 MB) and analyze it."""
    content = await file.read()
    run = await service.upload_and_analyze(
        user_id=user_id,
        filename=file.filename or "document",
        content=content,
        mime_type=file.content_type,
        client_name=client_name,
        client_notes=client_notes,
    )
    return _run_response(run)


@router.get("/contracts", response_model=ContractListResponse)
@limiter.limit(RATE_LIMIT_DEFAULT)
async def list_contracts(
    request: Request,
    user_id: CurrentUserId,
    service: ContractServiceDep,
    limit: int = 50,
    offset: int = 0,
) -> ContractListResponse:
    """List the caller's contracts, newest first."""
    limit = max(1, min(limit, 200))
    offset = max(0, offset)
    contracts = await service.list_contracts(user_id, limit=limit, offset=offset)
    return ContractListResponse(
        items=[_contract_response(c) for c in contracts],
        limit=limit,
        offset=offset,
    )


@router.get("/contracts/{contract_id}", response_model=ContractResponse)
@limiter.limit(RATE_LIMIT_DEFAULT)
async def get_contract(
    request: Request,
    contract_id: UUID,
    user_id: CurrentUserId,
    service: ContractServiceDep,
) -> ContractResponse:
    """Contract detail with clauses in order and the report URL."""
    contract = await service.get_contract(contract_id)
    if contract.user_id != user_id:
        raise NotFoundError("Contract", str(contract_id))
    return _contract_response(contract, detail=True)
