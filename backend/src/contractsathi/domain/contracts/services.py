"""Contract analysis service - the upload to analysis pipeline."""

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from contractsathi.domain.contracts.ports import (
    AnalyzerPort,
    ClauseRepositoryPort,
    ContractRepositoryPort,
    TextExtractorPort,
    TransactionPort,
    UserRepositoryPort,
)
from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import ContractAnalysisData
from contractsathi.infrastructure.database.models.contract import AnalysisStatus, Contract
from contractsathi.infrastructure.document.intake import DocumentIntake, IncomingDocument
from contractsathi.shared.exceptions import (
    ContractAlreadyAnalyzedError,
    NotFoundError,
    PersistenceError,
)
from contractsathi.shared.logging import contract_log_context, get_logger

logger = get_logger(__name__)


@dataclass
class AnalysisRun:
    """Outcome of one pipeline run for a contract."""

    contract: Contract
    analysis: ContractAnalysisData
    extraction_source: str
    degraded_reasons: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_reasons)


class ContractAnalysisService:
    """Orchestrates intake, extraction, analysis and persistence.

    Status moves ``pending -> analyzing -> completed | failed``. Model
    problems never fail a run; they show up in ``degraded_reasons``.
    Database failures mark the contract ``failed`` and raise.
    """

    def __init__(
        self,
        contract_repo: ContractRepositoryPort,
        clause_repo: ClauseRepositoryPort,
        user_repo: UserRepositoryPort,
        extractor: TextExtractorPort,
        analyzer: AnalyzerPort,
        transaction: TransactionPort,
        intake: DocumentIntake | None = None,
    ) -> None:
        self.contract_repo = contract_repo
        self.clause_repo = clause_repo
        self.user_repo = user_repo
        self.extractor = extractor
        self.analyzer = analyzer
        self.transaction = transaction
        self.intake = intake or DocumentIntake()

    async def create_contract(
        self,
        *,
        user_id: UUID,
        filename: str,
        content: bytes,
        mime_type: str | None,
    ) -> tuple[Contract, IncomingDocument]:
        """Validate an upload and create its ``pending`` contract row."""
        resolved = self.intake.resolve_mime_type(filename, mime_type, content)
        self.intake.validate(filename, resolved, len(content))

        if await self.user_repo.get_by_id(user_id) is None:
            raise NotFoundError("User", str(user_id))

        contract = await self.contract_repo.create(
            Contract(
                user_id=user_id,
                filename=filename,
                file_size=len(content),
                mime_type=resolved,
                status=AnalysisStatus.PENDING,
            )
        )
        await self.transaction.commit()

        logger.info(
            "contract_created",
            contract_id=str(contract.id),
            filename=filename,
            file_size=len(content),
        )

        document = self.intake.decode(self.intake.encode(content, resolved), filename=filename)
        return contract, document

    async def upload_and_analyze(
        self,
        *,
        user_id: UUID,
        filename: str,
        content: bytes,
        mime_type: str | None,
        client_name: str | None = None,
        client_notes: str | None = None,
    ) -> AnalysisRun:
        """Create the contract row, then run the full pipeline on it."""
        contract, document = await self.create_contract(
            user_id=user_id,
            filename=filename,
            content=content,
            mime_type=mime_type,
        )
        return await self.analyze_contract(
            contract.id,
            document,
            client_name=client_name,
            client_notes=client_notes,
        )

    async def analyze_encoded(
        self,
        contract_id: UUID,
        file_data: str,
        *,
        client_name: str | None = None,
        client_notes: str | None = None,
    ) -> AnalysisRun:
        """Analyze a base64 or data-URI payload for a contract not yet completed."""
        contract = await self._load_analyzable(contract_id)
        document = self.intake.decode(file_data, filename=contract.filename)
        self.intake.validate(contract.filename, document.mime_type, document.size)
        return await self.analyze_contract(
            contract_id,
            document,
            client_name=client_name,
            client_notes=client_notes,
        )

    async def analyze_contract(
        self,
        contract_id: UUID,
        document: IncomingDocument,
        *,
        client_name: str | None = None,
        client_notes: str | None = None,
    ) -> AnalysisRun:
        """Extract, analyze and persist one contract."""
        with contract_log_context(contract_id):
            return await self._run_pipeline(
                contract_id,
                document,
                client_name=client_name,
                client_notes=client_notes,
            )

    async def _run_pipeline(
        self,
        contract_id: UUID,
        document: IncomingDocument,
        *,
        client_name: str | None,
        client_notes: str | None,
    ) -> AnalysisRun:
        contract = await self._load_analyzable(contract_id)
        await self.contract_repo.update_status(contract, AnalysisStatus.ANALYZING)

        # Release the DB connection before long-running network I/O (AI calls).
        await self.transaction.commit()

        start_time = time.monotonic()
        reasons: list[str] = []

        extracted = await self.extractor.extract(document, resource_id=contract_id)
        if extracted.is_degraded and extracted.reason:
            reasons.append(extracted.reason)
        text = extracted.value.text

        prior_risk = await self.contract_repo.find_prior_risk_level(text, exclude_id=contract_id)
        await self.transaction.commit()
        if prior_risk is not None:
            logger.info(
                "prior_analysis_found",
                risk_score=prior_risk.value,
            )

        analyzed = await self.analyzer.analyze(
            text,
            client_name=client_name,
            client_notes=client_notes,
            prior_risk_level=prior_risk,
            resource_id=contract_id,
        )
        if analyzed.is_degraded and analyzed.reason:
            reasons.append(analyzed.reason)
        analysis = analyzed.value

        await self._persist_analysis(contract, analysis, text, extracted.value.source, reasons)

        logger.info(
            "contract_analysis_completed",
            risk_score=analysis.risk_score.value,
            clause_count=len(analysis.clauses),
            source=analysis.source,
            extraction_source=extracted.value.source,
            degraded_reasons=reasons,
            processing_time_ms=int((time.monotonic() - start_time) * 1000),
        )

        return AnalysisRun(
            contract=contract,
            analysis=analysis,
            extraction_source=extracted.value.source,
            degraded_reasons=reasons,
        )

    async def get_contract(self, contract_id: UUID) -> Contract:
        """Get a contract with clauses and report."""
        contract = await self.contract_repo.get_by_id_with_clauses(contract_id)
        if not contract:
            raise NotFoundError("Contract", str(contract_id))
        return contract

    async def list_contracts(
        self,
        user_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Contract]:
        """List a user's contracts."""
        return await self.contract_repo.list_for_user(user_id, limit=limit, offset=offset)

    async def _load_contract(self, contract_id: UUID) -> Contract:
        contract = await self.contract_repo.get_by_id(contract_id)
        if not contract:
            raise NotFoundError("Contract", str(contract_id))
        return contract

    async def _load_analyzable(self, contract_id: UUID) -> Contract:
        contract = await self._load_contract(contract_id)
        if contract.status == AnalysisStatus.COMPLETED:
            raise ContractAlreadyAnalyzedError(str(contract_id))
        return contract

    async def _persist_analysis(
        self,
        contract: Contract,
        analysis: ContractAnalysisData,
        raw_text: str,
        extraction_source: str,
        reasons: list[str],
    ) -> None:
        try:
            async with self.contract_repo.begin_nested():
                await self.contract_repo.write_analysis_result(
                    contract,
                    analysis,
                    raw_text,
                    extraction_source,
                    reasons,
                )
                # A retried failed run never mixes clause sets
                await self.clause_repo.delete_for_contract(contract.id)
                await self.clause_repo.insert_clauses(contract.id, analysis.clauses)
                await self.contract_repo.update_status(contract, AnalysisStatus.COMPLETED)
            await self.transaction.commit()
        except SQLAlchemyError as e:
            logger.exception(
                "contract_analysis_persist_failed",
                contract_id=str(contract.id),
                error=str(e),
            )
            await self.contract_repo.update_status(
                contract,
                AnalysisStatus.FAILED,
                error_message=str(e)[:1000],
            )
            await self.transaction.commit()
            raise PersistenceError(
                "Analysis could not be saved",
                details={"contract_id": str(contract.id)},
            ) from e
