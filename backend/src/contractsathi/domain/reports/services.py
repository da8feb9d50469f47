"""Report generation: render, upload, record."""

import time
from typing import Protocol
from uuid import UUID

from contractsathi.domain.contracts.ports import (
    ClauseRepositoryPort,
    ContractRepositoryPort,
    TransactionPort,
)
from contractsathi.domain.reports.renderer import ReportRenderer
from contractsathi.infrastructure.database.models.contract import Contract
from contractsathi.infrastructure.database.models.report import Report
from contractsathi.shared.concurrency import document_work
from contractsathi.shared.exceptions import NotFoundError
from contractsathi.shared.logging import contract_log_context, get_logger

logger = get_logger(__name__)

REPORT_CONTENT_TYPE = "application/pdf"


class ReportRepositoryPort(Protocol):
    async def get_by_contract_id(self, contract_id: UUID) -> Report | None: ...

    async def upsert(self, contract_id: UUID, pdf_url: str) -> Report: ...


class ReportStoragePort(Protocol):
    async def upload(self, key: str, content: bytes, content_type: str) -> str: ...

    async def get_url(self, key: str) -> str: ...


class ReportService:
    """Builds PDF reports and keeps one report row per contract.

    Stored URLs are reused as-is by ``get_or_generate_report``; a presigned
    URL may have expired by then, and ``generate_report`` replaces it.
    """

    def __init__(
        self,
        contract_repo: ContractRepositoryPort,
        clause_repo: ClauseRepositoryPort,
        report_repo: ReportRepositoryPort,
        storage: ReportStoragePort,
        renderer: ReportRenderer,
        transaction: TransactionPort,
    ) -> None:
        self.contract_repo = contract_repo
        self.clause_repo = clause_repo
        self.report_repo = report_repo
        self.storage = storage
        self.renderer = renderer
        self.transaction = transaction

    async def generate_report(self, contract_id: UUID, owner_id: UUID | None = None) -> Report:
        """Render and upload a fresh report, replacing any earlier one."""
        with contract_log_context(contract_id):
            contract = await self._load_contract(contract_id, owner_id)
            clauses = list(await self.clause_repo.list_for_contract(contract_id))

            # Release the DB connection before rendering and S3 upload.
            await self.transaction.commit()

            pdf_bytes = await document_work.run(self.renderer.render, contract, clauses)
            key = f"reports/{contract_id}-{int(time.time() * 1000)}.pdf"
            await self.storage.upload(key, pdf_bytes, REPORT_CONTENT_TYPE)
            url = await self.storage.get_url(key)

            report = await self.report_repo.upsert(contract_id, url)
            await self.transaction.commit()

            logger.info("report_generated", key=key, size=len(pdf_bytes), clause_count=len(clauses))
            return report

    async def get_or_generate_report(
        self, contract_id: UUID, owner_id: UUID | None = None
    ) -> tuple[Report, bool]:
        """Existing report if one has a URL, else a new one. Second item: reused."""
        await self._load_contract(contract_id, owner_id)
        existing = await self.report_repo.get_by_contract_id(contract_id)
        if existing is not None and existing.pdf_url:
            logger.info("report_reused", contract_id=str(contract_id))
            return existing, True
        return await self.generate_report(contract_id, owner_id), False

    async def _load_contract(self, contract_id: UUID, owner_id: UUID | None) -> Contract:
        # Another user's contract is reported as missing
        contract = await self.contract_repo.get_by_id(contract_id)
        if not contract or (owner_id is not None and contract.user_id != owner_id):
            raise NotFoundError("Contract", str(contract_id))
        return contract
