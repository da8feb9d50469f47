"""Contract and clause repositories."""

import hashlib
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import selectinload

from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import (
    ClauseData,
    ContractAnalysisData,
)
from contractsathi.infrastructure.database.models.contract import (
    CONTENT_TEXT_MAX_CHARS,
    AnalysisSource,
    AnalysisStatus,
    Clause,
    Contract,
    RiskLevel,
)
from contractsathi.infrastructure.database.repositories.base import BaseRepository


def content_hash(text: str) -> str:
    """Hash of the stored (truncated) contract text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class ContractRepository(BaseRepository[Contract]):
    """Repository for Contract entities."""

    model_class = Contract

    async def get_by_id_with_clauses(self, id: UUID) -> Contract | None:
        """Get contract with clauses and report eagerly loaded."""
        query = (
            self._base_query()
            .where(Contract.id == id)
            .options(selectinload(Contract.clauses), selectinload(Contract.report))
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Contract]:
        """List a user's contracts, newest first."""
        query = (
            self._base_query()
            .where(Contract.user_id == user_id)
            .order_by(Contract.upload_date.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def update_status(
        self,
        contract: Contract,
        status: AnalysisStatus,
        error_message: str | None = None,
    ) -> Contract:
        """Update contract status."""
        contract.status = status
        contract.error_message = error_message
        return await self.update(contract)

    async def write_analysis_result(
        self,
        contract: Contract,
        analysis: ContractAnalysisData,
        raw_text: str,
        extraction_source: str,
        degraded_reasons: list[str],
    ) -> Contract:
        """Set the derived analysis fields of a contract."""
        stored_text = raw_text[:CONTENT_TEXT_MAX_CHARS]

        contract.contract_type = analysis.contract_type
        contract.risk_score = analysis.risk_score
        contract.jurisdiction = analysis.jurisdiction
        contract.arbitration_present = analysis.arbitration_present
        contract.content_text = stored_text
        contract.content_hash = content_hash(stored_text)
        contract.analysis_source = AnalysisSource(analysis.source)
        contract.analysis_metadata = {
            "executiveSummary": analysis.executive_summary,
            "hindiSummary": analysis.hindi_summary,
            "redFlags": list(analysis.red_flags),
            "clientContext": analysis.client_context,
            "extractionSource": extraction_source,
            "degradedReasons": list(degraded_reasons),
        }
        return await self.update(contract)

    async def find_prior_risk_level(
        self,
        raw_text: str,
        exclude_id: UUID | None = None,
    ) -> RiskLevel | None:
        """Risk level of an earlier completed contract with identical stored text."""
        stored_text = raw_text[:CONTENT_TEXT_MAX_CHARS]
        query = (
            select(Contract.risk_score, Contract.content_text)
            .where(
                Contract.content_hash == content_hash(stored_text),
                Contract.status == AnalysisStatus.COMPLETED,
                Contract.risk_score.is_not(None),
            )
            .order_by(Contract.upload_date.asc())
        )
        if exclude_id is not None:
            query = query.where(Contract.id != exclude_id)

        result = await self.session.execute(query)
        for risk_score, text in result.all():
            # Hash match is confirmed by exact comparison
            if text == stored_text:
                return RiskLevel(risk_score)
        return None


class ClauseRepository(BaseRepository[Clause]):
    """Repository for Clause entities."""

    model_class = Clause

    async def list_for_contract(self, contract_id: UUID) -> Sequence[Clause]:
        """Clauses of a contract in ascending clause number."""
        query = (
            self._base_query()
            .where(Clause.contract_id == contract_id)
            .order_by(Clause.clause_number.asc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def delete_for_contract(self, contract_id: UUID) -> None:
        """Remove all clauses of a contract."""
        await self.session.execute(delete(Clause).where(Clause.contract_id == contract_id))

    async def insert_clauses(self, contract_id: UUID, clauses: Sequence[ClauseData]) -> int:
        """Insert one row per clause, numbered 1..n in list order."""
        if not clauses:
            return 0
        await self.session.execute(
            insert(Clause),
            [
                {
                    "contract_id": contract_id,
                    "clause_number": index + 1,
                    "title": clause.title,
                    "clause_text": clause.clause_text,
                    "summary_en": clause.summary_en,
                    "summary_hi": clause.summary_hi,
                    "risk_score": clause.risk_score,
                    "suggestion": clause.suggestion,
                    "flag_type": clause.flag_type,
                }
                for index, clause in enumerate(clauses)
            ],
        )
        return len(clauses)
