"""Ports for contract analysis dependencies."""

from __future__ import annotations

from collections.abc import Sequence
from typing import AsyncContextManager, Protocol
from uuid import UUID

from contractsathi.domain.contracts.extraction import ExtractedText
from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import (
    ClauseData,
    ContractAnalysisData,
)
from contractsathi.infrastructure.database.models.contract import (
    AnalysisStatus,
    Clause,
    Contract,
    RiskLevel,
)
from contractsathi.infrastructure.database.models.user import User
from contractsathi.infrastructure.document.intake import IncomingDocument
from contractsathi.shared.result import Outcome


class TextExtractorPort(Protocol):
    """Document to plain text."""

    async def extract(
        self,
        document: IncomingDocument,
        resource_id: UUID | None = None,
    ) -> Outcome[ExtractedText]:
        """Extract text, degrading to fixed text on failure."""


class AnalyzerPort(Protocol):
    """Plain text to structured analysis."""

    async def analyze(
        self,
        text: str,
        client_name: str | None = None,
        client_notes: str | None = None,
        prior_risk_level: RiskLevel | None = None,
        resource_id: UUID | None = None,
    ) -> Outcome[ContractAnalysisData]:
        """Analyze text, degrading to the fixed analysis on failure."""


class ContractRepositoryPort(Protocol):
    """Repository interface for contracts."""

    async def get_by_id(self, id: UUID) -> Contract | None:
        """Get contract by ID."""

    async def get_by_id_with_clauses(self, id: UUID) -> Contract | None:
        """Get contract with clauses and report."""

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Contract]:
        """List a user's contracts."""

    async def create(self, entity: Contract) -> Contract:
        """Persist a contract."""

    async def update_status(
        self,
        contract: Contract,
        status: AnalysisStatus,
        error_message: str | None = None,
    ) -> Contract:
        """Update contract status."""

    async def write_analysis_result(
        self,
        contract: Contract,
        analysis: ContractAnalysisData,
        raw_text: str,
        extraction_source: str,
        degraded_reasons: list[str],
    ) -> Contract:
        """Set derived analysis fields."""

    async def find_prior_risk_level(
        self,
        raw_text: str,
        exclude_id: UUID | None = None,
    ) -> RiskLevel | None:
        """Risk level of an earlier identical contract."""

    def begin_nested(self) -> AsyncContextManager[None]:
        """Create a nested transaction context."""


class ClauseRepositoryPort(Protocol):
    """Repository interface for clauses."""

    async def list_for_contract(self, contract_id: UUID) -> Sequence[Clause]:
        """Clauses in ascending number."""

    async def delete_for_contract(self, contract_id: UUID) -> None:
        """Remove all clauses of a contract."""

    async def insert_clauses(self, contract_id: UUID, clauses: Sequence[ClauseData]) -> int:
        """Insert clauses numbered 1..n."""


class UserRepositoryPort(Protocol):
    """Repository interface for users."""

    async def get_by_id(self, id: UUID) -> User | None:
        """Get user by ID."""


class TransactionPort(Protocol):
    """Transaction boundary interface."""

    async def commit(self) -> None:
        """Commit the current transaction."""
