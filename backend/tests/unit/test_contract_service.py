"""Unit tests for the contract analysis pipeline.

Runs the real extraction and analysis stages against a mocked AI client and
in-memory repositories.
"""

import json
import uuid
from unittest.mock import AsyncMock

import fitz
import pytest
from sqlalchemy.exc import OperationalError

from conftest import ai_response
from contractsathi.config import DEFAULT_USER_ID
from contractsathi.domain.contracts.fallbacks import FALLBACK_CONTRACT_TEXT
from contractsathi.infrastructure.database.models.contract import (
    AnalysisSource,
    AnalysisStatus,
    RiskLevel,
)
from contractsathi.infrastructure.document.intake import DocumentIntake
from contractsathi.shared.exceptions import (
    AITimeoutError,
    ContractAlreadyAnalyzedError,
    NotFoundError,
    PersistenceError,
    UnsupportedFileTypeError,
)

PDF = "application/pdf"


def _analysis_json(risk: str) -> str:
    return json.dumps(
        {
            "contractType": "Service Agreement",
            "riskScore": risk,
            "jurisdiction": "India",
            "arbitrationPresent": False,
            "redFlags": [],
            "hindiSummary": "सारांश",
            "executiveSummary": "Summary.",
            "clauses": [
                {"title": "Payment", "riskScore": "safe"},
                {"title": "Liability", "riskScore": "risky"},
            ],
        }
    )


class TestCreateContract:
    """Upload validation and the pending row."""

    @pytest.mark.asyncio
    async def test_pending_row_created(self, contract_service, store, sample_pdf_bytes):
        contract, document = await contract_service.create_contract(
            user_id=DEFAULT_USER_ID,
            filename="contract.pdf",
            content=sample_pdf_bytes,
            mime_type=None,
        )

        assert store.contracts[contract.id].status == AnalysisStatus.PENDING
        assert contract.mime_type == PDF
        assert contract.file_size == len(sample_pdf_bytes)
        assert document.content == sample_pdf_bytes

    @pytest.mark.asyncio
    async def test_unsupported_type_creates_nothing(self, contract_service, store):
        with pytest.raises(UnsupportedFileTypeError):
            await contract_service.create_contract(
                user_id=DEFAULT_USER_ID,
                filename="notes.txt",
                content=b"plain text",
                mime_type="text/plain",
            )

        assert store.contracts == {}

    @pytest.mark.asyncio
    async def test_unknown_user(self, contract_service, sample_pdf_bytes):
        with pytest.raises(NotFoundError):
            await contract_service.create_contract(
                user_id=uuid.uuid4(),
                filename="contract.pdf",
                content=sample_pdf_bytes,
                mime_type=PDF,
            )


class TestUploadAndAnalyze:
    """Full pipeline runs."""

    @pytest.mark.asyncio
    async def test_scanned_pdf_with_model_timeouts(
        self, contract_service, report_service, store, scanned_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete_with_document.side_effect = AITimeoutError("timed out")
        mock_ai_client.complete.side_effect = AITimeoutError("timed out")

        run = await contract_service.upload_and_analyze(
            user_id=DEFAULT_USER_ID,
            filename="scan.pdf",
            content=scanned_pdf_bytes,
            mime_type=PDF,
        )

        contract = store.contracts[run.contract.id]
        assert contract.status == AnalysisStatus.COMPLETED
        assert contract.risk_score == RiskLevel.HIGH
        assert contract.analysis_source == AnalysisSource.FALLBACK
        assert contract.content_text == FALLBACK_CONTRACT_TEXT
        assert run.degraded
        assert run.degraded_reasons == ["extraction:timeout", "analysis:timeout"]

        clauses = store.clauses[contract.id]
        assert [c.clause_number for c in clauses] == [1, 2, 3, 4, 5]

        report = await report_service.generate_report(contract.id)
        assert report.pdf_url.startswith(f"https://storage.test/reports/{contract.id}-")

        with fitz.open(stream=_uploaded_pdf(report_service), filetype="pdf") as doc:
            text = "\n".join(page.get_text("text") for page in doc)
        positions = [text.index(f"Clause {n}:") for n in range(1, 6)]
        assert positions == sorted(positions)

    @pytest.mark.asyncio
    async def test_text_pdf_analyzed_by_model(
        self, contract_service, store, sample_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete.return_value = ai_response(_analysis_json("medium"))

        run = await contract_service.upload_and_analyze(
            user_id=DEFAULT_USER_ID,
            filename="contract.pdf",
            content=sample_pdf_bytes,
            mime_type=PDF,
            client_name="Acme Traders",
        )

        assert not run.degraded
        assert run.extraction_source == "native"
        assert run.analysis.risk_score == RiskLevel.MEDIUM
        assert [c.clause_number for c in store.clauses[run.contract.id]] == [1, 2]
        mock_ai_client.complete_with_document.assert_not_called()
        user_prompt = mock_ai_client.complete.call_args.kwargs["user_prompt"]
        assert "Acme Traders" in user_prompt

    @pytest.mark.asyncio
    async def test_same_text_keeps_earlier_risk(
        self, contract_service, store, sample_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete.return_value = ai_response(_analysis_json("high"))
        first = await contract_service.upload_and_analyze(
            user_id=DEFAULT_USER_ID,
            filename="first.pdf",
            content=sample_pdf_bytes,
            mime_type=PDF,
        )

        mock_ai_client.complete.return_value = ai_response(_analysis_json("low"))
        second = await contract_service.upload_and_analyze(
            user_id=DEFAULT_USER_ID,
            filename="second.pdf",
            content=sample_pdf_bytes,
            mime_type=PDF,
        )

        assert first.analysis.risk_score == RiskLevel.HIGH
        assert second.analysis.risk_score == RiskLevel.HIGH
        assert store.contracts[second.contract.id].risk_score == RiskLevel.HIGH
        assert "CONSISTENCY" in mock_ai_client.complete.call_args.kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_completed_contract_not_reanalyzed(
        self, contract_service, store, sample_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete.return_value = ai_response(_analysis_json("low"))
        run = await contract_service.upload_and_analyze(
            user_id=DEFAULT_USER_ID,
            filename="contract.pdf",
            content=sample_pdf_bytes,
            mime_type=PDF,
        )

        mock_ai_client.complete.side_effect = AITimeoutError("timed out")
        encoded = DocumentIntake().encode(sample_pdf_bytes, PDF)
        with pytest.raises(ContractAlreadyAnalyzedError):
            await contract_service.analyze_encoded(run.contract.id, encoded)

        contract = store.contracts[run.contract.id]
        assert contract.status == AnalysisStatus.COMPLETED
        assert contract.risk_score == RiskLevel.LOW
        assert contract.contract_type == "Service Agreement"
        assert [c.title for c in store.clauses[contract.id]] == ["Payment", "Liability"]

    @pytest.mark.asyncio
    async def test_failed_contract_can_be_retried(
        self, contract_service, store, sample_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete.return_value = ai_response(_analysis_json("medium"))
        insert_clauses = contract_service.clause_repo.insert_clauses
        contract_service.clause_repo.insert_clauses = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection lost"))
        )
        with pytest.raises(PersistenceError):
            await contract_service.upload_and_analyze(
                user_id=DEFAULT_USER_ID,
                filename="contract.pdf",
                content=sample_pdf_bytes,
                mime_type=PDF,
            )
        [contract] = store.contracts.values()

        contract_service.clause_repo.insert_clauses = insert_clauses
        encoded = DocumentIntake().encode(sample_pdf_bytes, PDF)
        run = await contract_service.analyze_encoded(contract.id, encoded)

        assert run.contract.status == AnalysisStatus.COMPLETED
        assert len(store.clauses[contract.id]) == 2

    @pytest.mark.asyncio
    async def test_persistence_failure_marks_failed(
        self, contract_service, store, sample_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete.return_value = ai_response(_analysis_json("medium"))
        contract_service.clause_repo.insert_clauses = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection lost"))
        )

        with pytest.raises(PersistenceError):
            await contract_service.upload_and_analyze(
                user_id=DEFAULT_USER_ID,
                filename="contract.pdf",
                content=sample_pdf_bytes,
                mime_type=PDF,
            )

        [contract] = store.contracts.values()
        assert contract.status == AnalysisStatus.FAILED
        assert "connection lost" in contract.error_message


class TestAnalyzeEncoded:
    """Re-analysis of an existing contract from base64."""

    @pytest.mark.asyncio
    async def test_unknown_contract(self, contract_service):
        with pytest.raises(NotFoundError):
            await contract_service.analyze_encoded(uuid.uuid4(), "JVBERi0xLjQ=")

    @pytest.mark.asyncio
    async def test_status_moves_through_analyzing(
        self, contract_service, store, sample_pdf_bytes, mock_ai_client, transaction
    ):
        contract, _ = await contract_service.create_contract(
            user_id=DEFAULT_USER_ID,
            filename="contract.pdf",
            content=sample_pdf_bytes,
            mime_type=PDF,
        )
        seen: list[AnalysisStatus] = []

        async def record_status(**kwargs):
            seen.append(store.contracts[contract.id].status)
            return ai_response(_analysis_json("low"))

        mock_ai_client.complete.side_effect = record_status

        run = await contract_service.analyze_encoded(
            contract.id, DocumentIntake().encode(sample_pdf_bytes, PDF)
        )

        assert seen == [AnalysisStatus.ANALYZING]
        assert run.contract.status == AnalysisStatus.COMPLETED
        assert transaction.commit.await_count >= 4


class TestQueries:
    """Contract lookups."""

    @pytest.mark.asyncio
    async def test_get_contract_includes_clauses(
        self, contract_service, sample_pdf_bytes, mock_ai_client
    ):
        mock_ai_client.complete.return_value = ai_response(_analysis_json("low"))
        run = await contract_service.upload_and_analyze(
            user_id=DEFAULT_USER_ID,
            filename="contract.pdf",
            content=sample_pdf_bytes,
            mime_type=PDF,
        )

        contract = await contract_service.get_contract(run.contract.id)

        assert [c.title for c in contract.clauses] == ["Payment", "Liability"]

    @pytest.mark.asyncio
    async def test_get_unknown_contract(self, contract_service):
        with pytest.raises(NotFoundError):
            await contract_service.get_contract(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_only_own_contracts(self, contract_service, store, sample_pdf_bytes):
        other = uuid.uuid4()
        store.add_user(other)
        for user_id in (DEFAULT_USER_ID, other):
            await contract_service.create_contract(
                user_id=user_id,
                filename="contract.pdf",
                content=sample_pdf_bytes,
                mime_type=PDF,
            )

        contracts = await contract_service.list_contracts(other)

        assert [c.user_id for c in contracts] == [other]


def _uploaded_pdf(report_service) -> bytes:
    [(content, _)] = report_service.storage.objects.values()
    return content
