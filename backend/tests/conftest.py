"""
Pytest configuration and fixtures for ContractSathi backend tests.

No database is needed: repositories are replaced by in-memory versions
that keep the real repository logic for field mapping and status updates.
"""
import os

# Test environment (set before contractsathi modules read settings)
os.environ["APP_ENV"] = "development"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["AI_PROVIDER"] = "openai"

import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest
from docx import Document
from fastapi import FastAPI
from fastapi.testclient import TestClient

from contractsathi.api.deps import get_contract_service, get_report_service
from contractsathi.api.ratelimit import limiter
from contractsathi.config import DEFAULT_USER_ID, get_settings
from contractsathi.domain.contracts.analyzer import ContractAnalyzer
from contractsathi.domain.contracts.extraction import TextExtractionService
from contractsathi.domain.contracts.services import ContractAnalysisService
from contractsathi.domain.reports.renderer import ReportRenderer
from contractsathi.domain.reports.services import ReportService
from contractsathi.infrastructure.ai.client import AIResponse
from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import ClauseData
from contractsathi.infrastructure.database.models.contract import (
    AnalysisStatus,
    Clause,
    Contract,
    RiskLevel,
)
from contractsathi.infrastructure.database.models.report import Report
from contractsathi.infrastructure.database.models.user import User
from contractsathi.infrastructure.database.repositories.contract import (
    CONTENT_TEXT_MAX_CHARS,
    ContractRepository,
)
from contractsathi.main import create_app

get_settings.cache_clear()
limiter.enabled = False

SAMPLE_CONTRACT_TEXT = (
    "SERVICE AGREEMENT between Acme Traders Pvt Ltd and Bharat Logistics. "
    "1. Payment: invoices are payable within 30 days. "
    "2. Termination: either party may terminate with 60 days notice. "
    "3. Liability: the vendor's liability is unlimited for any loss. "
    "4. Disputes: courts of Mumbai have exclusive jurisdiction."
)


# ----- In-memory persistence -----


class InMemoryStore:
    """Rows shared by the in-memory repositories of one test."""

    def __init__(self) -> None:
        self.users: dict[uuid.UUID, User] = {}
        self.contracts: dict[uuid.UUID, Contract] = {}
        self.clauses: dict[uuid.UUID, list[Clause]] = {}
        self.reports: dict[uuid.UUID, Report] = {}

    def add_user(self, user_id: uuid.UUID = DEFAULT_USER_ID) -> User:
        user = User(id=user_id, email=f"{user_id}@example.com", name="Test User")
        self.users[user_id] = user
        return user


class InMemoryContractRepository(ContractRepository):
    """ContractRepository whose flushes are no-ops and lookups hit the store."""

    def __init__(self, store: InMemoryStore) -> None:
        super().__init__(session=MagicMock())
        self.store = store

    @asynccontextmanager
    async def begin_nested(self) -> AsyncIterator[None]:
        yield

    async def get_by_id(self, id: uuid.UUID) -> Contract | None:
        return self.store.contracts.get(id)

    async def get_by_id_with_clauses(self, id: uuid.UUID) -> Contract | None:
        contract = self.store.contracts.get(id)
        if contract is not None:
            contract.clauses = list(self.store.clauses.get(id, []))
            contract.report = self.store.reports.get(id)
        return contract

    async def list_for_user(
        self, user_id: uuid.UUID, *, limit: int = 50, offset: int = 0
    ) -> Sequence[Contract]:
        rows = [c for c in self.store.contracts.values() if c.user_id == user_id]
        rows.sort(key=lambda c: c.upload_date, reverse=True)
        return rows[offset : offset + limit]

    async def create(self, entity: Contract) -> Contract:
        entity.id = entity.id or uuid.uuid4()
        entity.upload_date = entity.upload_date or datetime.now(UTC)
        entity.analysis_metadata = entity.analysis_metadata or {}
        self.store.contracts[entity.id] = entity
        return entity

    async def update(self, entity: Contract) -> Contract:
        return entity

    async def find_prior_risk_level(
        self, raw_text: str, exclude_id: uuid.UUID | None = None
    ) -> RiskLevel | None:
        stored_text = raw_text[:CONTENT_TEXT_MAX_CHARS]
        for contract in sorted(self.store.contracts.values(), key=lambda c: c.upload_date):
            if contract.id == exclude_id or contract.status != AnalysisStatus.COMPLETED:
                continue
            if contract.risk_score is not None and contract.content_text == stored_text:
                return RiskLevel(contract.risk_score)
        return None


class InMemoryClauseRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_for_contract(self, contract_id: uuid.UUID) -> Sequence[Clause]:
        return sorted(self.store.clauses.get(contract_id, []), key=lambda c: c.clause_number)

    async def delete_for_contract(self, contract_id: uuid.UUID) -> None:
        self.store.clauses.pop(contract_id, None)

    async def insert_clauses(self, contract_id: uuid.UUID, clauses: Sequence[ClauseData]) -> int:
        self.store.clauses[contract_id] = [
            Clause(
                id=uuid.uuid4(),
                contract_id=contract_id,
                clause_number=index + 1,
                title=clause.title,
                clause_text=clause.clause_text,
                summary_en=clause.summary_en,
                summary_hi=clause.summary_hi,
                risk_score=clause.risk_score,
                suggestion=clause.suggestion,
                flag_type=clause.flag_type,
            )
            for index, clause in enumerate(clauses)
        ]
        return len(clauses)


class InMemoryUserRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_by_id(self, id: uuid.UUID) -> User | None:
        return self.store.users.get(id)


class InMemoryReportRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.upserts: list[tuple[uuid.UUID, str]] = []

    async def get_by_contract_id(self, contract_id: uuid.UUID) -> Report | None:
        return self.store.reports.get(contract_id)

    async def upsert(self, contract_id: uuid.UUID, pdf_url: str) -> Report:
        self.upserts.append((contract_id, pdf_url))
        report = self.store.reports.get(contract_id) or Report(
            id=uuid.uuid4(), contract_id=contract_id
        )
        report.pdf_url = pdf_url
        report.generated_on = datetime.now(UTC)
        self.store.reports[contract_id] = report
        return report


class InMemoryStorage:
    """Report storage keeping uploaded objects in a dict."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        self.objects[key] = (content, content_type)
        return key

    async def get_url(self, key: str) -> str:
        return f"https://storage.test/{key}"


def ai_response(content: str, model: str = "gpt-4o") -> AIResponse:
    """Build an AIResponse the way the provider clients do."""
    return AIResponse(
        content=content,
        model=model,
        input_tokens=100,
        output_tokens=50,
        total_tokens=150,
        cost_cents=0.1,
        latency_ms=12.0,
    )


# ----- Fixtures -----


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    store.add_user()
    return store


@pytest.fixture
def transaction() -> AsyncMock:
    """Transaction port: only ``commit`` is used."""
    return AsyncMock()


@pytest.fixture
def mock_ai_client() -> MagicMock:
    """AI client whose calls are AsyncMocks; configure per test."""
    client = MagicMock()
    client.complete = AsyncMock()
    client.complete_with_document = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def report_repo(store: InMemoryStore) -> InMemoryReportRepository:
    return InMemoryReportRepository(store)


@pytest.fixture
def contract_service(
    store: InMemoryStore,
    transaction: AsyncMock,
    mock_ai_client: MagicMock,
) -> ContractAnalysisService:
    return ContractAnalysisService(
        contract_repo=InMemoryContractRepository(store),
        clause_repo=InMemoryClauseRepository(store),
        user_repo=InMemoryUserRepository(store),
        extractor=TextExtractionService(mock_ai_client),
        analyzer=ContractAnalyzer(mock_ai_client),
        transaction=transaction,
    )


@pytest.fixture
def report_service(
    store: InMemoryStore,
    transaction: AsyncMock,
    storage: InMemoryStorage,
    report_repo: InMemoryReportRepository,
) -> ReportService:
    return ReportService(
        contract_repo=InMemoryContractRepository(store),
        clause_repo=InMemoryClauseRepository(store),
        report_repo=report_repo,
        storage=storage,
        renderer=ReportRenderer(),
        transaction=transaction,
    )


@pytest.fixture
def app(contract_service: ContractAnalysisService, report_service: ReportService) -> FastAPI:
    """Test application with services bound to the in-memory store."""
    app = create_app()
    app.dependency_overrides[get_contract_service] = lambda: contract_service
    app.dependency_overrides[get_report_service] = lambda: report_service
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Sync test client (lifespan not started)."""
    return TestClient(app)


# ----- Sample documents -----


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Single-page PDF with a text layer."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_textbox(fitz.Rect(50, 50, 550, 800), SAMPLE_CONTRACT_TEXT, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def scanned_pdf_bytes() -> bytes:
    """PDF with drawings but no text layer, like a scan (about 2 KB)."""
    doc = fitz.open()
    page = doc.new_page()
    for i in range(40):
        page.draw_rect(fitz.Rect(50, 50 + i * 15, 550, 60 + i * 15), color=(0, 0, 0))
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_docx_bytes(tmp_path) -> bytes:
    """DOCX with paragraphs and one table."""
    document = Document()
    for sentence in SAMPLE_CONTRACT_TEXT.split(". "):
        document.add_paragraph(sentence)
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Governing Law"
    table.rows[0].cells[1].text = "Laws of India"
    path = tmp_path / "contract.docx"
    document.save(str(path))
    return path.read_bytes()
