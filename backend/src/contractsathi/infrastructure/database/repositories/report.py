"""Report repository."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert

from contractsathi.infrastructure.database.models.report import Report
from contractsathi.infrastructure.database.repositories.base import BaseRepository


class ReportRepository(BaseRepository[Report]):
    """Repository for Report entities. One row per contract."""

    model_class = Report

    async def get_by_contract_id(self, contract_id: UUID) -> Report | None:
        result = await self.session.execute(
            self._base_query().where(Report.contract_id == contract_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, contract_id: UUID, pdf_url: str) -> Report:
        """Insert or replace the report of a contract (last writer wins)."""
        stmt = pg_insert(Report).values(contract_id=contract_id, pdf_url=pdf_url)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Report.contract_id],
            set_={"pdf_url": stmt.excluded.pdf_url, "generated_on": func.now()},
        ).returning(Report)

        result = await self.session.execute(
            stmt,
            execution_options={"populate_existing": True},
        )
        return result.scalar_one()
