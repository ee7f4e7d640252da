"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from gemfusion.adapters.sqlalchemy.mappings import image_extraction_table
from gemfusion.domain.model import FusionRecord, GemstoneStatus, ImageExtractionRecord

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.orm import Session


class SqlAlchemyExtractionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, record: ImageExtractionRecord) -> None:
        self.session.merge(record)

    def list_for_gemstone(self, gemstone_id: str) -> list[ImageExtractionRecord]:
        stmt = (
            select(ImageExtractionRecord)
            .where(image_extraction_table.c.gemstone_id == gemstone_id)
            .order_by(image_extraction_table.c.image_id)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyFusionResultRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, record: FusionRecord) -> None:
        self.session.merge(record)

    def get(self, gemstone_id: str) -> FusionRecord | None:
        return self.session.get(FusionRecord, gemstone_id)


class SqlAlchemyGemstoneRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def mark_analyzed(
        self,
        gemstone_id: str,
        *,
        analyzed_at: datetime,
        analysis_version: str,
    ) -> None:
        status = self.session.get(GemstoneStatus, gemstone_id)
        if status is None:
            status = GemstoneStatus(gemstone_id=gemstone_id)
            self.session.add(status)
        status.analyzed = True
        status.analyzed_at = analyzed_at
        status.analysis_version = analysis_version

    def get(self, gemstone_id: str) -> GemstoneStatus | None:
        return self.session.get(GemstoneStatus, gemstone_id)
