from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from gemfusion.adapters.sqlalchemy import (
    SqlAlchemyExtractionRepository,
    SqlAlchemyFusionResultRepository,
    SqlAlchemyGemstoneRepository,
)
from gemfusion.domain.fusion import FusionEngine
from gemfusion.domain.model import (
    Attribute,
    FusionRecord,
    ImageCategory,
    ImageExtraction,
    ImageExtractionRecord,
    SourceKind,
)
from tests.helpers.claims import make_claim

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _extraction_record(image_id: str, *, model_version: str = "gpt-4o") -> ImageExtractionRecord:
    claim = make_claim(Attribute.WEIGHT, 2.48, 0.9, image_id=image_id, claim_id=f"{image_id}#0")
    extraction = ImageExtraction(
        image_id=image_id,
        image_type=ImageCategory.INSTRUMENT,
        raw_response={"claims": [{"field": "weight_ct", "value": "2.48"}]},
        model_version=model_version,
        processing_cost_usd=0.0021,
        processing_time_ms=640,
    )
    return ImageExtractionRecord.from_extraction("gem-1", extraction, [claim], created_at=_NOW)


def test_extraction_upsert_replaces_existing_row(sqlite_session: Session) -> None:
    repo = SqlAlchemyExtractionRepository(sqlite_session)

    repo.upsert(_extraction_record("img-2"))
    repo.upsert(_extraction_record("img-1"))
    sqlite_session.commit()
    repo.upsert(_extraction_record("img-1", model_version="gpt-4o-2024-08-06"))
    sqlite_session.commit()

    records = repo.list_for_gemstone("gem-1")
    assert [record.image_id for record in records] == ["img-1", "img-2"]
    assert records[0].model_version == "gpt-4o-2024-08-06"
    assert records[0].claims[0]["value"] == 2.48
    assert records[0].claims[0]["source_kind"] == "instrument"
    assert records[0].created_at == _NOW
    assert repo.list_for_gemstone("gem-2") == []


def test_fusion_result_round_trips_through_json_columns(sqlite_session: Session) -> None:
    claims = [
        make_claim(Attribute.WEIGHT, 2.48, 0.9, image_id="img-1", claim_id="img-1#0"),
        make_claim(Attribute.CUT, "oval", 0.55, SourceKind.LABEL, claim_id="img-2#0"),
    ]
    result = FusionEngine().fuse("gem-1", claims)
    repo = SqlAlchemyFusionResultRepository(sqlite_session)

    repo.upsert(FusionRecord.from_result(result, updated_at=_NOW))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    stored = repo.get("gem-1")
    assert stored is not None
    assert stored.final == {"weight": 2.48, "cut": "oval"}
    assert stored.provenance == {"weight": ["img-1#0"], "cut": ["img-2#0"]}
    assert stored.confidence["overall"] == result.overall_confidence
    assert stored.low_confidence == ["cut"]
    assert stored.needs_review
    assert stored.updated_at == _NOW
    assert repo.get("gem-2") is None


def test_fusion_result_upsert_supersedes_previous_row(sqlite_session: Session) -> None:
    repo = SqlAlchemyFusionResultRepository(sqlite_session)
    engine = FusionEngine()

    first = engine.fuse("gem-1", [make_claim(Attribute.COLOR, "blue", 0.9)])
    repo.upsert(FusionRecord.from_result(first, updated_at=_NOW))
    sqlite_session.commit()
    second = engine.fuse("gem-1", [make_claim(Attribute.COLOR, "green", 0.9)])
    repo.upsert(FusionRecord.from_result(second, updated_at=_NOW))
    sqlite_session.commit()

    stored = repo.get("gem-1")
    assert stored is not None
    assert stored.final == {"color": "green"}


def test_gemstone_mark_analyzed_creates_and_updates(sqlite_session: Session) -> None:
    repo = SqlAlchemyGemstoneRepository(sqlite_session)

    repo.mark_analyzed("gem-1", analyzed_at=_NOW, analysis_version="v4")
    sqlite_session.commit()
    later = datetime(2024, 6, 1, tzinfo=UTC)
    repo.mark_analyzed("gem-1", analyzed_at=later, analysis_version="v5")
    sqlite_session.commit()

    status = repo.get("gem-1")
    assert status is not None
    assert status.analyzed
    assert status.analyzed_at == later
    assert status.analysis_version == "v5"
    assert repo.get("gem-2") is None
