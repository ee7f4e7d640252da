from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from gemfusion.adapters.sqlalchemy import (
    SqlAlchemyAnalysisUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from gemfusion.domain.fusion import FusionEngine
from gemfusion.domain.model import Attribute, FusionRecord, ImageCategory
from gemfusion.domain.pipeline import AnalysisServices, Extractors, analyze_gemstone
from tests.helpers.analysis import FakeClassifier, FakeExtractor, make_image
from tests.helpers.claims import make_claim, make_extraction, raw

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine

_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyAnalysisUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_repositories_require_an_open_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(StartupError):
        _ = SqlAlchemyAnalysisUnitOfWork().repositories


def test_commit_makes_records_visible(
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnalysisUnitOfWork],
) -> None:
    result = FusionEngine().fuse("gem-1", [make_claim(Attribute.CUT, "oval", 0.9)])

    with sqlite_unit_of_work() as uow:
        uow.repositories.fusion_results.upsert(FusionRecord.from_result(result, updated_at=_NOW))
        uow.repositories.gemstones.mark_analyzed(
            "gem-1", analyzed_at=_NOW, analysis_version="v5"
        )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.fusion_results.get("gem-1")
        status = uow.repositories.gemstones.get("gem-1")
        assert stored is not None
        assert stored.final == {"cut": "oval"}
        assert status is not None
        assert status.analyzed


def test_failure_inside_unit_of_work_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnalysisUnitOfWork],
) -> None:
    result = FusionEngine().fuse("gem-1", [make_claim(Attribute.CUT, "oval", 0.9)])

    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.fusion_results.upsert(FusionRecord.from_result(result, updated_at=_NOW))
        raise RuntimeError("crash before commit")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.fusion_results.get("gem-1") is None
        assert uow.repositories.gemstones.get("gem-1") is None


def test_analysis_persists_through_sqlalchemy(
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnalysisUnitOfWork],
) -> None:
    extractor = FakeExtractor(
        {
            "img-1": make_extraction(
                "img-1", ImageCategory.INSTRUMENT, raw("weight", "2.48 ct", 0.9)
            ),
            "img-2": make_extraction("img-2", ImageCategory.LABEL, raw("cut", "oval", 0.8)),
        }
    )
    services = AnalysisServices(
        classify=FakeClassifier(
            {"img-1": ImageCategory.INSTRUMENT, "img-2": ImageCategory.LABEL}
        ),
        extractors=Extractors(instrument=extractor, label=extractor, gem_macro=extractor),
        unit_of_work_factory=sqlite_unit_of_work,
        clock=lambda: _NOW,
    )

    analyze_gemstone("gem-1", [make_image("img-1"), make_image("img-2")], services=services)
    analyze_gemstone("gem-1", [make_image("img-1"), make_image("img-2")], services=services)

    with sqlite_unit_of_work() as uow:
        extractions = uow.repositories.extractions.list_for_gemstone("gem-1")
        stored = uow.repositories.fusion_results.get("gem-1")
        status = uow.repositories.gemstones.get("gem-1")

    assert [record.image_id for record in extractions] == ["img-1", "img-2"]
    assert stored is not None
    assert stored.final == {"weight": 2.48, "cut": "oval"}
    assert stored.images == ["img-1", "img-2"]
    assert not stored.needs_review
    assert status is not None
    assert status.analyzed_at == _NOW
