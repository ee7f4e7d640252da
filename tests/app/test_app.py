from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

import pytest

from gemfusion.adapters.images import HttpImageFetcher
from gemfusion.adapters.openai import OpenAIClassifier, OpenAIExtractor
from gemfusion.app import GemstoneAnalyzer, KeyedLock, analyze, build_default_services
from gemfusion.config import InferenceConfig
from gemfusion.domain.fusion import FusionPolicy
from gemfusion.domain.model import ImageCategory
from gemfusion.domain.pipeline import ImageFailurePolicy
from tests.helpers.analysis import FakeAnalysisUnitOfWork, make_image, make_services
from tests.helpers.claims import make_extraction, raw

if TYPE_CHECKING:
    from gemfusion.domain.model import ImageExtraction


def _extractions() -> dict[str, ImageExtraction]:
    return {"img-1": make_extraction("img-1", ImageCategory.LABEL, raw("cut", "oval", 0.8))}


def test_keyed_lock_serializes_holders_of_the_same_key() -> None:
    locks = KeyedLock()
    events: list[str] = []

    def worker(name: str) -> None:
        with locks.hold("gem-1"):
            events.append(f"{name}:start")
            time.sleep(0.01)
            events.append(f"{name}:end")

    threads = [threading.Thread(target=worker, args=(name,)) for name in ("a", "b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert events[0].split(":")[0] == events[1].split(":")[0]
    assert events[2].split(":")[0] == events[3].split(":")[0]
    assert "gem-1" not in locks


def test_keyed_lock_releases_entry_after_error() -> None:
    locks = KeyedLock()

    with pytest.raises(RuntimeError), locks.hold("gem-1"):
        assert "gem-1" in locks
        raise RuntimeError("boom")

    assert "gem-1" not in locks


def test_analyzer_runs_pipeline_under_gemstone_lock() -> None:
    locks = KeyedLock()
    services, uow = make_services(
        categories={"img-1": ImageCategory.LABEL},
        extractions=_extractions(),
    )
    analyzer = GemstoneAnalyzer(services, locks=locks)

    analysis = analyzer.analyze("gem-1", [make_image("img-1")])

    assert analysis.result.final == {"cut": "oval"}
    assert uow.committed
    assert "gem-1" not in locks


def test_analyze_uses_given_services() -> None:
    services, uow = make_services(
        categories={"img-1": ImageCategory.LABEL},
        extractions=_extractions(),
    )

    analysis = analyze("gem-1", [make_image("img-1")], services=services)

    assert analysis.gemstone_id == "gem-1"
    assert uow.committed_gemstones.statuses["gem-1"].analyzed


def test_build_default_services_wires_adapters(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    uow = FakeAnalysisUnitOfWork()
    policy = FusionPolicy(free_text_confidence_ceiling=0.3, analysis_version="v6")

    services = build_default_services(
        inference_config=InferenceConfig(api_key="sk-test"),
        policy=policy,
        on_image_failure=ImageFailurePolicy.SKIP,
        unit_of_work_factory=lambda: uow,
    )

    assert isinstance(services.classify, OpenAIClassifier)
    assert isinstance(services.extractors.label, OpenAIExtractor)
    assert isinstance(services.fetch_image, HttpImageFetcher)
    assert services.engine.policy is policy
    assert services.normalizer.free_text_confidence_ceiling == pytest.approx(0.3)
    assert services.on_image_failure is ImageFailurePolicy.SKIP
    assert services.unit_of_work_factory() is uow
