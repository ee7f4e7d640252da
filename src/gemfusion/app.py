"""Application entry points wiring the default adapters."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from gemfusion.adapters.images import HttpImageFetcher
from gemfusion.adapters.openai import OpenAIClassifier, VisionClient, build_openai_extractors
from gemfusion.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAnalysisUnitOfWork,
    is_started,
    startup,
)
from gemfusion.config import get_fusion_policy, get_image_fetch_config, get_inference_config
from gemfusion.domain.fusion import FusionEngine
from gemfusion.domain.normalize import ClaimNormalizer
from gemfusion.domain.pipeline import (
    AnalysisServices,
    GemstoneAnalysis,
    ImageFailurePolicy,
    analyze_gemstone,
)
from gemfusion.domain.ports import AnalysisUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gemfusion.config import InferenceConfig
    from gemfusion.domain.fusion import FusionPolicy
    from gemfusion.domain.model import ImageRef

UnitOfWorkFactory = Callable[[], AnalysisUnitOfWork]

log = getLogger(__name__)


@dataclass(slots=True)
class _KeyedEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class KeyedLock:
    """In-process mutual exclusion per key; entries are dropped once unused."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _KeyedEntry] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, _KeyedEntry())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]

    def __contains__(self, key: str) -> bool:
        with self._guard:
            return key in self._entries


class GemstoneAnalyzer:
    """Run gemstone analyses, one at a time per gemstone id within this process."""

    def __init__(self, services: AnalysisServices, *, locks: KeyedLock | None = None) -> None:
        self.services = services
        self._locks = locks or KeyedLock()

    def analyze(self, gemstone_id: str, images: Sequence[ImageRef]) -> GemstoneAnalysis:
        with self._locks.hold(gemstone_id):
            return analyze_gemstone(gemstone_id, images, services=self.services)


_DEFAULT_LOCKS = KeyedLock()


def build_default_services(
    *,
    inference_config: InferenceConfig | None = None,
    policy: FusionPolicy | None = None,
    on_image_failure: ImageFailurePolicy = ImageFailurePolicy.ABORT,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> AnalysisServices:
    """Wire OpenAI inference, HTTP image fetch and SQLAlchemy persistence."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyAnalysisUnitOfWork

    effective_policy = policy or get_fusion_policy()
    vision = VisionClient(inference_config or get_inference_config())
    log.info(
        "Analysis services ready: classifier=%s, extractor=%s, analysis_version=%s, on_failure=%s",
        vision.config.classifier_model,
        vision.config.extractor_model,
        effective_policy.analysis_version,
        on_image_failure,
    )
    return AnalysisServices(
        fetch_image=HttpImageFetcher(get_image_fetch_config()),
        classify=OpenAIClassifier(vision),
        extractors=build_openai_extractors(vision),
        unit_of_work_factory=unit_of_work_factory,
        normalizer=ClaimNormalizer(
            free_text_confidence_ceiling=effective_policy.free_text_confidence_ceiling
        ),
        engine=FusionEngine(effective_policy),
        on_image_failure=on_image_failure,
    )


def analyze(
    gemstone_id: str,
    images: Sequence[ImageRef],
    *,
    services: AnalysisServices | None = None,
) -> GemstoneAnalysis:
    """Analyze one gemstone with the configured adapters."""

    analyzer = GemstoneAnalyzer(services or build_default_services(), locks=_DEFAULT_LOCKS)
    return analyzer.analyze(gemstone_id, images)
