"""Per-gemstone analysis: classify, extract, normalize, fuse and persist.

Images are processed strictly in order. The fusion engine runs exactly once
per gemstone, and all records of a run are written in one unit of work
together with the gemstone's analyzed flag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, assert_never

from gemfusion.domain.errors import (
    ImageAnalysisError,
    ImageFetchError,
    InferenceError,
    InvalidExtractionShape,
)
from gemfusion.domain.fusion import FusionEngine
from gemfusion.domain.model import (
    ClassifiedImage,
    FusionRecord,
    ImageCategory,
    ImageExtraction,
    ImageExtractionRecord,
    ImagePayload,
    guess_mime_type,
)
from gemfusion.domain.normalize import ClaimNormalizer

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from gemfusion.domain.model import FusionResult, ImageRef, NormalizedClaim
    from gemfusion.domain.ports import (
        AnalysisUnitOfWork,
        ImageClassifier,
        ImageExtractor,
        ImageFetcher,
    )

log = logging.getLogger(__name__)


class ImageFailurePolicy(StrEnum):
    """What to do when fetching or inferring one image fails."""

    ABORT = "abort"
    SKIP = "skip"


@dataclass(slots=True, frozen=True)
class Extractors:
    """One extractor per extractable image category."""

    instrument: ImageExtractor
    label: ImageExtractor
    gem_macro: ImageExtractor

    def extract(self, classified: ClassifiedImage, payload: ImagePayload) -> ImageExtraction:
        image = classified.image
        category = classified.category
        match category:
            case ImageCategory.INSTRUMENT:
                extraction = self.instrument(image, payload)
            case ImageCategory.LABEL:
                extraction = self.label(image, payload)
            case ImageCategory.GEM_MACRO:
                extraction = self.gem_macro(image, payload)
            case ImageCategory.UNKNOWN:
                return ImageExtraction(image_id=image.image_id, image_type=ImageCategory.UNKNOWN)
            case _:
                assert_never(category)

        if extraction.image_id != image.image_id:
            raise InvalidExtractionShape(
                f"Extractor returned image {extraction.image_id!r} for image {image.image_id!r}"
            )
        if extraction.image_type is not category:
            raise InvalidExtractionShape(
                f"Extractor returned image_type {extraction.image_type!r} for "
                f"{category} image {image.image_id}"
            )
        return extraction


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True)
class AnalysisServices:
    """Collaborators of one analysis run, injected by the caller."""

    classify: ImageClassifier
    extractors: Extractors
    unit_of_work_factory: Callable[[], AnalysisUnitOfWork]
    fetch_image: ImageFetcher | None = None
    normalizer: ClaimNormalizer = field(default_factory=ClaimNormalizer)
    engine: FusionEngine = field(default_factory=FusionEngine)
    clock: Callable[[], datetime] = _utcnow
    on_image_failure: ImageFailurePolicy = ImageFailurePolicy.ABORT


@dataclass(slots=True, frozen=True)
class GemstoneAnalysis:
    """Everything one run produced for a gemstone."""

    gemstone_id: str
    images: tuple[ClassifiedImage, ...]
    extractions: tuple[ImageExtraction, ...]
    claims: tuple[NormalizedClaim, ...]
    result: FusionResult

    @property
    def failed_images(self) -> tuple[str, ...]:
        return self.result.failed_images


def analyze_gemstone(
    gemstone_id: str,
    images: Sequence[ImageRef],
    *,
    services: AnalysisServices,
) -> GemstoneAnalysis:
    """Run the full analysis of one gemstone and persist its outcome.

    Raises ``ImageAnalysisError`` when an image fails under the abort policy,
    ``ContractError`` subclasses for malformed collaborator output, and any
    persistence error after the unit of work rolled back.
    """

    if not gemstone_id:
        raise ValueError("gemstone_id must not be empty")
    if not images:
        raise ValueError(f"Gemstone {gemstone_id} has no images to analyze")

    log.info("Analyzing gemstone %s (%d images)", gemstone_id, len(images))

    classified: list[ClassifiedImage] = []
    extractions: list[ImageExtraction] = []
    per_image_claims: list[list[NormalizedClaim]] = []
    failed: list[str] = []
    last_failure: InferenceError | ImageFetchError | None = None

    for image in images:
        try:
            payload = _materialize(image, services.fetch_image)
            classification = services.classify(image, payload)
            current = ClassifiedImage(image=image, classification=classification)
            extraction = services.extractors.extract(current, payload)
        except (InferenceError, ImageFetchError) as exc:
            if services.on_image_failure is ImageFailurePolicy.SKIP:
                log.warning("Skipping image %s of gemstone %s: %s", image.image_id, gemstone_id, exc)
                failed.append(image.image_id)
                last_failure = exc
                continue
            log.error("Aborting gemstone %s on image %s: %s", gemstone_id, image.image_id, exc)
            raise ImageAnalysisError(image.image_id, exc) from exc

        classified.append(current)
        extractions.append(extraction)
        per_image_claims.append(services.normalizer.normalize(extraction))

    if not classified and last_failure is not None:
        log.error("Every image of gemstone %s failed; nothing is persisted", gemstone_id)
        raise ImageAnalysisError(failed[-1], last_failure) from last_failure

    claims = [claim for image_claims in per_image_claims for claim in image_claims]
    result = services.engine.fuse(
        gemstone_id,
        claims,
        images=[item.image.image_id for item in classified],
        failed_images=failed,
    )

    _persist(gemstone_id, extractions, per_image_claims, result, services=services)

    log.info(
        "Analyzed gemstone %s: %d claims, %d attributes, needs_review=%s",
        gemstone_id,
        len(claims),
        len(result.attributes),
        result.needs_review,
    )
    return GemstoneAnalysis(
        gemstone_id=gemstone_id,
        images=tuple(classified),
        extractions=tuple(extractions),
        claims=tuple(claims),
        result=result,
    )


def _materialize(image: ImageRef, fetch_image: ImageFetcher | None) -> ImagePayload:
    if image.data is not None:
        return ImagePayload(image.data, image.mime_type or guess_mime_type(image.url))
    if fetch_image is None:
        raise ImageFetchError(f"Image {image.image_id} has no inline data and no fetcher is set")
    return fetch_image(image)


def _persist(
    gemstone_id: str,
    extractions: Sequence[ImageExtraction],
    per_image_claims: Sequence[list[NormalizedClaim]],
    result: FusionResult,
    *,
    services: AnalysisServices,
) -> None:
    now = services.clock()
    with services.unit_of_work_factory() as uow:
        repositories = uow.repositories
        for extraction, claims in zip(extractions, per_image_claims, strict=True):
            repositories.extractions.upsert(
                ImageExtractionRecord.from_extraction(
                    gemstone_id,
                    extraction,
                    claims,
                    created_at=now,
                )
            )
        repositories.fusion_results.upsert(FusionRecord.from_result(result, updated_at=now))
        repositories.gemstones.mark_analyzed(
            gemstone_id,
            analyzed_at=now,
            analysis_version=result.analysis_version,
        )
        uow.commit()
