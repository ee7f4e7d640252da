"""Translate vision payloads into domain objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gemfusion.domain.model import Classification, ImageCategory, ImageExtraction, RawClaim

if TYPE_CHECKING:
    from .client import VisionResponse
    from .schema import ClaimPayload, ClassificationPayload, ExtractionPayload


def to_classification(payload: ClassificationPayload) -> Classification:
    return Classification(
        category=ImageCategory(payload.image_type),
        confidence=payload.confidence,
        reason=payload.reason,
    )


def to_raw_claim(payload: ClaimPayload) -> RawClaim:
    provenance = payload.provenance
    return RawClaim(
        attribute=payload.attribute,
        raw_value=payload.value,
        confidence=payload.confidence,
        unit=payload.unit,
        method=provenance.method if provenance else None,
        raw_text=provenance.raw if provenance else None,
    )


def to_extraction(
    payload: ExtractionPayload,
    *,
    image_id: str,
    category: ImageCategory,
    response: VisionResponse,
) -> ImageExtraction:
    """Build the extraction of ``image_id``.

    The extractor was chosen for ``category``, so the image id and category of
    the request win over whatever the model echoed back.
    """

    return ImageExtraction(
        image_id=image_id,
        image_type=category,
        claims=tuple(to_raw_claim(claim) for claim in payload.claims),
        raw_response=payload.model_dump(mode="json", by_alias=True),
        model_version=response.model,
        processing_cost_usd=response.cost_usd,
        processing_time_ms=response.elapsed_ms,
    )
