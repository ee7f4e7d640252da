"""Persisted records produced by an analysis run.

Records are plain mutable dataclasses so the SQLAlchemy adapter can map them
imperatively. Their payload fields hold JSON-compatible values only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .claims import ImageExtraction, NormalizedClaim
    from .fusion import FusionResult


@dataclass(eq=False, kw_only=True)
class ImageExtractionRecord:
    """Per-image extraction, keyed by ``(gemstone_id, image_id)``."""

    gemstone_id: str
    image_id: str
    image_type: str
    claims: list[dict[str, object]] = field(default_factory=list, repr=False)
    raw_response: dict[str, object] | None = field(default=None, repr=False)
    model_version: str | None = None
    processing_cost_usd: float | None = None
    processing_time_ms: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_extraction(
        cls,
        gemstone_id: str,
        extraction: ImageExtraction,
        claims: list[NormalizedClaim],
        *,
        created_at: datetime,
    ) -> ImageExtractionRecord:
        return cls(
            gemstone_id=gemstone_id,
            image_id=extraction.image_id,
            image_type=str(extraction.image_type),
            claims=[claim.to_payload() for claim in claims],
            raw_response=extraction.raw_response,
            model_version=extraction.model_version,
            processing_cost_usd=extraction.processing_cost_usd,
            processing_time_ms=extraction.processing_time_ms,
            created_at=created_at,
        )


@dataclass(eq=False, kw_only=True)
class FusionRecord:
    """Fused result of a gemstone, keyed by ``gemstone_id``."""

    gemstone_id: str
    images: list[str] = field(default_factory=list)
    final: dict[str, object] = field(default_factory=dict)
    confidence: dict[str, float] = field(default_factory=dict)
    provenance: dict[str, list[str]] = field(default_factory=dict)
    conflicts: list[str] = field(default_factory=list)
    low_confidence: list[str] = field(default_factory=list)
    failed_images: list[str] = field(default_factory=list)
    needs_review: bool = False
    overall_confidence: float = 0.0
    analysis_version: str = "v5"
    updated_at: datetime | None = None

    @classmethod
    def from_result(cls, result: FusionResult, *, updated_at: datetime) -> FusionRecord:
        confidence = {
            str(attribute): fused.confidence for attribute, fused in result.attributes.items()
        }
        confidence["overall"] = result.overall_confidence
        return cls(
            gemstone_id=result.gemstone_id,
            images=list(result.images),
            final=dict(result.final),
            confidence=confidence,
            provenance={
                str(attribute): list(fused.provenance)
                for attribute, fused in result.attributes.items()
            },
            conflicts=[str(attribute) for attribute in result.conflicts],
            low_confidence=[str(attribute) for attribute in result.low_confidence],
            failed_images=list(result.failed_images),
            needs_review=result.needs_review,
            overall_confidence=result.overall_confidence,
            analysis_version=result.analysis_version,
            updated_at=updated_at,
        )


@dataclass(eq=False, kw_only=True)
class GemstoneStatus:
    """Analysis status of a gemstone."""

    gemstone_id: str
    analyzed: bool = False
    analyzed_at: datetime | None = None
    analysis_version: str | None = None
