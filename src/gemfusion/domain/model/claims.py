"""Claim primitives: raw per-image readings and their canonical form.

A raw claim is exactly what an extractor reported for one image. A
normalized claim has a closed attribute, a typed value in the attribute's
canonical unit, and a source kind that drives trust during fusion.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gemfusion.domain.errors import InvalidClaimError

from .enums import Attribute, AttributeKind, SourceKind

if TYPE_CHECKING:
    from .enums import ImageCategory

type RawValue = str | int | float | bool | None
type ClaimValue = float | str


def check_confidence(value: object, *, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidClaimError(f"Claim {context} has a non-numeric confidence: {value!r}")
    confidence = float(value)
    if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
        raise InvalidClaimError(f"Claim {context} has confidence outside [0, 1]: {value!r}")
    return confidence


@dataclass(slots=True, frozen=True, kw_only=True)
class RawClaim:
    """One loosely typed attribute reading produced by an extractor."""

    attribute: str
    raw_value: RawValue
    confidence: float
    unit: str | None = None
    method: str | None = None
    raw_text: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ImageExtraction:
    """Black-box extractor output for one image, plus processing metadata."""

    image_id: str
    image_type: ImageCategory
    claims: tuple[RawClaim, ...] = ()
    raw_response: dict[str, object] | None = None
    model_version: str | None = None
    processing_cost_usd: float | None = None
    processing_time_ms: int | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class NormalizedClaim:
    """Canonical claim tied to its source image.

    Construction fails with ``InvalidClaimError`` when the attribute is outside
    the closed set, the confidence is outside ``[0, 1]`` or the value does not
    match the attribute kind.
    """

    claim_id: str
    image_id: str
    attribute: Attribute
    value: ClaimValue
    unit: str | None
    confidence: float
    source_kind: SourceKind
    method: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.attribute, Attribute):
            raise InvalidClaimError(
                f"Claim {self.claim_id} has an attribute outside the closed set: "
                f"{self.attribute!r}"
            )
        if not isinstance(self.source_kind, SourceKind):
            raise InvalidClaimError(
                f"Claim {self.claim_id} has an unknown source kind: {self.source_kind!r}"
            )
        check_confidence(self.confidence, context=self.claim_id)

        value = self.value
        if self.attribute.kind is AttributeKind.NUMERIC:
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise InvalidClaimError(f"Claim {self.claim_id} must carry a numeric value")
            if not math.isfinite(value):
                raise InvalidClaimError(f"Claim {self.claim_id} carries a non-finite value")
        elif not isinstance(value, str) or not value:
            raise InvalidClaimError(f"Claim {self.claim_id} must carry a non-empty text value")

    def to_payload(self) -> dict[str, object]:
        return {
            "claim_id": self.claim_id,
            "image_id": self.image_id,
            "attribute": str(self.attribute),
            "value": self.value,
            "unit": self.unit,
            "confidence": self.confidence,
            "source_kind": str(self.source_kind),
            "method": self.method,
        }
