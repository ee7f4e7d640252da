"""Fused attribute values and the per-gemstone fusion result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .claims import ClaimValue
    from .enums import Attribute


@dataclass(slots=True, frozen=True, kw_only=True)
class FusedAttribute:
    """Reconciled value of one attribute with its supporting evidence.

    ``provenance`` lists the claim ids of the winning equivalence class and is
    never empty. ``dissent`` lists claim ids that disagreed with the winner.
    """

    attribute: Attribute
    final_value: ClaimValue
    confidence: float
    provenance: tuple[str, ...]
    supporting_images: tuple[str, ...]
    conflict: bool = False
    low_confidence: bool = False
    dissent: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.provenance:
            raise ValueError(f"Fused attribute {self.attribute} requires provenance")

    def to_payload(self) -> dict[str, object]:
        return {
            "final_value": self.final_value,
            "confidence": self.confidence,
            "provenance": list(self.provenance),
            "supporting_images": list(self.supporting_images),
            "conflict": self.conflict,
            "low_confidence": self.low_confidence,
            "dissent": list(self.dissent),
        }


@dataclass(slots=True, frozen=True, kw_only=True)
class FusionResult:
    """Outcome of one fusion run for a gemstone.

    Carries no wall-clock values: identical claims always produce an equal
    result. ``needs_review`` is derived from the flags and never set directly.
    """

    gemstone_id: str
    attributes: dict[Attribute, FusedAttribute] = field(default_factory=dict)
    overall_confidence: float = 0.0
    conflicts: tuple[Attribute, ...] = ()
    low_confidence: tuple[Attribute, ...] = ()
    analysis_version: str = "v5"
    images: tuple[str, ...] = ()
    failed_images: tuple[str, ...] = ()

    @property
    def partial_coverage(self) -> bool:
        return bool(self.failed_images)

    @property
    def needs_review(self) -> bool:
        return bool(self.conflicts) or bool(self.low_confidence) or self.partial_coverage

    @property
    def final(self) -> dict[str, ClaimValue]:
        return {str(attribute): fused.final_value for attribute, fused in self.attributes.items()}

    def to_payload(self) -> dict[str, object]:
        return {
            "gemstone_id": self.gemstone_id,
            "attributes": {
                str(attribute): fused.to_payload() for attribute, fused in self.attributes.items()
            },
            "overall_confidence": self.overall_confidence,
            "conflicts": [str(attribute) for attribute in self.conflicts],
            "low_confidence": [str(attribute) for attribute in self.low_confidence],
            "needs_review": self.needs_review,
            "partial_coverage": self.partial_coverage,
            "analysis_version": self.analysis_version,
            "images": list(self.images),
            "failed_images": list(self.failed_images),
        }
