"""Fusion policy: tolerances, source weights and review thresholds."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from gemfusion.domain.model import NUMERIC_ATTRIBUTES, Attribute, SourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_ANALYSIS_VERSION: Final = "v5"


@dataclass(slots=True, frozen=True)
class NumericRule:
    """Grouping tolerance and review tolerance of one numeric attribute."""

    tolerance: float
    review_tolerance: float

    def __post_init__(self) -> None:
        for name in ("tolerance", "review_tolerance"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number, got {value!r}")

    @property
    def decimals(self) -> int:
        """Number of decimals implied by the tolerance (0.02 -> 2, 0.25 -> 2)."""

        exponent = Decimal(str(self.tolerance)).normalize().as_tuple().exponent
        if not isinstance(exponent, int):
            return 0
        return max(0, -exponent)


WEIGHT_RULE: Final = NumericRule(tolerance=0.02, review_tolerance=0.01)
DIMENSION_RULE: Final = NumericRule(tolerance=0.25, review_tolerance=0.12)


def _default_numeric_rules() -> Mapping[Attribute, NumericRule]:
    return MappingProxyType(
        {
            Attribute.WEIGHT: WEIGHT_RULE,
            Attribute.LENGTH: DIMENSION_RULE,
            Attribute.WIDTH: DIMENSION_RULE,
            Attribute.DEPTH: DIMENSION_RULE,
        }
    )


def _default_source_weights() -> Mapping[SourceKind, float]:
    return MappingProxyType(
        {
            SourceKind.INSTRUMENT: 1.0,
            SourceKind.CERTIFICATE: 1.0,
            SourceKind.LABEL: 0.9,
            SourceKind.VISUAL_ESTIMATE: 0.6,
        }
    )


# Breaks ties between equally weighted source kinds; lower ranks win.
_SOURCE_RANKS: Final[Mapping[SourceKind, int]] = MappingProxyType(
    {
        SourceKind.INSTRUMENT: 0,
        SourceKind.CERTIFICATE: 1,
        SourceKind.LABEL: 2,
        SourceKind.VISUAL_ESTIMATE: 3,
    }
)


@dataclass(slots=True, frozen=True, kw_only=True)
class FusionPolicy:
    numeric_rules: Mapping[Attribute, NumericRule] = field(default_factory=_default_numeric_rules)
    source_weights: Mapping[SourceKind, float] = field(default_factory=_default_source_weights)
    min_confidence: float = 0.6
    conflict_margin: float = 0.10
    free_text_confidence_ceiling: float = 0.5
    analysis_version: str = DEFAULT_ANALYSIS_VERSION

    def __post_init__(self) -> None:
        missing = [str(attr) for attr in NUMERIC_ATTRIBUTES if attr not in self.numeric_rules]
        if missing:
            raise ValueError(f"Fusion policy lacks numeric rules for: {', '.join(missing)}")
        for kind in SourceKind:
            weight = self.source_weights.get(kind)
            if weight is None or not 0.0 < weight <= 1.0:
                raise ValueError(f"Source weight for {kind} must lie within (0, 1], got {weight!r}")
        _check_unit_interval("min_confidence", self.min_confidence)
        _check_unit_interval("conflict_margin", self.conflict_margin)
        _check_unit_interval("free_text_confidence_ceiling", self.free_text_confidence_ceiling)
        if not self.analysis_version:
            raise ValueError("analysis_version must not be empty")

    def rule_for(self, attribute: Attribute) -> NumericRule:
        return self.numeric_rules[attribute]

    def weight_of(self, kind: SourceKind) -> float:
        return self.source_weights[kind]

    def priority_of(self, kind: SourceKind) -> tuple[float, int]:
        """Sort key where larger means more trusted."""

        return (self.source_weights[kind], -_SOURCE_RANKS[kind])


def _check_unit_interval(name: str, value: float) -> None:
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must lie within [0, 1], got {value!r}")
