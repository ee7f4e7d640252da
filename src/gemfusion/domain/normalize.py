"""Claim normalizer: raw extractor claims to canonical, typed claims.

Unparsable claims are dropped with a debug record, never coerced. Contract
violations in the extraction itself raise ``ContractError`` subclasses.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Final

from gemfusion.domain import vocabulary
from gemfusion.domain.model import (
    Attribute,
    AttributeKind,
    ImageCategory,
    ImageExtraction,
    NormalizedClaim,
    ProvenanceMethod,
    SourceKind,
    check_raw_claims,
    parse_extraction,
)

if TYPE_CHECKING:
    from gemfusion.domain.model import RawClaim, RawValue

log = logging.getLogger(__name__)

DEFAULT_FREE_TEXT_CONFIDENCE_CEILING: Final = 0.5

_NUMBER_WITH_UNIT = re.compile(r"^\s*([+-]?\d+(?:[.,]\d+)?)\s*([^\d\s].*?)?\s*$")
_IDENTIFIER_PREFIX = re.compile(r"^[#№]+")
_WHITESPACE = re.compile(r"\s+")

_WEIGHT_FACTORS: Final[Mapping[str, float]] = {
    "ct": 1.0,
    "cts": 1.0,
    "carat": 1.0,
    "carats": 1.0,
    "кар": 1.0,
    "карат": 1.0,
    "g": 5.0,
    "gr": 5.0,
    "gram": 5.0,
    "grams": 5.0,
    "г": 5.0,
    "гр": 5.0,
    "mg": 0.005,
    "мг": 0.005,
}

_LENGTH_FACTORS: Final[Mapping[str, float]] = {
    "mm": 1.0,
    "мм": 1.0,
    "cm": 10.0,
    "см": 10.0,
    "in": 25.4,
    "inch": 25.4,
    "inches": 25.4,
    '"': 25.4,
}

_UNIT_FACTORS: Final[Mapping[Attribute, Mapping[str, float]]] = {
    Attribute.WEIGHT: _WEIGHT_FACTORS,
    Attribute.LENGTH: _LENGTH_FACTORS,
    Attribute.WIDTH: _LENGTH_FACTORS,
    Attribute.DEPTH: _LENGTH_FACTORS,
}

_VISUAL_METHODS: Final = frozenset(
    {ProvenanceMethod.VISUAL_INFERENCE.value, ProvenanceMethod.GEOMETRIC_ESTIMATE.value}
)


class ClaimNormalizer:
    """Turn one image's raw claims into canonical claims."""

    def __init__(
        self,
        *,
        free_text_confidence_ceiling: float = DEFAULT_FREE_TEXT_CONFIDENCE_CEILING,
    ) -> None:
        if not 0.0 <= free_text_confidence_ceiling <= 1.0:
            raise ValueError("free_text_confidence_ceiling must lie within [0, 1]")
        self.free_text_confidence_ceiling = free_text_confidence_ceiling

    def normalize(self, extraction: ImageExtraction | Mapping[str, object]) -> list[NormalizedClaim]:
        if isinstance(extraction, ImageExtraction):
            check_raw_claims(extraction)
        else:
            extraction = parse_extraction(extraction)

        base_kind = self._base_source_kind(extraction)
        normalized: list[NormalizedClaim] = []
        for position, raw in enumerate(extraction.claims):
            claim = self._normalize_claim(
                raw,
                claim_id=f"{extraction.image_id}#{position}",
                image_id=extraction.image_id,
                base_kind=base_kind,
            )
            if claim is not None:
                normalized.append(claim)

        log.debug(
            "Normalized %d of %d claims for image %s",
            len(normalized),
            len(extraction.claims),
            extraction.image_id,
        )
        return normalized

    def _normalize_claim(
        self,
        raw: RawClaim,
        *,
        claim_id: str,
        image_id: str,
        base_kind: SourceKind,
    ) -> NormalizedClaim | None:
        attribute = vocabulary.resolve_attribute(raw.attribute)
        if attribute is None:
            log.debug("Dropping claim %s: unknown attribute %r", claim_id, raw.attribute)
            return None
        if raw.confidence == 0:
            log.debug("Dropping claim %s: zero confidence", claim_id)
            return None

        confidence = raw.confidence
        value: float | str | None
        match attribute.kind:
            case AttributeKind.NUMERIC:
                value = _parse_measurement(attribute, raw.raw_value, raw.unit)
            case AttributeKind.IDENTIFIER:
                value = _normalize_identifier(raw.raw_value)
            case AttributeKind.CATEGORICAL:
                value, known = _normalize_categorical(attribute, raw.raw_value)
                if value is not None and not known:
                    confidence = min(confidence, self.free_text_confidence_ceiling)

        if value is None:
            log.debug(
                "Dropping claim %s: unparsable %s value %r (unit %r)",
                claim_id,
                attribute,
                raw.raw_value,
                raw.unit,
            )
            return None

        source_kind = SourceKind.VISUAL_ESTIMATE if raw.method in _VISUAL_METHODS else base_kind
        return NormalizedClaim(
            claim_id=claim_id,
            image_id=image_id,
            attribute=attribute,
            value=value,
            unit=attribute.canonical_unit,
            confidence=confidence,
            source_kind=source_kind,
            method=raw.method,
        )

    @staticmethod
    def _base_source_kind(extraction: ImageExtraction) -> SourceKind:
        match extraction.image_type:
            case ImageCategory.INSTRUMENT:
                return SourceKind.INSTRUMENT
            case ImageCategory.LABEL:
                if _names_certification_lab(extraction):
                    return SourceKind.CERTIFICATE
                return SourceKind.LABEL
            case ImageCategory.GEM_MACRO | ImageCategory.UNKNOWN:
                return SourceKind.VISUAL_ESTIMATE


def _names_certification_lab(extraction: ImageExtraction) -> bool:
    for raw in extraction.claims:
        if vocabulary.resolve_attribute(raw.attribute) is not Attribute.CERTIFICATION_LAB:
            continue
        if isinstance(raw.raw_value, str) and vocabulary.is_known_lab(raw.raw_value):
            return True
    return False


def _parse_measurement(attribute: Attribute, raw_value: RawValue, unit: str | None) -> float | None:
    if raw_value is None or isinstance(raw_value, bool):
        return None

    inline_unit: str | None = None
    if isinstance(raw_value, int | float):
        number = float(raw_value)
    else:
        match = _NUMBER_WITH_UNIT.match(raw_value)
        if match is None:
            return None
        number = float(match.group(1).replace(",", "."))
        inline_unit = match.group(2)

    factor = _unit_factor(attribute, inline_unit or unit)
    if factor is None:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return round(number * factor, 6)


def _unit_factor(attribute: Attribute, unit: str | None) -> float | None:
    if unit is None or not unit.strip():
        return 1.0
    key = unit.strip().casefold().rstrip(".")
    return _UNIT_FACTORS[attribute].get(key)


def _normalize_categorical(attribute: Attribute, raw_value: RawValue) -> tuple[str | None, bool]:
    if not isinstance(raw_value, str):
        return None, False
    folded = vocabulary.fold(raw_value)
    if not folded:
        return None, False
    canonical = vocabulary.lookup(attribute, raw_value)
    if canonical is not None:
        return canonical, True
    return folded, False


def _normalize_identifier(raw_value: RawValue) -> str | None:
    if isinstance(raw_value, bool) or raw_value is None:
        return None
    if isinstance(raw_value, int):
        text = str(raw_value)
    elif isinstance(raw_value, str):
        text = raw_value
    else:
        return None
    text = _IDENTIFIER_PREFIX.sub("", _WHITESPACE.sub("", text)).upper()
    return text or None
