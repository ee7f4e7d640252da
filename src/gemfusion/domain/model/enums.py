"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Attribute(StrEnum):
    """Closed set of gemstone attributes the core can fuse."""

    WEIGHT = "weight"
    LENGTH = "length"
    WIDTH = "width"
    DEPTH = "depth"
    CUT = "cut"
    COLOR = "color"
    CLARITY = "clarity"
    ORIGIN = "origin"
    GEMSTONE_CODE = "gemstone_code"
    CERTIFICATION_LAB = "certification_lab"
    CERTIFICATION_NUMBER = "certification_number"

    @property
    def kind(self) -> AttributeKind:
        return _ATTRIBUTE_KINDS[self]

    @property
    def canonical_unit(self) -> str | None:
        return _CANONICAL_UNITS.get(self)


class AttributeKind(StrEnum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    IDENTIFIER = "identifier"


class ImageCategory(StrEnum):
    """Classification assigned to one photograph."""

    INSTRUMENT = "instrument"
    LABEL = "label"
    GEM_MACRO = "gem_macro"
    UNKNOWN = "unknown"


class SourceKind(StrEnum):
    """Trust category of the origin of a claim."""

    INSTRUMENT = "instrument"
    CERTIFICATE = "certificate"
    LABEL = "label"
    VISUAL_ESTIMATE = "visual_estimate"


class ProvenanceMethod(StrEnum):
    """How an extractor read a claim off the image."""

    LCD_OCR = "lcd_ocr"
    SCALE_DETECTION = "scale_detection"
    LABEL_OCR = "label_ocr"
    VISUAL_INFERENCE = "visual_inference"
    TEXT_PARSING = "text_parsing"
    GEOMETRIC_ESTIMATE = "geometric_estimate"


_ATTRIBUTE_KINDS: dict[Attribute, AttributeKind] = {
    Attribute.WEIGHT: AttributeKind.NUMERIC,
    Attribute.LENGTH: AttributeKind.NUMERIC,
    Attribute.WIDTH: AttributeKind.NUMERIC,
    Attribute.DEPTH: AttributeKind.NUMERIC,
    Attribute.CUT: AttributeKind.CATEGORICAL,
    Attribute.COLOR: AttributeKind.CATEGORICAL,
    Attribute.CLARITY: AttributeKind.CATEGORICAL,
    Attribute.ORIGIN: AttributeKind.CATEGORICAL,
    Attribute.CERTIFICATION_LAB: AttributeKind.CATEGORICAL,
    Attribute.GEMSTONE_CODE: AttributeKind.IDENTIFIER,
    Attribute.CERTIFICATION_NUMBER: AttributeKind.IDENTIFIER,
}

_CANONICAL_UNITS: dict[Attribute, str] = {
    Attribute.WEIGHT: "ct",
    Attribute.LENGTH: "mm",
    Attribute.WIDTH: "mm",
    Attribute.DEPTH: "mm",
}

NUMERIC_ATTRIBUTES: tuple[Attribute, ...] = tuple(
    attribute for attribute in Attribute if attribute.kind is AttributeKind.NUMERIC
)
