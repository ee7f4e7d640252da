"""Pydantic models and strict JSON schemas for the vision-inference payloads."""

from __future__ import annotations

from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ImageTypeName = Literal["instrument", "label", "gem_macro", "unknown"]

IMAGE_TYPES: Final[tuple[str, ...]] = ("instrument", "label", "gem_macro", "unknown")

CLAIM_FIELDS: Final[tuple[str, ...]] = (
    "dimension_mm_max",
    "dimension_mm_min",
    "dimension_mm_height",
    "weight_ct",
    "cut_shape",
    "cut_style",
    "color_family",
    "color_grade_est",
    "clarity_est",
    "origin_hint",
    "gemstone_code",
    "certification_lab",
    "certification_number",
    "label_text",
    "notes",
)

PROVENANCE_METHODS: Final[tuple[str, ...]] = (
    "lcd_ocr",
    "scale_detection",
    "label_ocr",
    "visual_inference",
    "text_parsing",
    "geometric_estimate",
)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class VisionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ClassificationPayload(VisionBaseModel):
    image_id: str | None = None
    image_type: ImageTypeName
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str = ""


class ProvenancePayload(VisionBaseModel):
    method: str | None = None
    raw: str | None = None

    _normalize_raw = field_validator("raw", mode="before")(_blank_to_none)


class ClaimPayload(VisionBaseModel):
    attribute: str = Field(alias="field")
    value: str | int | float | bool | None = None
    unit: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    provenance: ProvenancePayload | None = None

    _normalize_unit = field_validator("unit", mode="before")(_blank_to_none)


class ExtractionPayload(VisionBaseModel):
    image_id: str | None = None
    image_type: ImageTypeName | None = None
    claims: list[ClaimPayload]


CLASSIFICATION_SCHEMA: Final[dict[str, object]] = {
    "type": "object",
    "required": ["image_id", "image_type", "confidence", "reason"],
    "properties": {
        "image_id": {"type": "string"},
        "image_type": {"type": "string", "enum": list(IMAGE_TYPES)},
        "confidence": {"type": "number"},
        "reason": {"type": "string"},
    },
    "additionalProperties": False,
}

EXTRACTION_SCHEMA: Final[dict[str, object]] = {
    "type": "object",
    "required": ["image_id", "image_type", "claims"],
    "properties": {
        "image_id": {"type": "string"},
        "image_type": {"type": "string", "enum": list(IMAGE_TYPES)},
        "claims": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["field", "value", "unit", "confidence", "provenance"],
                "properties": {
                    "field": {"type": "string", "enum": list(CLAIM_FIELDS)},
                    "value": {"type": ["string", "number", "boolean", "null"]},
                    "unit": {"type": ["string", "null"]},
                    "confidence": {"type": "number"},
                    "provenance": {
                        "type": "object",
                        "required": ["method", "raw"],
                        "properties": {
                            "method": {"type": "string", "enum": list(PROVENANCE_METHODS)},
                            "raw": {"type": ["string", "null"]},
                        },
                        "additionalProperties": False,
                    },
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}
