"""Boundary validators for extraction records and normalized claims."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import cast

from gemfusion.domain.errors import InvalidExtractionShape

from .claims import ImageExtraction, RawClaim, RawValue, check_confidence
from .enums import ImageCategory


def parse_extraction(payload: object) -> ImageExtraction:
    """Validate a raw extractor record and return it as an ``ImageExtraction``.

    The record must be a mapping with a non-blank ``image_id``, an
    ``image_type`` from the closed category set and a ``claims`` list.
    """

    if not isinstance(payload, Mapping):
        raise InvalidExtractionShape("Extraction result must be a mapping")
    record = cast(Mapping[str, object], payload)

    image_id = record.get("image_id")
    if not isinstance(image_id, str) or not image_id.strip():
        raise InvalidExtractionShape("Extraction result must include a non-empty image_id")

    image_type = _parse_image_type(record.get("image_type"), image_id=image_id)

    claims = record.get("claims")
    if not isinstance(claims, list):
        raise InvalidExtractionShape(f"Extraction for image {image_id} must include a claims list")

    raw_response = record.get("raw_response")
    return ImageExtraction(
        image_id=image_id,
        image_type=image_type,
        claims=tuple(
            _parse_raw_claim(item, image_id=image_id, index=index)
            for index, item in enumerate(cast(list[object], claims))
        ),
        raw_response=cast(dict[str, object], raw_response)
        if isinstance(raw_response, Mapping)
        else None,
        model_version=_optional_str(record.get("model_version")),
        processing_cost_usd=_optional_float(record.get("processing_cost_usd")),
        processing_time_ms=_optional_int(record.get("processing_time_ms")),
    )


def check_raw_claims(extraction: ImageExtraction) -> None:
    """Re-check the claims of an already constructed extraction."""

    if not extraction.image_id:
        raise InvalidExtractionShape("Extraction result must include a non-empty image_id")
    if not isinstance(extraction.image_type, ImageCategory):
        raise InvalidExtractionShape(
            f"Extraction for image {extraction.image_id} has invalid image_type "
            f"{extraction.image_type!r}"
        )
    if not isinstance(extraction.claims, Sequence):
        raise InvalidExtractionShape(
            f"Extraction for image {extraction.image_id} must include a claims list"
        )
    for index, claim in enumerate(extraction.claims):
        if not isinstance(claim, RawClaim):
            raise InvalidExtractionShape(
                f"Claim {index} of image {extraction.image_id} is not a raw claim"
            )
        check_confidence(claim.confidence, context=f"{extraction.image_id}#{index}")


def _parse_image_type(value: object, *, image_id: str) -> ImageCategory:
    if isinstance(value, ImageCategory):
        return value
    if isinstance(value, str):
        try:
            return ImageCategory(value.strip().lower())
        except ValueError:
            pass
    raise InvalidExtractionShape(f"Extraction for image {image_id} has invalid image_type {value!r}")


def _parse_raw_claim(item: object, *, image_id: str, index: int) -> RawClaim:
    context = f"{image_id}#{index}"
    if not isinstance(item, Mapping):
        raise InvalidExtractionShape(f"Claim {context} must be a mapping")
    claim = cast(Mapping[str, object], item)

    attribute = claim.get("attribute", claim.get("field"))
    if not isinstance(attribute, str) or not attribute.strip():
        raise InvalidExtractionShape(f"Claim {context} must name its attribute")
    if "confidence" not in claim:
        raise InvalidExtractionShape(f"Claim {context} must include a confidence")

    raw_value = claim.get("raw_value", claim.get("value"))
    if raw_value is not None and not isinstance(raw_value, str | int | float | bool):
        raw_value = None

    method, raw_text = _parse_provenance(claim.get("provenance"))
    return RawClaim(
        attribute=attribute,
        raw_value=cast(RawValue, raw_value),
        confidence=check_confidence(claim.get("confidence"), context=context),
        unit=_optional_str(claim.get("unit")),
        method=_optional_str(claim.get("method")) or method,
        raw_text=raw_text,
    )


def _parse_provenance(value: object) -> tuple[str | None, str | None]:
    if not isinstance(value, Mapping):
        return None, None
    provenance = cast(Mapping[str, object], value)
    return _optional_str(provenance.get("method")), _optional_str(provenance.get("raw"))


def _optional_str(value: object) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _optional_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return int(value)
