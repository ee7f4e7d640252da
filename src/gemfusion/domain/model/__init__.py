"""Public domain model surface."""

from __future__ import annotations

from gemfusion.domain.model.claims import (
    ClaimValue,
    ImageExtraction,
    NormalizedClaim,
    RawClaim,
    RawValue,
    check_confidence,
)
from gemfusion.domain.model.enums import (
    NUMERIC_ATTRIBUTES,
    Attribute,
    AttributeKind,
    ImageCategory,
    ProvenanceMethod,
    SourceKind,
)
from gemfusion.domain.model.fusion import FusedAttribute, FusionResult
from gemfusion.domain.model.images import (
    DEFAULT_IMAGE_MIME_TYPE,
    Classification,
    ClassifiedImage,
    ImagePayload,
    ImageRef,
    guess_mime_type,
)
from gemfusion.domain.model.records import FusionRecord, GemstoneStatus, ImageExtractionRecord
from gemfusion.domain.model.validators import check_raw_claims, parse_extraction

__all__ = [  # noqa: RUF022
    # enums
    "Attribute",
    "AttributeKind",
    "ImageCategory",
    "ProvenanceMethod",
    "SourceKind",
    "NUMERIC_ATTRIBUTES",
    # images
    "ImageRef",
    "ImagePayload",
    "Classification",
    "ClassifiedImage",
    "DEFAULT_IMAGE_MIME_TYPE",
    "guess_mime_type",
    # claims
    "RawClaim",
    "RawValue",
    "ImageExtraction",
    "NormalizedClaim",
    "ClaimValue",
    "check_confidence",
    # validators
    "parse_extraction",
    "check_raw_claims",
    # fusion
    "FusedAttribute",
    "FusionResult",
    # records
    "ImageExtractionRecord",
    "FusionRecord",
    "GemstoneStatus",
]
