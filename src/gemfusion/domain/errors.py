"""Error taxonomy for the analysis core.

Contract errors signal a broken upstream contract and always propagate.
Disagreement between claims is never an error; it is reported on the
fusion result. Inference and fetch errors are transient service failures
of a single image.
"""

from __future__ import annotations


class GemfusionError(Exception):
    """Base class for every error raised by the analysis core."""


class ContractError(GemfusionError, ValueError):
    """Raised when data crossing a module boundary violates its contract."""


class InvalidExtractionShape(ContractError):
    """Raised when a per-image extraction record is structurally invalid."""


class InvalidClaimError(ContractError):
    """Raised for a claim with an unknown attribute, a bad confidence, or a mistyped value."""


class InferenceError(GemfusionError):
    """Raised when the vision-inference service fails to answer."""


class InferenceTimeoutError(InferenceError):
    """Raised when an inference request exceeds its hard timeout."""


class ImageFetchError(GemfusionError):
    """Raised when an image cannot be materialized as bytes."""


class ImageAnalysisError(GemfusionError):
    """Raised when one image of a gemstone fails and the run is aborted."""

    def __init__(self, image_id: str, cause: BaseException) -> None:
        super().__init__(f"Analysis of image {image_id} failed: {cause}")
        self.image_id = image_id
        self.cause = cause
