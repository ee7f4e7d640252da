"""Image references and their classification."""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass

from .enums import ImageCategory

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


@dataclass(slots=True, frozen=True, kw_only=True)
class ImageRef:
    """One photograph associated with a gemstone.

    ``data`` carries inline bytes when the caller already holds them; otherwise
    the image is materialized from ``url`` by an image fetcher.
    """

    image_id: str
    url: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    def __post_init__(self) -> None:
        if not self.image_id:
            raise ValueError("Image reference requires an image_id")
        if self.url is None and self.data is None:
            raise ValueError(f"Image {self.image_id} is missing both url and data sources")


@dataclass(slots=True, frozen=True)
class ImagePayload:
    """Materialized image bytes ready to be sent to the inference service."""

    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


def guess_mime_type(url: str | None) -> str:
    if url:
        guessed, _encoding = mimetypes.guess_type(url)
        if guessed and guessed.startswith("image/"):
            return guessed
    return DEFAULT_IMAGE_MIME_TYPE


@dataclass(slots=True, frozen=True, kw_only=True)
class Classification:
    category: ImageCategory
    confidence: float
    reason: str = ""


@dataclass(slots=True, frozen=True)
class ClassifiedImage:
    """An image paired with the classification it received in this run."""

    image: ImageRef
    classification: Classification

    @property
    def category(self) -> ImageCategory:
        return self.classification.category
