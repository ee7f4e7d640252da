"""Ports for the image fetch and vision-inference collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gemfusion.domain.model import Classification, ImageExtraction, ImagePayload, ImageRef


@runtime_checkable
class ImageFetcher(Protocol):
    """Materialize the bytes of an image that carries no inline data."""

    def __call__(self, image: ImageRef) -> ImagePayload: ...


@runtime_checkable
class ImageClassifier(Protocol):
    """Assign an ``ImageCategory`` to one photograph."""

    def __call__(self, image: ImageRef, payload: ImagePayload) -> Classification: ...


@runtime_checkable
class ImageExtractor(Protocol):
    """Read raw attribute claims off one photograph of a known category."""

    def __call__(self, image: ImageRef, payload: ImagePayload) -> ImageExtraction: ...
