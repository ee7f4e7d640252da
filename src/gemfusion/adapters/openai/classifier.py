"""OpenAI-backed image classifier."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from gemfusion.domain.errors import InvalidExtractionShape

from .prompts import CLASSIFIER_PROMPT
from .schema import CLASSIFICATION_SCHEMA, ClassificationPayload
from .translator import to_classification

if TYPE_CHECKING:
    from gemfusion.domain.model import Classification, ImagePayload, ImageRef

    from .client import VisionClient

log = logging.getLogger(__name__)

_CLASSIFIER_MAX_TOKENS = 300


class OpenAIClassifier:
    def __init__(self, client: VisionClient, *, model: str | None = None) -> None:
        self.client = client
        self.model = model or client.config.classifier_model

    def __call__(self, image: ImageRef, payload: ImagePayload) -> Classification:
        response = self.client.complete(
            model=self.model,
            system_prompt=CLASSIFIER_PROMPT,
            schema_name="GemImageClassification",
            schema=CLASSIFICATION_SCHEMA,
            image_id=image.image_id,
            payload=payload,
            max_tokens=_CLASSIFIER_MAX_TOKENS,
        )
        if not response.content:
            raise InvalidExtractionShape(
                f"Classifier returned no output for image {image.image_id}"
            )
        try:
            parsed = ClassificationPayload.model_validate_json(response.content)
        except ValidationError as exc:
            raise InvalidExtractionShape(
                f"Classifier returned malformed output for image {image.image_id}"
            ) from exc

        classification = to_classification(parsed)
        log.debug(
            "Classified image %s as %s (%.2f): %s",
            image.image_id,
            classification.category,
            classification.confidence,
            classification.reason,
        )
        return classification
