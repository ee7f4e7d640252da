"""OpenAI-backed per-category claim extractors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from gemfusion.domain.errors import InvalidExtractionShape
from gemfusion.domain.model import ImageCategory
from gemfusion.domain.pipeline import Extractors

from .prompts import EXTRACTOR_PROMPTS
from .schema import EXTRACTION_SCHEMA, ExtractionPayload
from .translator import to_extraction

if TYPE_CHECKING:
    from gemfusion.domain.model import ImageExtraction, ImagePayload, ImageRef

    from .client import VisionClient

log = logging.getLogger(__name__)

_EXTRACTOR_MAX_TOKENS = 800


class OpenAIExtractor:
    """Extractor bound to one image category and its system prompt."""

    def __init__(
        self,
        client: VisionClient,
        category: ImageCategory,
        *,
        model: str | None = None,
    ) -> None:
        if category not in EXTRACTOR_PROMPTS:
            raise ValueError(f"No extractor prompt for image category {category}")
        self.client = client
        self.category = category
        self.prompt = EXTRACTOR_PROMPTS[category]
        self.model = model or client.config.extractor_model

    def __call__(self, image: ImageRef, payload: ImagePayload) -> ImageExtraction:
        response = self.client.complete(
            model=self.model,
            system_prompt=self.prompt,
            schema_name="GemImageExtraction",
            schema=EXTRACTION_SCHEMA,
            image_id=image.image_id,
            payload=payload,
            max_tokens=_EXTRACTOR_MAX_TOKENS,
        )
        if not response.content:
            raise InvalidExtractionShape(
                f"Extractor returned no output for image {image.image_id}"
            )
        try:
            parsed = ExtractionPayload.model_validate_json(response.content)
        except ValidationError as exc:
            raise InvalidExtractionShape(
                f"Extractor returned malformed output for image {image.image_id}: {exc}"
            ) from exc

        log.debug(
            "Extracted %d claims from %s image %s",
            len(parsed.claims),
            self.category,
            image.image_id,
        )
        return to_extraction(
            parsed,
            image_id=image.image_id,
            category=self.category,
            response=response,
        )


def build_openai_extractors(client: VisionClient) -> Extractors:
    return Extractors(
        instrument=OpenAIExtractor(client, ImageCategory.INSTRUMENT),
        label=OpenAIExtractor(client, ImageCategory.LABEL),
        gem_macro=OpenAIExtractor(client, ImageCategory.GEM_MACRO),
    )
