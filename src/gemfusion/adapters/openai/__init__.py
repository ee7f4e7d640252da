"""OpenAI vision adapters for image classification and claim extraction."""

from __future__ import annotations

from .classifier import OpenAIClassifier
from .client import MODEL_PRICING, VisionClient, VisionResponse, estimate_cost
from .extractors import OpenAIExtractor, build_openai_extractors

__all__ = [
    "MODEL_PRICING",
    "OpenAIClassifier",
    "OpenAIExtractor",
    "VisionClient",
    "VisionResponse",
    "build_openai_extractors",
    "estimate_cost",
]
