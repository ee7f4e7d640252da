"""Vision-inference service configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_float, env_int, require_env_vars

DEFAULT_CLASSIFIER_MODEL = "gpt-4o-mini"
DEFAULT_EXTRACTOR_MODEL = "gpt-4o"
INFERENCE_TIMEOUT_SECONDS = 60.0
INFERENCE_MAX_RETRIES = 2


@dataclass(frozen=True)
class InferenceConfig:
    """Holds OpenAI vision API configuration values."""

    api_key: str
    classifier_model: str = DEFAULT_CLASSIFIER_MODEL
    extractor_model: str = DEFAULT_EXTRACTOR_MODEL
    timeout_seconds: float = INFERENCE_TIMEOUT_SECONDS
    max_retries: int = INFERENCE_MAX_RETRIES


def get_inference_config() -> InferenceConfig:
    values = require_env_vars(("OPENAI_API_KEY",))
    return InferenceConfig(
        api_key=values["OPENAI_API_KEY"],
        classifier_model=os.getenv("GEMFUSION_CLASSIFIER_MODEL") or DEFAULT_CLASSIFIER_MODEL,
        extractor_model=os.getenv("GEMFUSION_EXTRACTOR_MODEL") or DEFAULT_EXTRACTOR_MODEL,
        timeout_seconds=env_float("INFERENCE_TIMEOUT_SECONDS", INFERENCE_TIMEOUT_SECONDS),
        max_retries=env_int("INFERENCE_MAX_RETRIES", INFERENCE_MAX_RETRIES),
    )
