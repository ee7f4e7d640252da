"""Thin wrapper around the OpenAI chat-completions vision API."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import openai
from openai import OpenAI

from gemfusion.config.inference import InferenceConfig, get_inference_config
from gemfusion.domain.errors import InferenceError, InferenceTimeoutError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gemfusion.domain.model import ImagePayload

log = logging.getLogger(__name__)

# Per-1K token pricing (USD)
MODEL_PRICING: Final[dict[str, dict[str, float]]] = {
    "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
    "gpt-4o": {"input": 0.0025, "output": 0.01},
    "gpt-4.1-mini": {"input": 0.0004, "output": 0.0016},
    "gpt-4.1": {"input": 0.002, "output": 0.008},
}


def estimate_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float | None:
    """Return the request cost in USD, or ``None`` for models without pricing."""

    # Longest prefix wins: gpt-4o-mini snapshots must not match gpt-4o.
    for name in sorted(MODEL_PRICING, key=len, reverse=True):
        if model.startswith(name):
            pricing = MODEL_PRICING[name]
            cost = prompt_tokens / 1000 * pricing["input"]
            cost += completion_tokens / 1000 * pricing["output"]
            return round(cost, 6)
    return None


@dataclass(slots=True, frozen=True)
class VisionResponse:
    """Raw structured answer of one vision request plus usage metadata."""

    content: str | None
    model: str
    prompt_tokens: int
    completion_tokens: int
    elapsed_ms: int
    cost_usd: float | None


class VisionClient:
    """Send one image with a system prompt and a strict JSON response schema."""

    def __init__(
        self,
        config: InferenceConfig | None = None,
        *,
        client: OpenAI | None = None,
    ) -> None:
        self.config = config or get_inference_config()
        self._client = client or OpenAI(
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries,
        )

    def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        schema_name: str,
        schema: Mapping[str, object],
        image_id: str,
        payload: ImagePayload,
        max_tokens: int,
    ) -> VisionResponse:
        messages: list[Any] = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": f"image_id={image_id}"},
                    {"type": "image_url", "image_url": {"url": payload.data_uri}},
                ],
            },
        ]
        started = time.perf_counter()
        try:
            completion = self._client.chat.completions.create(
                model=model,
                temperature=0,
                max_tokens=max_tokens,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": dict(schema), "strict": True},
                },
                messages=messages,
                timeout=self.config.timeout_seconds,
            )
        except openai.APITimeoutError as exc:
            raise InferenceTimeoutError(
                f"{schema_name} request for image {image_id} timed out after "
                f"{self.config.timeout_seconds}s"
            ) from exc
        except openai.APIError as exc:
            raise InferenceError(f"{schema_name} request for image {image_id} failed: {exc}") from exc
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        if not completion.choices:
            raise InferenceError(f"{schema_name} response for image {image_id} has no choices")
        usage = completion.usage
        prompt_tokens = usage.prompt_tokens if usage is not None else 0
        completion_tokens = usage.completion_tokens if usage is not None else 0
        model_used = completion.model or model
        cost = estimate_cost(model_used, prompt_tokens, completion_tokens)

        log.info(
            "OpenAI usage: model=%s, prompt_tokens=%s, completion_tokens=%s, cost=%s, elapsed_ms=%s",
            model_used,
            prompt_tokens,
            completion_tokens,
            f"${cost:.4f}" if cost is not None else "unknown",
            elapsed_ms,
        )
        return VisionResponse(
            content=completion.choices[0].message.content,
            model=model_used,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            elapsed_ms=elapsed_ms,
            cost_usd=cost,
        )
