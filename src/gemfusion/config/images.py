"""Image download configuration values."""

from __future__ import annotations

from .env import env_float
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

IMAGE_FETCH_USER_AGENT = "gemfusion-image-fetcher/1.0"
IMAGE_FETCH_TIMEOUT_SECONDS = 30.0


def get_image_fetch_config(*, cache: CacheConfig | None = None) -> ResilienceConfig:
    """Return the resilience settings used to download gemstone photographs."""

    return ResilienceConfig(
        name="images",
        timeout_seconds=env_float("IMAGE_FETCH_TIMEOUT_SECONDS", IMAGE_FETCH_TIMEOUT_SECONDS),
        ratelimit=RateLimit(max_calls=8, per_seconds=1.0),
        cache=cache or CacheConfig(backend="sqlite"),
        default_headers={"User-Agent": IMAGE_FETCH_USER_AGENT},
    )
