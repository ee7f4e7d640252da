"""HTTP image fetch adapter."""

from __future__ import annotations

from .fetcher import HttpImageFetcher, looks_like_image

__all__ = ["HttpImageFetcher", "looks_like_image"]
