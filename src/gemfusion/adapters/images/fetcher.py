"""Download gemstone photographs over HTTP."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Final

import httpx

from gemfusion.adapters.http_resilience import ResilientClient
from gemfusion.config.images import get_image_fetch_config
from gemfusion.domain.errors import ImageFetchError
from gemfusion.domain.model import ImagePayload, guess_mime_type

if TYPE_CHECKING:
    from types import TracebackType

    from gemfusion.config.http_resilience import ResilienceConfig
    from gemfusion.domain.model import ImageRef

log = logging.getLogger(__name__)

_IMAGE_SIGNATURES: Final[tuple[bytes, ...]] = (
    b"\xff\xd8\xff",  # jpeg
    b"\x89PNG\r\n\x1a\n",
    b"GIF87a",
    b"GIF89a",
    b"RIFF",  # webp container
)


def looks_like_image(body: bytes) -> bool:
    return body.startswith(_IMAGE_SIGNATURES)


class HttpImageFetcher:
    """Image fetcher backed by the resilient HTTP client.

    The fetcher owns one event loop and one client for its lifetime, so the
    rate limit and the connection pool span every call. Calls from worker
    threads are serialized onto that loop. Call :meth:`close` (or use the
    fetcher as a context manager) to release both.
    """

    def __init__(
        self,
        config: ResilienceConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_image_fetch_config()
        self._transport = transport
        self._lock = threading.Lock()
        self._runner: asyncio.Runner | None = None
        self._client: ResilientClient | None = None

    def __call__(self, image: ImageRef) -> ImagePayload:
        if image.url is None:
            raise ImageFetchError(f"Image {image.image_id} has no url to fetch")
        with self._lock:
            if self._runner is None:
                self._runner = asyncio.Runner()
            return self._runner.run(self._fetch(image, image.url))

    def __enter__(self) -> HttpImageFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            runner, client = self._runner, self._client
            self._runner = self._client = None
            if runner is None:
                return
            try:
                if client is not None:
                    runner.run(client.aclose())
            finally:
                runner.close()

    def _get_client(self) -> ResilientClient:
        if self._client is None:
            self._client = ResilientClient(
                self.config,
                transport=self._transport,
                should_cache=looks_like_image,
            )
        return self._client

    async def _fetch(self, image: ImageRef, url: str) -> ImagePayload:
        log.debug("Fetching image %s from %s", image.image_id, url)
        client = self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ImageFetchError(
                f"Image {image.image_id} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ImageFetchError(f"Image {image.image_id} could not be fetched: {exc}") from exc

        if not response.content:
            raise ImageFetchError(f"Image {image.image_id} returned an empty body")
        return ImagePayload(response.content, _mime_type(response, image))


def _mime_type(response: httpx.Response, image: ImageRef) -> str:
    if image.mime_type:
        return image.mime_type
    header = response.headers.get("content-type", "")
    mime_type = header.split(";", 1)[0].strip().lower()
    if mime_type.startswith("image/"):
        return mime_type
    return guess_mime_type(image.url)
