from __future__ import annotations

import time

import httpx
import pytest

from gemfusion.adapters.images import HttpImageFetcher, looks_like_image
from gemfusion.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from gemfusion.domain.errors import ImageFetchError
from gemfusion.domain.model import ImageRef

_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
_JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16


def _config(ratelimit: RateLimit | None = None) -> ResilienceConfig:
    return ResilienceConfig(
        name="images-test",
        retry=RetryPolicy(total=0),
        cache=CacheConfig(enabled=False),
        ratelimit=ratelimit,
    )


def _fetcher(
    transport: httpx.MockTransport, ratelimit: RateLimit | None = None
) -> HttpImageFetcher:
    return HttpImageFetcher(_config(ratelimit), transport=transport)


def test_fetcher_returns_bytes_and_header_mime_type() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=_PNG, headers={"content-type": "image/png; q=1"})

    with _fetcher(httpx.MockTransport(handler)) as fetcher:
        payload = fetcher(ImageRef(image_id="img-1", url="https://cdn.example.test/photo"))

    assert payload.data == _PNG
    assert payload.mime_type == "image/png"
    assert requested == ["https://cdn.example.test/photo"]


def test_fetcher_falls_back_to_url_extension_for_mime_type() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(
            200, content=_JPEG, headers={"content-type": "application/octet-stream"}
        )
    )

    with _fetcher(transport) as fetcher:
        payload = fetcher(ImageRef(image_id="img-1", url="https://cdn.example.test/a.jpg"))

    assert payload.mime_type == "image/jpeg"


def test_fetcher_prefers_declared_mime_type() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=_PNG))
    image = ImageRef(image_id="img-1", url="https://cdn.example.test/a", mime_type="image/webp")

    with _fetcher(transport) as fetcher:
        assert fetcher(image).mime_type == "image/webp"


def test_fetcher_wraps_http_status_errors() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))

    with _fetcher(transport) as fetcher, pytest.raises(ImageFetchError, match="HTTP 404"):
        fetcher(ImageRef(image_id="img-1", url="https://cdn.example.test/gone.jpg"))


def test_fetcher_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with (
        _fetcher(httpx.MockTransport(handler)) as fetcher,
        pytest.raises(ImageFetchError, match="could not be fetched"),
    ):
        fetcher(ImageRef(image_id="img-1", url="https://cdn.example.test/a.jpg"))


def test_fetcher_rejects_empty_bodies() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b""))

    with _fetcher(transport) as fetcher, pytest.raises(ImageFetchError, match="empty body"):
        fetcher(ImageRef(image_id="img-1", url="https://cdn.example.test/a.jpg"))


def test_fetcher_requires_url() -> None:
    with (
        _fetcher(httpx.MockTransport(lambda request: httpx.Response(200))) as fetcher,
        pytest.raises(ImageFetchError, match="no url"),
    ):
        fetcher(ImageRef(image_id="img-1", data=_PNG))


def test_rate_limit_spans_consecutive_fetches() -> None:
    stamps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        stamps.append(time.monotonic())
        return httpx.Response(200, content=_PNG)

    # Two requests per 0.2s: the four beyond the burst wait at least 0.1s each.
    ratelimit = RateLimit(max_calls=2, per_seconds=0.2)
    with _fetcher(httpx.MockTransport(handler), ratelimit) as fetcher:
        for index in range(6):
            fetcher(ImageRef(image_id=f"img-{index}", url=f"https://cdn.example.test/{index}.png"))

    assert len(stamps) == 6
    assert stamps[-1] - stamps[0] >= 0.35


def test_fetcher_reuses_one_client_until_closed() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=_PNG))
    fetcher = _fetcher(transport)

    fetcher(ImageRef(image_id="img-1", url="https://cdn.example.test/1.png"))
    client = fetcher._client
    fetcher(ImageRef(image_id="img-2", url="https://cdn.example.test/2.png"))

    assert client is not None
    assert fetcher._client is client

    fetcher.close()
    fetcher.close()

    assert fetcher._client is None
    payload = fetcher(ImageRef(image_id="img-3", url="https://cdn.example.test/3.png"))
    assert payload.data == _PNG
    fetcher.close()


def test_looks_like_image_checks_signatures() -> None:
    assert looks_like_image(_PNG)
    assert looks_like_image(_JPEG)
    assert not looks_like_image(b"<html>rate limited</html>")
