"""Resilient Image Client — retry policy and error mapping around the Images API.

Invariants:
    - 429 retried with Retry-After (or backoff), then rate_limit
    - 5xx and connection errors retried, then connection_error
    - Timeouts and other API errors fail immediately
    - Missing or undecodable payloads map to empty_response
"""

import base64
from types import SimpleNamespace

import httpx
import openai
import pytest

import aixchange.infrastructure.image_client as image_client
from aixchange.core.errors import ImageGenerationError
from aixchange.infrastructure.image_client import ResilientImageClient

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/images/generations")


def _response(status: int, headers: dict | None = None) -> httpx.Response:
    return httpx.Response(status, request=REQUEST, headers=headers or {})


def rate_limited(retry_after: str | None = None):
    headers = {"retry-after": retry_after} if retry_after else None
    return openai.RateLimitError("slow down", response=_response(429, headers), body=None)


def server_error():
    return openai.InternalServerError("oops", response=_response(500), body=None)


def image_payload(data: bytes = b"png-bytes"):
    return SimpleNamespace(data=[SimpleNamespace(b64_json=base64.b64encode(data).decode())])


class FakeImages:
    """Replays a script of responses/exceptions for images.generate."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    async def generate(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def sleeps(monkeypatch):
    delays: list[float] = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(image_client.asyncio, "sleep", fake_sleep)
    return delays


def make_client(images: FakeImages, max_retries: int = 2) -> ResilientImageClient:
    return ResilientImageClient(
        api_key="sk-test",
        max_retries=max_retries,
        base_delay_ms=100,
        max_delay_ms=1000,
        client=SimpleNamespace(images=images),
    )


async def test_success_decodes_payload():
    images = FakeImages(image_payload(b"hello"))

    data = await make_client(images).generate_png("a cat")

    assert data == b"hello"
    call = images.calls[0]
    assert call["prompt"] == "a cat"
    assert call["response_format"] == "b64_json"
    assert call["model"] == "dall-e-3"
    assert call["n"] == 1


async def test_rate_limit_honours_retry_after(sleeps):
    images = FakeImages(rate_limited("2"), image_payload())

    assert await make_client(images).generate_png("p") == b"png-bytes"
    assert sleeps == [2.0]


async def test_rate_limit_exhausted(sleeps):
    images = FakeImages(rate_limited(), rate_limited(), rate_limited())

    with pytest.raises(ImageGenerationError) as exc:
        await make_client(images).generate_png("p")

    assert exc.value.api_error_type == "rate_limit"
    assert len(images.calls) == 3
    assert len(sleeps) == 2


async def test_transient_errors_are_retried(sleeps):
    images = FakeImages(
        server_error(), openai.APIConnectionError(request=REQUEST), image_payload(),
    )

    assert await make_client(images).generate_png("p") == b"png-bytes"
    assert len(images.calls) == 3
    # exponential with +-25% jitter: 100ms then 200ms
    assert 0.075 <= sleeps[0] <= 0.125
    assert 0.15 <= sleeps[1] <= 0.25


async def test_transient_errors_exhausted(sleeps):
    images = FakeImages(server_error(), server_error())

    with pytest.raises(ImageGenerationError) as exc:
        await make_client(images, max_retries=1).generate_png("p")

    assert exc.value.api_error_type == "connection_error"


async def test_timeout_fails_immediately(sleeps):
    images = FakeImages(openai.APITimeoutError(request=REQUEST))

    with pytest.raises(ImageGenerationError) as exc:
        await make_client(images).generate_png("p")

    assert exc.value.api_error_type == "timeout"
    assert sleeps == []


async def test_client_error_fails_immediately(sleeps):
    bad = openai.BadRequestError("content policy", response=_response(400), body=None)
    images = FakeImages(bad)

    with pytest.raises(ImageGenerationError) as exc:
        await make_client(images).generate_png("p")

    assert exc.value.api_error_type == "client_error"
    assert len(images.calls) == 1


async def test_empty_response():
    images = FakeImages(SimpleNamespace(data=[]))

    with pytest.raises(ImageGenerationError) as exc:
        await make_client(images).generate_png("p")

    assert exc.value.api_error_type == "empty_response"


async def test_undecodable_payload():
    images = FakeImages(SimpleNamespace(data=[SimpleNamespace(b64_json="!!not base64!!")]))

    with pytest.raises(ImageGenerationError) as exc:
        await make_client(images).generate_png("p")

    assert exc.value.api_error_type == "empty_response"


def test_backoff_is_capped():
    client = make_client(FakeImages(), max_retries=5)
    assert client._backoff(10) <= 1250
