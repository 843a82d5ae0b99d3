import json

import httpx
import pytest

from fakes import FakeEmbeddingClient
from onboarding_api.errors import ProviderError, ProviderErrorKind
from onboarding_api.services.rag.embedding_client import (
    CachedEmbeddingClient,
    OpenAIEmbeddingClient,
    rolling_hash,
)


def _client(handler) -> OpenAIEmbeddingClient:
    return OpenAIEmbeddingClient(
        base_url="https://llm.test/v1",
        api_key="test-key",
        model="text-embedding-ada-002",
        timeout_seconds=5,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_openai_embedding_client_parses_vector() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"embedding": [1, 2.5, 3]}]})

    vector = await _client(handler).embed_text("profile photo")

    assert vector == [1.0, 2.5, 3.0]
    assert captured["url"] == "https://llm.test/v1/embeddings"
    assert captured["body"] == {"model": "text-embedding-ada-002", "input": "profile photo"}


@pytest.mark.asyncio
async def test_openai_embedding_client_maps_rate_limit() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "slow down"}})

    with pytest.raises(ProviderError) as exc_info:
        await _client(handler).embed_text("profile photo")

    assert exc_info.value.kind is ProviderErrorKind.RATE_LIMIT


@pytest.mark.asyncio
async def test_openai_embedding_client_rejects_missing_vector() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"embedding": []}]})

    with pytest.raises(ProviderError, match="missing embedding vector"):
        await _client(handler).embed_text("profile photo")


@pytest.mark.asyncio
async def test_openai_embedding_client_maps_non_json_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>bad gateway</html>")

    with pytest.raises(ProviderError, match="not JSON") as exc_info:
        await _client(handler).embed_text("profile photo")

    assert exc_info.value.kind is ProviderErrorKind.UNKNOWN


@pytest.mark.asyncio
async def test_openai_embedding_client_rejects_non_numeric_vector() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"embedding": ["x", None]}]})

    with pytest.raises(ProviderError, match="non-numeric"):
        await _client(handler).embed_text("profile photo")


def test_rolling_hash_includes_length() -> None:
    assert rolling_hash("abc") != rolling_hash("abd")
    assert rolling_hash("abc").endswith(":3")
    assert rolling_hash("") == "00000000:0"


@pytest.mark.asyncio
async def test_cached_embedding_client_reuses_vectors() -> None:
    inner = FakeEmbeddingClient()
    cached = CachedEmbeddingClient(inner)

    first = await cached.embed_text("profile photo")
    second = await cached.embed_text("profile photo")
    await cached.embed_text("quiz")

    assert first == second
    assert inner.calls == ["profile photo", "quiz"]
    assert cached.cache_size == 2

    cached.clear()
    assert cached.cache_size == 0


@pytest.mark.asyncio
async def test_cached_embedding_client_evicts_least_recently_used() -> None:
    inner = FakeEmbeddingClient()
    cached = CachedEmbeddingClient(inner, max_entries=2)

    await cached.embed_text("profile")
    await cached.embed_text("quiz")
    await cached.embed_text("profile")
    await cached.embed_text("calendar")
    await cached.embed_text("profile")
    await cached.embed_text("quiz")

    assert cached.cache_size == 2
    assert inner.calls == ["profile", "quiz", "calendar", "quiz"]


def test_cached_embedding_client_requires_positive_size() -> None:
    with pytest.raises(ValueError):
        CachedEmbeddingClient(FakeEmbeddingClient(), max_entries=0)
