from __future__ import annotations

from collections import OrderedDict
import logging
from typing import Protocol

import httpx

from onboarding_api.errors import (
    ProviderError,
    ProviderErrorKind,
    provider_error_from_http,
    with_deadline,
)

logger = logging.getLogger(__name__)


class EmbeddingClient(Protocol):
    async def embed_text(self, text: str) -> list[float]: ...


class OpenAIEmbeddingClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        model: str,
        timeout_seconds: float = 20.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    async def embed_text(self, text: str) -> list[float]:
        return await with_deadline(
            self._request_embedding(text),
            self._timeout_seconds,
            operation="embedding request",
        )

    async def _request_embedding(self, text: str) -> list[float]:
        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, text)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, text)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise provider_error_from_http(exc, operation="embedding request") from exc
        except ValueError as exc:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "Invalid embeddings payload: response is not JSON",
                original_error=exc,
            ) from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list) or not data:
            raise ProviderError(ProviderErrorKind.UNKNOWN, "Invalid embeddings payload: missing data")

        embedding = data[0].get("embedding") if isinstance(data[0], dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "Invalid embeddings payload: missing embedding vector",
            )
        try:
            return [float(value) for value in embedding]
        except (TypeError, ValueError) as exc:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "Invalid embeddings payload: non-numeric embedding vector",
                original_error=exc,
            ) from exc

    async def _post(self, client: httpx.AsyncClient, text: str) -> httpx.Response:
        return await client.post(
            f"{self._base_url}/embeddings",
            json={"model": self._model, "input": text},
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout_seconds,
        )


def rolling_hash(text: str) -> str:
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return f"{value:08x}:{len(text)}"


class CachedEmbeddingClient:
    """Memoizes vectors by content hash, keeping at most ``max_entries`` in LRU order."""

    def __init__(self, inner: EmbeddingClient, *, max_entries: int = 2000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._inner = inner
        self._max_entries = max_entries
        self._cache: OrderedDict[str, list[float]] = OrderedDict()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    async def embed_text(self, text: str) -> list[float]:
        key = rolling_hash(text)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Embedding cache hit (%d chars)", len(text))
            self._cache.move_to_end(key)
            return cached

        embedding = await self._inner.embed_text(text)
        self._cache[key] = embedding
        self._cache.move_to_end(key)
        while len(self._cache) > self._max_entries:
            self._cache.popitem(last=False)
        return embedding

    def clear(self) -> None:
        self._cache.clear()
