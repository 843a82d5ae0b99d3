from __future__ import annotations

from dataclasses import dataclass
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


@dataclass(frozen=True)
class GenerationResult:
    text: str
    model: str
    used_fallback: bool


class GenerationClient(Protocol):
    async def generate(self, prompt: str) -> GenerationResult: ...


class OpenAIChatClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        default_model: str,
        fallback_model: str = "",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout_seconds: float = 25.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._default_model = default_model
        self._fallback_model = fallback_model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    async def generate(self, prompt: str) -> GenerationResult:
        for model, used_fallback in self._model_candidates():
            try:
                text = await with_deadline(
                    self._chat_completion(model=model, prompt=prompt),
                    self._timeout_seconds,
                    operation="chat completion",
                )
            except ProviderError as exc:
                logger.warning(
                    "Chat completion failed model=%s kind=%s error=%s",
                    model,
                    exc.kind.value,
                    exc.message,
                )
                # auth failures are not model-specific
                if used_fallback or not self._has_fallback() or exc.kind is ProviderErrorKind.AUTH:
                    raise
                continue

            return GenerationResult(text=text, model=model, used_fallback=used_fallback)

        raise ProviderError(ProviderErrorKind.UNKNOWN, "No model candidates configured")

    def _has_fallback(self) -> bool:
        return bool(self._fallback_model) and self._fallback_model != self._default_model

    def _model_candidates(self) -> list[tuple[str, bool]]:
        candidates: list[tuple[str, bool]] = [(self._default_model, False)]
        if self._has_fallback():
            candidates.append((self._fallback_model, True))
        return candidates

    async def _chat_completion(self, *, model: str, prompt: str) -> str:
        request_body = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, request_body)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, request_body)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise provider_error_from_http(exc, operation="chat completion") from exc
        except ValueError as exc:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "Invalid chat completion payload: response is not JSON",
                original_error=exc,
            ) from exc

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "Invalid chat completion payload: missing choices",
            )

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "Invalid chat completion payload: missing assistant content",
            )

        return content.strip()

    async def _post(self, client: httpx.AsyncClient, request_body: dict[str, object]) -> httpx.Response:
        return await client.post(
            f"{self._base_url}/chat/completions",
            json=request_body,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout_seconds,
        )
