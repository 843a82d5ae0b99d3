from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from onboarding_api.config import get_settings
from onboarding_api.container import ServiceContainer, build_container
from onboarding_api.errors import ProviderError, ProviderErrorKind
from onboarding_api.llm import GenerationClient, GenerationResult
from onboarding_api.services.rag.types import Document, Section

KEYWORDS = (
    "profile",
    "photo",
    "bio",
    "payment",
    "payout",
    "tour",
    "calendar",
    "quiz",
    "personal",
    "language",
)


class FakeEmbeddingClient:
    """Bag-of-keywords vectors, so similarity follows shared vocabulary."""

    def __init__(
        self,
        *,
        fail_on: str | None = None,
        fail_all: bool = False,
        delay_seconds: float = 0.0,
    ) -> None:
        self.fail_on = fail_on
        self.fail_all = fail_all
        self.delay_seconds = delay_seconds
        self.calls: list[str] = []

    async def embed_text(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.fail_all or (self.fail_on is not None and self.fail_on in text):
            raise ProviderError(ProviderErrorKind.SERVER, "embedding backend unavailable")

        lowered = text.lower()
        return [float(lowered.count(keyword)) for keyword in KEYWORDS]


class FakeGenerationClient:
    def __init__(
        self,
        text: str = "**Upload** a clear profile photo and write a short bio",
        *,
        error: Exception | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self.text = text
        self.error = error
        self.delay_seconds = delay_seconds
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return GenerationResult(text=self.text, model="fake-model", used_fallback=False)


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_document(
    document_id: str = "doc-1",
    *,
    title: str = "Profile Requirements",
    content: str = "Upload a profile photo and write a bio.",
    section: Any = Section.PROFILE,
) -> Document:
    return Document(id=document_id, title=title, content=content, section=section)


def build_test_container(
    *,
    embedding_client: FakeEmbeddingClient | None = None,
    generation_client: GenerationClient | None = None,
    **overrides: Any,
) -> ServiceContainer:
    settings = replace(get_settings(), rag_preload=False, **overrides)
    return build_container(
        settings,
        embedding_client=embedding_client or FakeEmbeddingClient(),
        generation_client=generation_client or FakeGenerationClient(),
    )
