from __future__ import annotations

import asyncio
from collections.abc import Sequence
import contextlib
import logging
from time import perf_counter
from typing import Any

from onboarding_api.errors import OnboardingError, RAGInitializationError
from onboarding_api.services.rag.corpus import ONBOARDING_DOCUMENTS, all_sections
from onboarding_api.services.rag.rag_service import RAGService
from onboarding_api.services.rag.types import Document, RAGResponse, Section
from onboarding_api.services.sections import SECTION_NAMES

logger = logging.getLogger(__name__)

SAMPLE_QUERIES = (
    "How do I set up my profile photo?",
    "What payment information do I need to provide?",
    "How many tours do I need to create?",
    "What is required for the knowledge quiz?",
    "How do I manage my calendar availability?",
    "What personal information is required for verification?",
)


def section_context(section: Section) -> str:
    return f"Context: User is asking about the {SECTION_NAMES[section]} section of onboarding."


class CorpusLoader:
    """Loads the onboarding corpus into the RAG service exactly once.

    Concurrent callers share one in-flight load task; a failed load leaves
    the loader unloaded so the next caller retries.
    """

    def __init__(
        self,
        rag_service: RAGService,
        documents: Sequence[Document] = ONBOARDING_DOCUMENTS,
    ) -> None:
        self._rag_service = rag_service
        self._documents = tuple(documents)
        self._loading_task: asyncio.Task[None] | None = None
        self.is_loaded = False

    @property
    def is_loading(self) -> bool:
        return self._loading_task is not None and not self._loading_task.done()

    async def load(self) -> None:
        if self.is_loaded:
            return
        await asyncio.shield(self._ensure_loading_task())

    def start_background_load(self) -> None:
        if self.is_loaded or self.is_loading:
            return
        self._ensure_loading_task()

    async def reload(self) -> None:
        if self._loading_task is not None:
            with contextlib.suppress(RAGInitializationError):
                await asyncio.shield(self._loading_task)
        self.is_loaded = False
        await self.load()

    def _ensure_loading_task(self) -> asyncio.Task[None]:
        if self._loading_task is None:
            task = asyncio.get_running_loop().create_task(self._perform_load())
            task.add_done_callback(self._on_load_done)
            self._loading_task = task
        return self._loading_task

    def _on_load_done(self, task: asyncio.Task[None]) -> None:
        if self._loading_task is task:
            self._loading_task = None
        if not task.cancelled():
            # mark the exception retrieved; _perform_load already logged it
            task.exception()

    async def _perform_load(self) -> None:
        start = perf_counter()
        logger.info("Loading onboarding corpus with %d documents", len(self._documents))
        try:
            await self._rag_service.initialize(self._documents)
        except OnboardingError as exc:
            self.is_loaded = False
            logger.error(
                "Onboarding corpus load failed after %dms: %s",
                int((perf_counter() - start) * 1000),
                exc,
            )
            raise RAGInitializationError(
                f"Failed to load onboarding documentation: {exc.message}",
                original_error=exc,
            ) from exc

        self.is_loaded = True
        logger.info(
            "Onboarding corpus loaded in %dms, sections=%s",
            int((perf_counter() - start) * 1000),
            [section.value for section in all_sections()],
        )

    async def query_with_context(self, question: str, section: Section | None = None) -> RAGResponse:
        if not self.is_loaded:
            await self.load()
        context = section_context(section) if section is not None else None
        return await self._rag_service.query(question, context)

    async def get_section_guidance(self, section: Section) -> RAGResponse:
        question = (
            f"What do I need to know about {SECTION_NAMES[section]}? "
            "What are the requirements and steps?"
        )
        return await self.query_with_context(question, section)

    async def update_section_documentation(
        self,
        section: Section,
        documents: Sequence[Document],
    ) -> None:
        for existing in self._rag_service.get_documents():
            if existing.section is section:
                self._rag_service.remove_document(existing.id)
        for document in documents:
            await self._rag_service.add_document(document)
        logger.info("Updated %d documents for section %s", len(documents), section.value)

    def system_status(self) -> dict[str, Any]:
        return {
            **self._rag_service.status(),
            "isLoaded": self.is_loaded,
            "isLoading": self.is_loading,
            "availableSections": [section.value for section in all_sections()],
            "totalDocuments": len(self._documents),
        }

    async def run_sample_queries(self) -> list[dict[str, Any]]:
        await self.load()

        results: list[dict[str, Any]] = []
        for query in SAMPLE_QUERIES:
            try:
                response = await self._rag_service.query(query)
            except OnboardingError as exc:
                logger.warning("Sample query failed query=%r error=%s", query, exc)
                results.append({"query": query, "error": exc.message})
                continue
            results.append(
                {
                    "query": query,
                    "answer": response.answer,
                    "sources": [source.to_payload() for source in response.sources],
                    "confidence": response.confidence,
                }
            )
        return results
