from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import logging
from time import perf_counter
from typing import Any

from onboarding_api.errors import (
    NotInitializedError,
    ProviderError,
    RAGInitializationError,
)
from onboarding_api.llm import GenerationClient
from onboarding_api.services.rag.document_processor import DocumentProcessor
from onboarding_api.services.rag.embedding_client import EmbeddingClient
from onboarding_api.services.rag.sanitizer import to_plain_text
from onboarding_api.services.rag.types import (
    Document,
    DocumentChunk,
    DocumentSource,
    ProcessedDocument,
    RAGResponse,
)
from onboarding_api.services.rag.vector_store import InMemoryVectorStore

logger = logging.getLogger(__name__)

MAX_SOURCES = 5
SIMILARITY_THRESHOLD = 0.3
EXCERPT_LENGTH = 200

NO_RELEVANT_INFORMATION_ANSWER = (
    "I don't have enough relevant information to answer that question. "
    "Could you please rephrase or ask about a specific onboarding section?"
)
GENERATION_UNAVAILABLE_ANSWER = (
    "I'm having trouble generating a response right now. "
    "Here is the most relevant onboarding documentation I found:"
)


class RAGState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


def create_excerpt(content: str, max_length: int = EXCERPT_LENGTH) -> str:
    if len(content) <= max_length:
        return content

    truncated = content[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


def calculate_confidence(sources: Sequence[DocumentSource]) -> float:
    """Heuristic support score for an answer, not a calibrated probability.

    Sources are weighted by 1/(rank+1), the weighted mean similarity is
    boosted by 1.2, and again by 1.1 when three or more sources survived,
    clamping to 1.0 after each boost.
    """
    if not sources:
        return 0.0

    weighted_sum = 0.0
    total_weight = 0.0
    for rank, source in enumerate(sources):
        weight = 1 / (rank + 1)
        weighted_sum += source.relevance_score * weight
        total_weight += weight

    confidence = min((weighted_sum / total_weight) * 1.2, 1.0)
    if len(sources) >= 3:
        confidence = min(confidence * 1.1, 1.0)
    return round(confidence, 2)


def build_grounding_prompt(
    question: str,
    sources: Sequence[DocumentSource],
    context: str | None = None,
) -> str:
    documentation = "\n\n".join(
        f"From {source.title} ({source.section.value}): {source.excerpt}" for source in sources
    )
    additional_context = f"Additional context: {context}\n\n" if context else ""

    return (
        "You are a helpful assistant for the ToursByLocals guide onboarding process.\n\n"
        "GROUNDING RULES:\n"
        "- Use ONLY the documentation excerpts provided below.\n"
        "- Do NOT use any knowledge from your training data that is not in the excerpts.\n"
        "- If the excerpts do not contain enough information, say so explicitly and name "
        "what documentation would be needed.\n"
        "- Be specific and actionable.\n\n"
        "FORMATTING RULES:\n"
        "- Use PLAIN TEXT ONLY. No markdown: no headers, bold, italics, code or links.\n"
        "- Write short paragraphs. Number steps as 1., 2., 3. and use simple dashes for lists.\n\n"
        f"DOCUMENTATION EXCERPTS:\n{documentation}\n\n"
        f"{additional_context}"
        f"USER QUESTION: {question}\n\n"
        "Answer based ONLY on the documentation excerpts above, in plain text."
    )


def _grounded_fallback_answer(sources: Sequence[DocumentSource]) -> str:
    listing = "\n\n".join(f"- {source.title}: {source.excerpt}" for source in sources)
    return to_plain_text(f"{GENERATION_UNAVAILABLE_ANSWER}\n\n{listing}")


class RAGService:
    def __init__(
        self,
        *,
        processor: DocumentProcessor,
        vector_store: InMemoryVectorStore,
        embedding_client: EmbeddingClient,
        generation_client: GenerationClient,
    ) -> None:
        self._processor = processor
        self._vector_store = vector_store
        self._embedding_client = embedding_client
        self._generation_client = generation_client
        self.state = RAGState.UNINITIALIZED

    @property
    def is_ready(self) -> bool:
        return self.state is RAGState.READY

    async def initialize(self, documents: Sequence[Document]) -> None:
        start = perf_counter()
        self.state = RAGState.INITIALIZING
        logger.info("RAG initialization started with %d documents", len(documents))

        try:
            self._vector_store.clear()
            processed_documents = await self._processor.process_documents(documents)
            if documents and not processed_documents:
                raise RAGInitializationError("No documents could be processed")
            for processed in processed_documents:
                self._vector_store.add_document(processed)
        except Exception as exc:
            self.state = RAGState.UNINITIALIZED
            logger.error(
                "RAG initialization failed after %dms: %s",
                int((perf_counter() - start) * 1000),
                exc,
            )
            if isinstance(exc, RAGInitializationError):
                raise
            raise RAGInitializationError(
                f"Failed to initialize RAG system: {exc}", original_error=exc
            ) from exc

        self.state = RAGState.READY
        logger.info(
            "RAG system initialized with %d documents in %dms",
            len(processed_documents),
            int((perf_counter() - start) * 1000),
        )

    async def update_documents(self, documents: Sequence[Document]) -> None:
        await self.initialize(documents)

    async def add_document(self, document: Document) -> None:
        processed = await self._processor.process_document(document)
        self._vector_store.add_document(processed)
        if self.state is RAGState.UNINITIALIZED:
            self.state = RAGState.READY

    def remove_document(self, document_id: str) -> bool:
        return self._vector_store.remove_document(document_id)

    def get_documents(self) -> list[ProcessedDocument]:
        return self._vector_store.get_all_documents()

    def status(self) -> dict[str, Any]:
        documents = self.get_documents()
        sections: list[str] = []
        for document in documents:
            if document.section.value not in sections:
                sections.append(document.section.value)
        return {
            "initialized": self.is_ready,
            "documentCount": len(documents),
            "sections": sections,
        }

    async def query(self, question: str, context: str | None = None) -> RAGResponse:
        if not self.is_ready:
            raise NotInitializedError()

        query_text = f"{context}\n\n{question}" if context else question
        query_embedding = await self._embedding_client.embed_text(query_text)

        candidates = self._vector_store.find_similar(query_embedding, MAX_SOURCES * 2)
        sources = [
            self._create_source(result.document, result.chunk, result.similarity)
            for result in candidates
            if result.similarity >= SIMILARITY_THRESHOLD
        ][:MAX_SOURCES]

        if not sources:
            return RAGResponse(answer=NO_RELEVANT_INFORMATION_ANSWER, sources=[], confidence=0.0)

        answer = await self._generate_answer(question, sources, context)
        return RAGResponse(answer=answer, sources=sources, confidence=calculate_confidence(sources))

    async def _generate_answer(
        self,
        question: str,
        sources: Sequence[DocumentSource],
        context: str | None,
    ) -> str:
        prompt = build_grounding_prompt(question, sources, context)
        try:
            result = await self._generation_client.generate(prompt)
        except ProviderError as exc:
            logger.warning(
                "Answer generation failed kind=%s error=%s; returning excerpts",
                exc.kind.value,
                exc.message,
            )
            return _grounded_fallback_answer(sources)
        return to_plain_text(result.text)

    @staticmethod
    def _create_source(
        document: ProcessedDocument,
        chunk: DocumentChunk | None,
        similarity: float,
    ) -> DocumentSource:
        content = chunk.content if chunk is not None else document.content
        return DocumentSource(
            id=chunk.id if chunk is not None else document.id,
            title=document.title,
            excerpt=create_excerpt(content.strip()),
            section=document.section,
            relevance_score=similarity,
        )

