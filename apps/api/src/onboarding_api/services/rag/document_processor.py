from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
import logging
from time import perf_counter
from typing import TypeVar

from onboarding_api.errors import DocumentProcessingError, DocumentValidationError, OnboardingError
from onboarding_api.services.rag.chunker import preprocess_content, split_spans
from onboarding_api.services.rag.embedding_client import EmbeddingClient
from onboarding_api.services.rag.types import (
    Document,
    DocumentChunk,
    ProcessedDocument,
    Section,
    ValidationResult,
)

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 50_000

T = TypeVar("T")
R = TypeVar("R")


async def _gather_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    batch_size: int,
) -> list[R]:
    results: list[R] = []
    for offset in range(0, len(items), batch_size):
        batch = items[offset : offset + batch_size]
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))
    return results


def validate_document(document: Document) -> ValidationResult:
    errors: list[str] = []

    if not document.id or not document.id.strip():
        errors.append("Document ID is required")
    if not document.title or not document.title.strip():
        errors.append("Document title is required")
    if not document.content or not document.content.strip():
        errors.append("Document content is required")
    if not isinstance(document.section, Section):
        errors.append("Invalid onboarding section type")
    if document.content and len(document.content) > MAX_CONTENT_LENGTH:
        errors.append("Document content exceeds maximum length of 50,000 characters")

    return ValidationResult(is_valid=not errors, errors=errors)


class DocumentProcessor:
    def __init__(
        self,
        embedding_client: EmbeddingClient,
        *,
        chunk_size: int = 800,
        chunk_overlap: int = 50,
        document_concurrency: int = 3,
        chunk_concurrency: int = 2,
    ) -> None:
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        self._embedding_client = embedding_client
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._document_concurrency = max(1, document_concurrency)
        self._chunk_concurrency = max(1, chunk_concurrency)

    def validate_document(self, document: Document) -> ValidationResult:
        return validate_document(document)

    async def process_document(self, document: Document) -> ProcessedDocument:
        validation = validate_document(document)
        if not validation.is_valid:
            raise DocumentValidationError(document.id, validation.errors)

        start = perf_counter()
        content = preprocess_content(document.content)

        try:
            embedding = await self._embedding_client.embed_text(f"{document.title}\n\n{content}")
            chunks = await self._create_chunks(document.id, content)
        except OnboardingError as exc:
            raise DocumentProcessingError(
                f"Failed to process document {document.id}: {exc.message}",
                details={"document_id": document.id},
                original_error=exc,
            ) from exc

        logger.debug(
            "Processed document %s into %d chunks in %dms",
            document.id,
            len(chunks),
            int((perf_counter() - start) * 1000),
        )
        return ProcessedDocument(
            id=document.id,
            title=document.title,
            content=content,
            section=document.section,
            metadata=dict(document.metadata),
            embedding=embedding,
            chunks=chunks,
        )

    async def process_documents(self, documents: Sequence[Document]) -> list[ProcessedDocument]:
        results = await _gather_in_batches(
            documents,
            self._process_or_none,
            batch_size=self._document_concurrency,
        )
        processed = [result for result in results if result is not None]
        if len(processed) < len(documents):
            logger.warning(
                "Processed %d of %d documents; failures were skipped",
                len(processed),
                len(documents),
            )
        return processed

    async def _process_or_none(self, document: Document) -> ProcessedDocument | None:
        try:
            return await self.process_document(document)
        except (DocumentProcessingError, DocumentValidationError) as exc:
            logger.warning("Skipping document %s: %s", document.id, exc)
            return None

    async def _create_chunks(self, document_id: str, content: str) -> list[DocumentChunk]:
        spans = split_spans(
            content,
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )

        async def embed_span(indexed_span: tuple[int, tuple[int, int]]) -> DocumentChunk:
            index, (start, end) = indexed_span
            chunk_content = content[start:end]
            embedding = await self._embedding_client.embed_text(chunk_content.strip() or chunk_content)
            return DocumentChunk(
                id=f"{document_id}_chunk_{index}",
                content=chunk_content,
                embedding=embedding,
                document_id=document_id,
                start_index=start,
                end_index=end,
            )

        return await _gather_in_batches(
            list(enumerate(spans)),
            embed_span,
            batch_size=self._chunk_concurrency,
        )
