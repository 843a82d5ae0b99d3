from __future__ import annotations

import math
from collections.abc import Sequence

from onboarding_api.errors import DimensionMismatchError
from onboarding_api.services.rag.types import ProcessedDocument, SimilarityResult


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class InMemoryVectorStore:
    def __init__(self) -> None:
        self._documents: dict[str, ProcessedDocument] = {}

    def add_document(self, document: ProcessedDocument) -> None:
        # re-adding an id replaces the previous document and its chunks
        self._documents.pop(document.id, None)
        self._documents[document.id] = document

    def remove_document(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None

    def clear(self) -> None:
        self._documents.clear()

    def get_document(self, document_id: str) -> ProcessedDocument | None:
        return self._documents.get(document_id)

    def has_document(self, document_id: str) -> bool:
        return document_id in self._documents

    def get_all_documents(self) -> list[ProcessedDocument]:
        return list(self._documents.values())

    @property
    def document_count(self) -> int:
        return len(self._documents)

    def find_similar(self, query_embedding: Sequence[float], top_k: int = 5) -> list[SimilarityResult]:
        if top_k <= 0:
            return []

        results: list[SimilarityResult] = []
        for document in self._documents.values():
            results.append(
                SimilarityResult(
                    document=document,
                    similarity=cosine_similarity(query_embedding, document.embedding),
                )
            )
            for chunk in document.chunks:
                results.append(
                    SimilarityResult(
                        document=document,
                        chunk=chunk,
                        similarity=cosine_similarity(query_embedding, chunk.embedding),
                    )
                )

        # sort is stable, so ties keep insertion order
        results.sort(key=lambda result: result.similarity, reverse=True)
        return results[:top_k]
