import math

import pytest

from onboarding_api.errors import DimensionMismatchError
from onboarding_api.services.rag.types import DocumentChunk, ProcessedDocument, Section
from onboarding_api.services.rag.vector_store import InMemoryVectorStore, cosine_similarity


def _document(
    document_id: str,
    embedding: list[float],
    chunk_embeddings: list[list[float]] | None = None,
) -> ProcessedDocument:
    chunks = [
        DocumentChunk(
            id=f"{document_id}_chunk_{index}",
            content=f"chunk {index}",
            embedding=chunk_embedding,
            document_id=document_id,
            start_index=0,
            end_index=7,
        )
        for index, chunk_embedding in enumerate(chunk_embeddings or [])
    ]
    return ProcessedDocument(
        id=document_id,
        title=document_id.title(),
        content="content",
        section=Section.PROFILE,
        metadata={},
        embedding=embedding,
        chunks=chunks,
    )


def test_cosine_similarity_of_vector_with_itself() -> None:
    assert math.isclose(cosine_similarity([0.3, 1.2, -4.0], [0.3, 1.2, -4.0]), 1.0, abs_tol=1e-5)


def test_cosine_similarity_of_orthogonal_vectors() -> None:
    assert math.isclose(cosine_similarity([1.0, 0.0], [0.0, 5.0]), 0.0, abs_tol=1e-9)


def test_cosine_similarity_with_zero_vector_is_zero() -> None:
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_cosine_similarity_rejects_length_mismatch() -> None:
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0, 2.0], [1.0])


def test_find_similar_ranks_documents_and_chunks() -> None:
    store = InMemoryVectorStore()
    store.add_document(_document("profile", [1.0, 0.0], chunk_embeddings=[[1.0, 0.2]]))
    store.add_document(_document("quiz", [0.0, 1.0]))

    results = store.find_similar([1.0, 0.0], top_k=3)

    assert [(result.document.id, result.chunk.id if result.chunk else None) for result in results] == [
        ("profile", None),
        ("profile", "profile_chunk_0"),
        ("quiz", None),
    ]
    assert results[0].similarity >= results[1].similarity >= results[2].similarity


def test_find_similar_respects_top_k() -> None:
    store = InMemoryVectorStore()
    for index in range(4):
        store.add_document(_document(f"doc-{index}", [1.0, float(index)]))

    assert len(store.find_similar([1.0, 1.0], top_k=2)) == 2
    assert store.find_similar([1.0, 1.0], top_k=0) == []


def test_find_similar_on_empty_store() -> None:
    assert InMemoryVectorStore().find_similar([1.0, 0.0]) == []


def test_add_document_replaces_existing_id() -> None:
    store = InMemoryVectorStore()
    store.add_document(_document("profile", [1.0, 0.0], chunk_embeddings=[[1.0, 0.0]]))
    store.add_document(_document("profile", [0.0, 1.0]))

    assert store.document_count == 1
    assert store.get_document("profile").embedding == [0.0, 1.0]
    assert len(store.find_similar([1.0, 1.0], top_k=10)) == 1


def test_remove_and_clear() -> None:
    store = InMemoryVectorStore()
    store.add_document(_document("profile", [1.0, 0.0]))
    store.add_document(_document("quiz", [0.0, 1.0]))

    assert store.remove_document("profile") is True
    assert store.remove_document("profile") is False
    assert store.has_document("quiz") is True

    store.clear()
    assert store.get_all_documents() == []
