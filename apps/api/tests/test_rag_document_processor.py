import httpx
import pytest

from fakes import FakeEmbeddingClient, make_document
from onboarding_api.errors import DocumentProcessingError, DocumentValidationError
from onboarding_api.services.rag.document_processor import DocumentProcessor, validate_document
from onboarding_api.services.rag.embedding_client import OpenAIEmbeddingClient


def test_validate_document_accepts_complete_document() -> None:
    result = validate_document(make_document())

    assert result.is_valid is True
    assert result.errors == []


def test_validate_document_collects_every_error() -> None:
    document = make_document("", title=" ", content="", section="billing")

    result = validate_document(document)

    assert result.is_valid is False
    assert result.errors == [
        "Document ID is required",
        "Document title is required",
        "Document content is required",
        "Invalid onboarding section type",
    ]


def test_validate_document_rejects_oversized_content() -> None:
    result = validate_document(make_document(content="a" * 50_001))

    assert result.errors == ["Document content exceeds maximum length of 50,000 characters"]


def test_processor_exposes_validation() -> None:
    processor = DocumentProcessor(FakeEmbeddingClient())

    assert processor.validate_document(make_document()).is_valid is True
    assert processor.validate_document(make_document(title="")).errors == ["Document title is required"]


@pytest.mark.asyncio
async def test_process_document_embeds_document_and_chunks() -> None:
    embedding_client = FakeEmbeddingClient()
    processor = DocumentProcessor(embedding_client, chunk_size=200, chunk_overlap=20)
    content = "Upload a profile photo.  " * 20

    processed = await processor.process_document(make_document(content=content))

    assert processed.id == "doc-1"
    assert processed.content == content.strip().replace("  ", " ")
    assert len(processed.chunks) > 1
    assert processed.chunks[0].id == "doc-1_chunk_0"
    assert processed.chunks[0].start_index == 0
    assert processed.chunks[-1].end_index == len(processed.content)
    for chunk in processed.chunks:
        assert chunk.content == processed.content[chunk.start_index : chunk.end_index]
    assert embedding_client.calls[0].startswith("Profile Requirements\n\n")
    assert len(embedding_client.calls) == len(processed.chunks) + 1


@pytest.mark.asyncio
async def test_process_document_raises_validation_error() -> None:
    processor = DocumentProcessor(FakeEmbeddingClient())

    with pytest.raises(DocumentValidationError) as exc_info:
        await processor.process_document(make_document(content=""))

    assert exc_info.value.errors == ["Document content is required"]


@pytest.mark.asyncio
async def test_process_document_wraps_provider_failure() -> None:
    processor = DocumentProcessor(FakeEmbeddingClient(fail_all=True))

    with pytest.raises(DocumentProcessingError, match="doc-1"):
        await processor.process_document(make_document())


@pytest.mark.asyncio
async def test_process_documents_skips_failures() -> None:
    processor = DocumentProcessor(FakeEmbeddingClient(fail_on="broken"), document_concurrency=2)
    documents = [
        make_document("doc-1"),
        make_document("doc-2", content="This one is broken."),
        make_document("doc-3", content=""),
        make_document("doc-4", title="Quiz", content="Pass the quiz."),
    ]

    processed = await processor.process_documents(documents)

    assert [document.id for document in processed] == ["doc-1", "doc-4"]


def test_processor_rejects_overlap_not_smaller_than_size() -> None:
    with pytest.raises(ValueError):
        DocumentProcessor(FakeEmbeddingClient(), chunk_size=100, chunk_overlap=100)


@pytest.mark.asyncio
async def test_process_documents_skips_document_with_malformed_provider_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if b"broken" in request.content:
            return httpx.Response(200, text="<html>bad gateway</html>")
        return httpx.Response(200, json={"data": [{"embedding": [1.0, 0.0]}]})

    embedding_client = OpenAIEmbeddingClient(
        base_url="https://llm.test/v1",
        api_key="test-key",
        model="text-embedding-ada-002",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    processor = DocumentProcessor(embedding_client)

    processed = await processor.process_documents(
        [make_document("doc-1"), make_document("doc-2", content="This one is broken.")]
    )

    assert [document.id for document in processed] == ["doc-1"]
