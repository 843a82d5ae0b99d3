from __future__ import annotations

from dataclasses import dataclass

from onboarding_api.config import Settings
from onboarding_api.llm import GenerationClient, OpenAIChatClient
from onboarding_api.services.chat.session_manager import ChatSessionManager
from onboarding_api.services.rag.corpus_loader import CorpusLoader
from onboarding_api.services.rag.document_processor import DocumentProcessor
from onboarding_api.services.rag.embedding_client import (
    CachedEmbeddingClient,
    EmbeddingClient,
    OpenAIEmbeddingClient,
)
from onboarding_api.services.rag.rag_service import RAGService
from onboarding_api.services.rag.vector_store import InMemoryVectorStore


@dataclass(frozen=True)
class ServiceContainer:
    settings: Settings
    vector_store: InMemoryVectorStore
    rag_service: RAGService
    corpus_loader: CorpusLoader
    chat_manager: ChatSessionManager


def build_container(
    settings: Settings,
    *,
    embedding_client: EmbeddingClient | None = None,
    generation_client: GenerationClient | None = None,
) -> ServiceContainer:
    if embedding_client is None:
        embedding_client = CachedEmbeddingClient(
            OpenAIEmbeddingClient(
                base_url=settings.openai_base_url,
                api_key=settings.openai_api_key,
                model=settings.embedding_model,
                timeout_seconds=settings.embedding_timeout_seconds,
            ),
            max_entries=settings.embedding_cache_size,
        )
    if generation_client is None:
        generation_client = OpenAIChatClient(
            base_url=settings.openai_base_url,
            api_key=settings.openai_api_key,
            default_model=settings.chat_model,
            fallback_model=settings.chat_fallback_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout_seconds=settings.generation_timeout_seconds,
        )

    vector_store = InMemoryVectorStore()
    processor = DocumentProcessor(
        embedding_client,
        chunk_size=settings.rag_chunk_size,
        chunk_overlap=settings.rag_chunk_overlap,
        document_concurrency=settings.rag_document_concurrency,
        chunk_concurrency=settings.rag_chunk_concurrency,
    )
    rag_service = RAGService(
        processor=processor,
        vector_store=vector_store,
        embedding_client=embedding_client,
        generation_client=generation_client,
    )
    corpus_loader = CorpusLoader(rag_service)
    chat_manager = ChatSessionManager(
        corpus_loader=corpus_loader,
        generation_client=generation_client,
        max_sessions=settings.chat_max_sessions,
        session_ttl_seconds=settings.chat_session_ttl_seconds,
        history_window=settings.chat_history_window,
        request_timeout_seconds=settings.request_timeout_seconds,
    )
    return ServiceContainer(
        settings=settings,
        vector_store=vector_store,
        rag_service=rag_service,
        corpus_loader=corpus_loader,
        chat_manager=chat_manager,
    )
