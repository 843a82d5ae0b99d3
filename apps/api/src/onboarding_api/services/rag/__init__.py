from onboarding_api.services.rag.document_processor import DocumentProcessor
from onboarding_api.services.rag.rag_service import RAGService
from onboarding_api.services.rag.types import Document, DocumentSource, RAGResponse, Section
from onboarding_api.services.rag.vector_store import InMemoryVectorStore

__all__ = [
    "Document",
    "DocumentProcessor",
    "DocumentSource",
    "InMemoryVectorStore",
    "RAGResponse",
    "RAGService",
    "Section",
]
