from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Section(str, Enum):
    PROFILE = "profile"
    PERSONAL_INFO = "personal_info"
    PAYMENT = "payment"
    TOURS = "tours"
    CALENDAR = "calendar"
    QUIZ = "quiz"


@dataclass(frozen=True)
class Document:
    id: str
    title: str
    content: str
    section: Section
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentChunk:
    id: str
    content: str
    embedding: list[float]
    document_id: str
    start_index: int
    end_index: int


@dataclass(frozen=True)
class ProcessedDocument:
    id: str
    title: str
    content: str
    section: Section
    metadata: dict[str, Any]
    embedding: list[float]
    chunks: list[DocumentChunk]


@dataclass(frozen=True)
class SimilarityResult:
    document: ProcessedDocument
    similarity: float
    chunk: DocumentChunk | None = None


@dataclass(frozen=True)
class DocumentSource:
    id: str
    title: str
    excerpt: str
    section: Section
    relevance_score: float

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "excerpt": self.excerpt,
            "section": self.section.value,
            "relevanceScore": self.relevance_score,
        }


@dataclass(frozen=True)
class RAGResponse:
    answer: str
    sources: list[DocumentSource]
    confidence: float


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str]
