"""Error types shared by the retrieval, generation and chat layers.

Provider failures are tagged with a ProviderErrorKind so callers can decide
between retrying, degrading to a fallback answer, or surfacing a stable
user-facing message. Raw upstream messages stay in ``message`` and
``original_error`` for logging only.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from enum import Enum
from typing import Any, TypeVar

import httpx

T = TypeVar("T")


class OnboardingError(Exception):
    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.original_error is not None:
            base += f" | Caused by: {type(self.original_error).__name__}: {self.original_error}"
        return base

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ProviderErrorKind(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    SERVER = "server"
    UNKNOWN = "unknown"


_USER_MESSAGES = {
    ProviderErrorKind.AUTH: "The assistant is not configured correctly. Please contact support.",
    ProviderErrorKind.RATE_LIMIT: "The assistant is receiving too many requests. Please try again later.",
    ProviderErrorKind.TIMEOUT: "The assistant took too long to respond. Please try again.",
    ProviderErrorKind.SERVER: "The assistant service is temporarily unavailable. Please try again later.",
    ProviderErrorKind.UNKNOWN: "The assistant could not process your request. Please try again.",
}


class ProviderError(OnboardingError):
    """Embedding or generation call failed upstream."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, details=details, original_error=original_error)
        self.kind = kind

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self.kind]

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["kind"] = self.kind.value
        return payload


def classify_status_code(status_code: int) -> ProviderErrorKind:
    if status_code in (401, 403):
        return ProviderErrorKind.AUTH
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMIT
    if status_code in (408, 504):
        return ProviderErrorKind.TIMEOUT
    if status_code >= 500:
        return ProviderErrorKind.SERVER
    return ProviderErrorKind.UNKNOWN


class NotInitializedError(OnboardingError):
    def __init__(self, message: str = "RAG system not initialized. Call initialize() first.") -> None:
        super().__init__(message)


class RAGInitializationError(OnboardingError):
    pass


class DocumentValidationError(OnboardingError):
    def __init__(self, document_id: str, errors: list[str]) -> None:
        super().__init__(
            f"Invalid document {document_id or '<missing id>'}: {'; '.join(errors)}",
            details={"document_id": document_id},
        )
        self.errors = list(errors)


class DocumentProcessingError(OnboardingError):
    pass


class DimensionMismatchError(OnboardingError, ValueError):
    def __init__(self, left: int, right: int) -> None:
        super().__init__(
            "Vectors must have the same length for cosine similarity calculation",
            details={"left": left, "right": right},
        )


class SessionNotFoundError(OnboardingError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Chat session not found", details={"session_id": session_id})
        self.session_id = session_id


async def with_deadline(awaitable: Awaitable[T], seconds: float, *, operation: str) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise ProviderError(
            ProviderErrorKind.TIMEOUT,
            f"{operation} timed out after {seconds:g}s",
            details={"operation": operation, "timeout_seconds": seconds},
            original_error=exc,
        ) from exc


def provider_error_from_http(exc: httpx.HTTPError, *, operation: str) -> ProviderError:
    if isinstance(exc, httpx.TimeoutException):
        kind = ProviderErrorKind.TIMEOUT
        details: dict[str, Any] = {"operation": operation}
    elif isinstance(exc, httpx.HTTPStatusError):
        kind = classify_status_code(exc.response.status_code)
        details = {"operation": operation, "status_code": exc.response.status_code}
    else:
        kind = ProviderErrorKind.UNKNOWN
        details = {"operation": operation}
    return ProviderError(kind, f"{operation} failed: {exc}", details=details, original_error=exc)
