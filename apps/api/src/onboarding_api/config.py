from dataclasses import dataclass
from functools import lru_cache
import os

AVAILABLE_CHAT_MODELS = (
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-16k",
    "gpt-4",
    "gpt-4-turbo-preview",
    "gpt-4o",
    "gpt-4o-mini",
)
AVAILABLE_EMBEDDING_MODELS = (
    "text-embedding-ada-002",
    "text-embedding-3-small",
    "text-embedding-3-large",
)


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


def _to_float(value: str | None, *, default: float, minimum: float) -> float:
    if value is None:
        return default
    parsed = float(value)
    return max(minimum, parsed)


def _to_list(value: str | None, *, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_base_url: str
    chat_model: str
    chat_fallback_model: str
    embedding_model: str
    temperature: float
    max_tokens: int
    embedding_timeout_seconds: float
    generation_timeout_seconds: float
    request_timeout_seconds: float
    rag_chunk_size: int
    rag_chunk_overlap: int
    rag_document_concurrency: int
    rag_chunk_concurrency: int
    embedding_cache_size: int
    rag_preload: bool
    chat_max_sessions: int
    chat_session_ttl_seconds: float
    chat_history_window: int
    log_level: str
    cors_origins: tuple[str, ...]


def validate_model_settings(settings: Settings) -> None:
    if settings.chat_model not in AVAILABLE_CHAT_MODELS:
        raise ValueError(f"Invalid chat model: {settings.chat_model}")
    if settings.chat_fallback_model and settings.chat_fallback_model not in AVAILABLE_CHAT_MODELS:
        raise ValueError(f"Invalid chat fallback model: {settings.chat_fallback_model}")
    if settings.embedding_model not in AVAILABLE_EMBEDDING_MODELS:
        raise ValueError(f"Invalid embedding model: {settings.embedding_model}")
    if not 0 <= settings.temperature <= 2:
        raise ValueError("Temperature must be a number between 0 and 2")
    if not 1 <= settings.max_tokens <= 4096:
        raise ValueError("Max tokens must be a number between 1 and 4096")
    if settings.rag_chunk_overlap >= settings.rag_chunk_size:
        raise ValueError("RAG_CHUNK_OVERLAP must be smaller than RAG_CHUNK_SIZE")


@lru_cache
def get_settings() -> Settings:
    settings = Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo"),
        chat_fallback_model=os.getenv("OPENAI_CHAT_FALLBACK_MODEL", ""),
        embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002"),
        temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.7")),
        max_tokens=int(os.getenv("OPENAI_MAX_TOKENS", "1000")),
        embedding_timeout_seconds=_to_float(
            os.getenv("EMBEDDING_TIMEOUT_SECONDS"), default=20.0, minimum=1.0
        ),
        generation_timeout_seconds=_to_float(
            os.getenv("GENERATION_TIMEOUT_SECONDS"), default=25.0, minimum=1.0
        ),
        request_timeout_seconds=_to_float(
            os.getenv("REQUEST_TIMEOUT_SECONDS"), default=60.0, minimum=1.0
        ),
        rag_chunk_size=_to_int(os.getenv("RAG_CHUNK_SIZE"), default=800, minimum=100),
        rag_chunk_overlap=_to_int(os.getenv("RAG_CHUNK_OVERLAP"), default=50, minimum=0),
        rag_document_concurrency=_to_int(
            os.getenv("RAG_DOCUMENT_CONCURRENCY"), default=3, minimum=1
        ),
        rag_chunk_concurrency=_to_int(os.getenv("RAG_CHUNK_CONCURRENCY"), default=2, minimum=1),
        embedding_cache_size=_to_int(os.getenv("EMBEDDING_CACHE_SIZE"), default=2000, minimum=1),
        rag_preload=_to_bool(os.getenv("RAG_PRELOAD"), default=True),
        chat_max_sessions=_to_int(os.getenv("CHAT_MAX_SESSIONS"), default=1000, minimum=1),
        chat_session_ttl_seconds=_to_float(
            os.getenv("CHAT_SESSION_TTL_SECONDS"), default=86400.0, minimum=1.0
        ),
        chat_history_window=_to_int(os.getenv("CHAT_HISTORY_WINDOW"), default=6, minimum=1),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_to_list(os.getenv("CORS_ORIGINS"), default=("http://localhost:5173",)),
    )
    validate_model_settings(settings)
    return settings
