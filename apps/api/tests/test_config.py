import pytest

from onboarding_api.config import get_settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "OPENAI_CHAT_MODEL",
        "OPENAI_EMBEDDING_MODEL",
        "RAG_CHUNK_SIZE",
        "RAG_CHUNK_OVERLAP",
        "CHAT_HISTORY_WINDOW",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(key, raising=False)

    settings = get_settings()

    assert settings.chat_model == "gpt-3.5-turbo"
    assert settings.embedding_model == "text-embedding-ada-002"
    assert settings.rag_chunk_size == 800
    assert settings.rag_chunk_overlap == 50
    assert settings.chat_history_window == 6
    assert settings.cors_origins == ("http://localhost:5173",)
    assert settings.rag_preload is False


def test_settings_read_explicit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPENAI_CHAT_FALLBACK_MODEL", "gpt-3.5-turbo")
    monkeypatch.setenv("OPENAI_TEMPERATURE", "0.2")
    monkeypatch.setenv("GENERATION_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

    settings = get_settings()

    assert settings.chat_model == "gpt-4o-mini"
    assert settings.chat_fallback_model == "gpt-3.5-turbo"
    assert settings.temperature == 0.2
    assert settings.generation_timeout_seconds == 12.5
    assert settings.cors_origins == ("http://a.test", "http://b.test")


def test_settings_clamp_to_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAG_DOCUMENT_CONCURRENCY", "0")
    monkeypatch.setenv("CHAT_MAX_SESSIONS", "-5")
    monkeypatch.setenv("EMBEDDING_CACHE_SIZE", "0")

    settings = get_settings()

    assert settings.rag_document_concurrency == 1
    assert settings.chat_max_sessions == 1
    assert settings.embedding_cache_size == 1


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("OPENAI_CHAT_MODEL", "not-a-model", "Invalid chat model"),
        ("OPENAI_EMBEDDING_MODEL", "word2vec", "Invalid embedding model"),
        ("OPENAI_TEMPERATURE", "2.5", "Temperature"),
        ("OPENAI_MAX_TOKENS", "5000", "Max tokens"),
        ("RAG_CHUNK_OVERLAP", "900", "RAG_CHUNK_OVERLAP"),
    ],
)
def test_invalid_settings_raise(
    monkeypatch: pytest.MonkeyPatch,
    key: str,
    value: str,
    message: str,
) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(ValueError, match=message):
        get_settings()
