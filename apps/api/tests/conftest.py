from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from fakes import build_test_container
from onboarding_api.config import get_settings
from onboarding_api.container import ServiceContainer
from onboarding_api.main import app, get_container


@pytest.fixture(autouse=True)
def reset_api_caches(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("RAG_PRELOAD", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def container() -> ServiceContainer:
    return build_test_container()


@pytest.fixture
def client(container: ServiceContainer) -> Iterator[TestClient]:
    app.dependency_overrides[get_container] = lambda: container

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
