import logging
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Path, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from onboarding_api.config import get_settings
from onboarding_api.container import ServiceContainer, build_container
from onboarding_api.errors import (
    NotInitializedError,
    ProviderError,
    RAGInitializationError,
    SessionNotFoundError,
    with_deadline,
)
from onboarding_api.logging_config import setup_logging
from onboarding_api.services.chat.suggestions import help_suggestions
from onboarding_api.services.rag.corpus import documents_by_section
from onboarding_api.services.rag.rag_service import NO_RELEVANT_INFORMATION_ANSWER
from onboarding_api.services.rag.types import RAGResponse, Section
from onboarding_api.services.sections import (
    SECTION_METADATA,
    ordered_sections,
    provisional_guidance_content,
    related_sections,
)

SERVICE_NAME = "Onboarding Guidance API"
SERVICE_VERSION = "0.1.0"
DOCUMENT_EXCERPT_LENGTH = 200
PROVISIONAL_CONFIDENCE = 0.5

logger = logging.getLogger(__name__)

app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HelpRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    question: str = Field(min_length=1, max_length=1000)
    section: Section | None = None
    context: str | None = Field(default=None, max_length=500)


class ChatContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    section: Section | None = None


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    message: str = Field(min_length=1, max_length=2000)
    session_id: str | None = Field(default=None, alias="sessionId", min_length=1, max_length=100)
    context: ChatContext | None = None


@app.on_event("startup")
async def startup() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    container = build_container(settings)
    app.state.container = container
    if settings.rag_preload:
        container.corpus_loader.start_background_load()


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        container = build_container(get_settings())
        request.app.state.container = container
    return container


Container = Annotated[ServiceContainer, Depends(get_container)]


def _log_provider_failure(operation: str, exc: ProviderError) -> None:
    logger.warning(
        "%s answered without grounding kind=%s error=%s",
        operation,
        exc.kind.value,
        exc,
    )


def _rag_payload(response: RAGResponse) -> dict[str, Any]:
    return {
        "sources": [source.to_payload() for source in response.sources],
        "confidence": response.confidence,
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api")
def service_info() -> dict[str, Any]:
    return {
        "name": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": [
            "/api/sections",
            "/api/sections/{section_id}/guidance",
            "/api/help",
            "/api/chat",
            "/api/chat/{session_id}/history",
            "/api/rag/status",
        ],
    }


@app.get("/api/sections")
def list_sections() -> list[dict[str, Any]]:
    return [info.to_payload() for info in ordered_sections()]


@app.get("/api/sections/{section_id}/guidance")
async def section_guidance(section_id: Section, container: Container) -> dict[str, Any]:
    info = SECTION_METADATA[section_id]
    related = [related_info.to_payload() for related_info in related_sections(section_id)]
    loader = container.corpus_loader

    if not loader.is_loaded:
        loader.start_background_load()
        return {
            "section": info.to_payload(),
            "guidance": {
                "title": info.title,
                "content": provisional_guidance_content(info),
                "sources": [],
                "confidence": PROVISIONAL_CONFIDENCE,
            },
            "relatedSections": related,
            "documents": [],
        }

    try:
        response = await with_deadline(
            loader.get_section_guidance(section_id),
            container.settings.request_timeout_seconds,
            operation="section guidance",
        )
    except ProviderError as exc:
        _log_provider_failure("Section guidance", exc)
        response = RAGResponse(answer=provisional_guidance_content(info), sources=[], confidence=0.0)
    except (RAGInitializationError, NotInitializedError) as exc:
        raise HTTPException(status_code=503, detail="onboarding documentation is unavailable") from exc

    return {
        "section": info.to_payload(),
        "guidance": {"title": info.title, "content": response.answer, **_rag_payload(response)},
        "relatedSections": related,
        "documents": [
            {
                "id": document.id,
                "title": document.title,
                "excerpt": document.content[:DOCUMENT_EXCERPT_LENGTH] + "...",
                "metadata": document.metadata,
            }
            for document in documents_by_section(section_id)
        ],
    }


@app.post("/api/help")
async def help_request(request: HelpRequest, container: Container) -> dict[str, Any]:
    try:
        response = await with_deadline(
            container.corpus_loader.query_with_context(request.question, request.section),
            container.settings.request_timeout_seconds,
            operation="help request",
        )
    except ProviderError as exc:
        _log_provider_failure("Help request", exc)
        response = RAGResponse(answer=NO_RELEVANT_INFORMATION_ANSWER, sources=[], confidence=0.0)
    except (RAGInitializationError, NotInitializedError) as exc:
        raise HTTPException(status_code=503, detail="onboarding documentation is unavailable") from exc

    return {
        "question": request.question,
        "answer": response.answer,
        **_rag_payload(response),
        "context": {
            "section": request.section.value if request.section else None,
            "userContext": request.context,
        },
        "suggestions": help_suggestions(request.question, request.section),
    }


@app.post("/api/chat")
async def chat(request: ChatRequest, container: Container) -> dict[str, Any]:
    context = request.context.model_dump(mode="json", exclude_none=True) if request.context else None
    turn = await container.chat_manager.send_message(
        request.message,
        session_id=request.session_id,
        context=context,
    )
    return turn.to_payload()


@app.get("/api/chat/{session_id}/history")
async def chat_history(
    session_id: Annotated[str, Path(min_length=1, max_length=100)],
    container: Container,
) -> dict[str, Any]:
    try:
        session = container.chat_manager.history(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="chat session not found") from exc
    return session.to_payload()


@app.get("/api/rag/status")
async def rag_status(container: Container) -> dict[str, Any]:
    return container.corpus_loader.system_status()


def run() -> None:
    import uvicorn

    uvicorn.run("onboarding_api.main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
