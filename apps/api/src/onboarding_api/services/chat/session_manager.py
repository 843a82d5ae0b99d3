from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
import logging
import secrets
import string
from typing import Any

from onboarding_api.errors import OnboardingError, ProviderError, SessionNotFoundError, with_deadline
from onboarding_api.llm import GenerationClient
from onboarding_api.services.chat.suggestions import chat_suggestions
from onboarding_api.services.chat.types import ChatMessage, ChatSession, ChatTurn, Sender
from onboarding_api.services.rag.corpus_loader import CorpusLoader
from onboarding_api.services.rag.sanitizer import to_plain_text
from onboarding_api.services.rag.types import DocumentSource, RAGResponse, Section
from onboarding_api.services.sections import SECTION_NAMES

logger = logging.getLogger(__name__)

GROUNDING_CONFIDENCE_THRESHOLD = 0.3

_BASE36 = string.digits + string.ascii_lowercase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _random_token(length: int = 9) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def generate_session_id(now: datetime | None = None) -> str:
    return f"chat_{_millis(now or _utcnow())}_{_random_token()}"


def generate_message_id(now: datetime | None = None) -> str:
    return f"msg_{_millis(now or _utcnow())}_{_random_token()}"


def fallback_response(message: str) -> str:
    return (
        f'I don\'t have specific information about "{message}" in the current onboarding documentation.\n\n'
        "To get the most accurate and up-to-date information, I recommend:\n\n"
        "1. Check the specific onboarding section you're working on for detailed requirements\n"
        "2. Contact your Guide Acquisition Specialist for personalized assistance\n"
        "3. Review the complete onboarding checklist to see if your question relates to a different step\n\n"
        "If you can rephrase your question or ask about a specific onboarding step (Profile, Personal Info, "
        "Payment, Tours, Calendar, or Quiz), I might be able to provide more targeted guidance from the "
        "available documentation."
    )


def build_chat_prompt(
    message: str,
    rag_response: RAGResponse,
    history: Sequence[ChatMessage],
    section: Section | None = None,
) -> str:
    section_line = (
        f"The user is currently working on the {SECTION_NAMES[section]} section.\n\n" if section else ""
    )
    excerpts = "\n\n".join(
        f"From {source.title} ({source.section.value}): {source.excerpt}" for source in rag_response.sources
    )
    conversation = "\n".join(f"{entry.sender}: {entry.content}" for entry in history)

    return (
        "You are a helpful assistant for the ToursByLocals onboarding process.\n\n"
        "CRITICAL INSTRUCTIONS:\n"
        "- Use ONLY the documentation below to answer.\n"
        "- Do NOT use information from your training data that is not in the documentation.\n"
        "- If the documentation does not contain enough information, say so explicitly.\n"
        "- Give clear, actionable guidance in a conversational tone.\n"
        "- Use PLAIN TEXT ONLY. No markdown: no headers, bold, italics, code or links.\n"
        "- Number steps as 1., 2., 3. and use simple dashes for lists.\n\n"
        f"{section_line}"
        f"DOCUMENTATION EXCERPTS:\n{excerpts}\n\n"
        f"DOCUMENTATION SUMMARY:\n{rag_response.answer}\n\n"
        f"CONVERSATION HISTORY:\n{conversation}\n\n"
        f"USER QUESTION: {message}\n\n"
        "Answer based ONLY on the documentation above, in plain text. If it does not fully answer "
        "the question, state what information is missing and where the user might find it."
    )


def _normalize_context(context: Mapping[str, Any] | None) -> dict[str, Any]:
    if not context:
        return {}
    normalized = {key: value for key, value in context.items() if value is not None}
    if isinstance(normalized.get("section"), Section):
        normalized["section"] = normalized["section"].value
    return normalized


class ChatSessionManager:
    """In-memory chat sessions with per-session ordering and bounded retention.

    Sessions are kept in least-recently-used order. A turn holds the session
    lock from the user append to the assistant append, so concurrent requests
    for one session are answered in arrival order.
    """

    def __init__(
        self,
        *,
        corpus_loader: CorpusLoader,
        generation_client: GenerationClient,
        max_sessions: int = 1000,
        session_ttl_seconds: float = 86400.0,
        history_window: int = 6,
        request_timeout_seconds: float = 60.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._corpus_loader = corpus_loader
        self._generation_client = generation_client
        self._max_sessions = max_sessions
        self._session_ttl_seconds = session_ttl_seconds
        self._history_window = history_window
        self._request_timeout_seconds = request_timeout_seconds
        self._clock = clock
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def send_message(
        self,
        message: str,
        *,
        session_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> ChatTurn:
        self._prune_expired()
        session = self._get_or_create(session_id or generate_session_id(self._clock()))

        async with session.lock:
            session.context.update(_normalize_context(context))
            user_message = self._append(session, message, "user")

            try:
                content, sources = await with_deadline(
                    self._respond(session, message),
                    self._request_timeout_seconds,
                    operation="chat turn",
                )
            except OnboardingError as exc:
                logger.warning("Chat turn for session %s failed: %s", session.id, exc)
                content, sources = fallback_response(message), ()
            except BaseException:
                # a turn either records both messages or neither
                session.messages.remove(user_message)
                raise

            reply = self._append(session, content, "assistant", sources)
            return ChatTurn(
                session_id=session.id,
                message=reply,
                suggestions=chat_suggestions(message, session.section),
                context=dict(session.context),
            )

    def history(self, session_id: str) -> ChatSession:
        self._prune_expired()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._sessions.move_to_end(session_id)
        return session

    async def _respond(self, session: ChatSession, message: str) -> tuple[str, tuple[DocumentSource, ...]]:
        try:
            rag_response = await self._corpus_loader.query_with_context(message, session.section)
        except OnboardingError as exc:
            logger.warning(
                "RAG query failed for session %s, answering without grounding: %s", session.id, exc
            )
            return fallback_response(message), ()

        if not rag_response.sources or rag_response.confidence <= GROUNDING_CONFIDENCE_THRESHOLD:
            return fallback_response(message), ()

        sources = tuple(rag_response.sources)
        prompt = build_chat_prompt(
            message,
            rag_response,
            session.recent_messages(self._history_window),
            session.section,
        )
        try:
            result = await self._generation_client.generate(prompt)
        except ProviderError as exc:
            logger.warning(
                "Chat generation failed kind=%s error=%s; using documentation answer",
                exc.kind.value,
                exc.message,
            )
            return rag_response.answer, sources
        return to_plain_text(result.text), sources

    def _get_or_create(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            now = self._clock()
            session = ChatSession(id=session_id, created_at=now, updated_at=now)
            self._sessions[session_id] = session
            self._evict_overflow(keep=session_id)
        else:
            self._sessions.move_to_end(session_id)
        return session

    def _append(
        self,
        session: ChatSession,
        content: str,
        sender: Sender,
        sources: Sequence[DocumentSource] = (),
    ) -> ChatMessage:
        now = self._clock()
        message = ChatMessage(
            id=generate_message_id(now),
            content=content,
            sender=sender,
            timestamp=now,
            sources=tuple(sources),
        )
        session.messages.append(message)
        session.updated_at = now
        if session.id in self._sessions:
            self._sessions.move_to_end(session.id)
        return message

    def _evict_overflow(self, *, keep: str) -> None:
        overflow = len(self._sessions) - self._max_sessions
        if overflow <= 0:
            return
        # sessions with a turn in flight stay until their turn completes
        idle_ids = [
            session_id
            for session_id, session in self._sessions.items()
            if session_id != keep and not session.lock.locked()
        ]
        for evicted_id in idle_ids[:overflow]:
            del self._sessions[evicted_id]
            logger.debug("Evicted chat session %s (limit %d)", evicted_id, self._max_sessions)

    def _prune_expired(self) -> None:
        now = self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if not session.lock.locked()
            and (now - session.updated_at).total_seconds() > self._session_ttl_seconds
        ]
        for session_id in expired:
            del self._sessions[session_id]
            logger.debug("Pruned idle chat session %s", session_id)
