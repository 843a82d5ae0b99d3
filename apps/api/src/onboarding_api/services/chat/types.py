from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from onboarding_api.services.rag.types import DocumentSource, Section

Sender = Literal["user", "assistant"]


def _to_iso(value: datetime) -> str:
    return value.isoformat()


@dataclass(frozen=True)
class ChatMessage:
    id: str
    content: str
    sender: Sender
    timestamp: datetime
    sources: tuple[DocumentSource, ...] = ()

    def to_payload(self, *, include_sender: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "timestamp": _to_iso(self.timestamp),
            "sources": [source.to_payload() for source in self.sources],
        }
        if include_sender:
            payload["sender"] = self.sender
        return payload


@dataclass
class ChatSession:
    id: str
    created_at: datetime
    updated_at: datetime
    messages: list[ChatMessage] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def section(self) -> Section | None:
        value = self.context.get("section")
        return Section(value) if value else None

    def recent_messages(self, window: int) -> list[ChatMessage]:
        return self.messages[-window:] if window > 0 else []

    def to_payload(self) -> dict[str, Any]:
        return {
            "sessionId": self.id,
            "messages": [message.to_payload() for message in self.messages],
            "context": dict(self.context),
            "createdAt": _to_iso(self.created_at),
            "updatedAt": _to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class ChatTurn:
    session_id: str
    message: ChatMessage
    suggestions: list[str]
    context: dict[str, Any]

    def to_payload(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "message": self.message.to_payload(include_sender=False),
            "suggestions": list(self.suggestions),
            "context": dict(self.context),
        }
