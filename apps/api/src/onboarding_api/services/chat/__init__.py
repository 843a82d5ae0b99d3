from onboarding_api.services.chat.session_manager import ChatSessionManager
from onboarding_api.services.chat.types import ChatMessage, ChatSession, ChatTurn

__all__ = ["ChatMessage", "ChatSession", "ChatSessionManager", "ChatTurn"]
