"""AI Agents package."""

from lavafix.agents.assistant import (
    CONNECTION_ERROR_REPLY,
    NO_ANSWER_REPLY,
    AssistantReply,
    ChatMessage,
    ServiceAssistant,
)

__all__ = [
    "CONNECTION_ERROR_REPLY",
    "NO_ANSWER_REPLY",
    "AssistantReply",
    "ChatMessage",
    "ServiceAssistant",
]
