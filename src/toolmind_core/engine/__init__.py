"""Chat engine module - query entry point and wiring."""

from .builder import ChatEngineBuilder
from .engine import ChatEngine
from .types import ASSISTANT_ROLE, USER_ROLE, ConversationMemory, ConversationMessage

__all__ = [
    "ChatEngine",
    "ChatEngineBuilder",
    "ConversationMemory",
    "ConversationMessage",
    "USER_ROLE",
    "ASSISTANT_ROLE",
]
