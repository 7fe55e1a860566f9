"""Chat engine types."""

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


@dataclass(frozen=True)
class ConversationMessage:
    """One turn of the conversation."""

    role: str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class ConversationMemory:
    """Ordered in-memory log of conversation turns.

    Safe to share between concurrent sessions; readers get a copy.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: list[ConversationMessage] = []

    def add_message(self, role: str, content: str) -> ConversationMessage:
        message = ConversationMessage(role, content)
        with self._lock:
            self._messages.append(message)
        return message

    @property
    def messages(self) -> list[ConversationMessage]:
        with self._lock:
            return list(self._messages)

    def recent(self, limit: int) -> list[ConversationMessage]:
        """Last ``limit`` messages, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(self._messages[-limit:])

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
