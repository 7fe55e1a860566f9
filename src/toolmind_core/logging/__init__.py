"""toolmind logging - colored or JSON component logging."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    CONVERSATION_TRUNCATION,
    ConversationLogger,
    EngineLogger,
    LogConfig,
    ToolLogger,
    truncate,
)

__all__ = [
    # Logger classes
    "EngineLogger",
    "ToolLogger",
    "ConversationLogger",
    "LogConfig",
    "CONVERSATION_TRUNCATION",
    "truncate",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
