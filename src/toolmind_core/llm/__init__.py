"""toolmind language model capability."""

from .protocol import LanguageModel
from .types import LlmCapabilities, LlmResponse, ToolCall, ToolDefinition

__all__ = [
    "LanguageModel",
    "LlmResponse",
    "LlmCapabilities",
    "ToolCall",
    "ToolDefinition",
]
