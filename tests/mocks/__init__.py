"""Test mocks for toolmind-core.

Provides fake implementations for testing:
- FakeServerConnection / FakeServerPool: in-process MCP tool servers
- ScriptedLanguageModel: language model replaying canned responses
"""

from .fake_llm import RecordedPrompt, ScriptedLanguageModel, tool_call_response
from .fake_server import FakeServerConnection, FakeServerPool

__all__ = [
    "FakeServerConnection",
    "FakeServerPool",
    "ScriptedLanguageModel",
    "RecordedPrompt",
    "tool_call_response",
]
