"""Language model value types."""

from dataclasses import dataclass, field
from typing import Any

from toolmind_core.mcp.types import ToolSpec


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by a language model."""

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict, hash=False)
    id: str | None = None


@dataclass(frozen=True)
class LlmResponse:
    """Result of one language model round trip.

    Use the success/with_tools/error constructors rather than building
    instances directly.
    """

    content: str | None = None
    success: bool = True
    tool_calls: tuple[ToolCall, ...] = ()
    error_message: str | None = None

    @classmethod
    def ok(cls, content: str) -> "LlmResponse":
        return cls(content=content)

    @classmethod
    def with_tools(cls, content: str | None, tool_calls: list[ToolCall]) -> "LlmResponse":
        return cls(content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def error(cls, message: str) -> "LlmResponse":
        return cls(success=False, error_message=message)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @property
    def text(self) -> str:
        """Content stripped of surrounding whitespace, empty when missing."""
        return (self.content or "").strip()


@dataclass(frozen=True)
class LlmCapabilities:
    """What a language model provider supports."""

    function_calling: bool = False
    system_messages: bool = True
    streaming: bool = False
    max_tokens: int = 4096
    formats: frozenset[str] = frozenset({"text"})


@dataclass(frozen=True)
class ToolDefinition:
    """Provider-neutral tool declaration passed to generate_with_tools."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict, hash=False)
    required: tuple[str, ...] = ()

    @classmethod
    def from_spec(cls, spec: ToolSpec) -> "ToolDefinition":
        """Declare a catalog tool under its namespaced identity."""
        return cls(
            name=spec.qualified_name,
            description=spec.description,
            parameters=dict(spec.properties),
            required=tuple(spec.required),
        )

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object", "properties": self.parameters}
        if self.required:
            schema["required"] = list(self.required)
        return {"name": self.name, "description": self.description, "parameters": schema}
