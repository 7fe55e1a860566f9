"""Language model capability consumed by the reasoning strategies."""

from typing import Protocol, runtime_checkable

from .types import LlmCapabilities, LlmResponse, ToolDefinition


@runtime_checkable
class LanguageModel(Protocol):
    """Provider-neutral language model.

    Implementations report failures through LlmResponse.error rather than
    raising; strategies treat an unsuccessful response as a failed step.
    """

    @property
    def provider_name(self) -> str: ...

    @property
    def capabilities(self) -> LlmCapabilities: ...

    async def generate(self, prompt: str) -> LlmResponse:
        """Generate a plain text answer.

        Args:
            prompt: Complete prompt text

        Returns:
            LlmResponse with content, or an error response
        """
        ...

    async def generate_with_tools(
        self, prompt: str, tools: list[ToolDefinition]
    ) -> LlmResponse:
        """Generate an answer that may request tool calls.

        Args:
            prompt: Complete prompt text
            tools: Tools the model may call, under their namespaced names

        Returns:
            LlmResponse whose tool_calls lists the requested invocations
        """
        ...

    def is_healthy(self) -> bool: ...
