"""Reasoning strategy base class."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from toolmind_core.executor import (
    NO_TOOLS_TEXT,
    ToolExecutor,
    ToolOperationResult,
    format_tool_line,
)
from toolmind_core.llm import LanguageModel, ToolCall, ToolDefinition
from toolmind_core.types import LogLevel, StrategyKind

from .parsing import format_arguments

if TYPE_CHECKING:
    from toolmind_core.logging import ConversationLogger, EngineLogger
    from toolmind_core.mcp import ToolCatalog
    from toolmind_core.policy import PolicyAdvisor


class ReasoningStrategy(ABC):
    """Turns a user query into a final answer.

    Subclasses share the language model, the catalog/executor pair, an
    optional policy advisor and a conversation log of USER, ANALYSIS,
    TOOL_CALL, TOOL_RESULT, ASSISTANT and ERROR entries.
    """

    kind: StrategyKind

    def __init__(
        self,
        llm: LanguageModel,
        catalog: "ToolCatalog",
        executor: ToolExecutor,
        advisor: "PolicyAdvisor | None" = None,
        logger: "EngineLogger | None" = None,
        options: dict[str, Any] | None = None,
    ):
        """Initialize strategy.

        Args:
            llm: Language model capability
            catalog: Tool catalog
            executor: Tool executor bound to the same catalog
            advisor: Optional policy advisor
            logger: Optional logger
            options: Strategy-specific options
        """
        self._llm = llm
        self._catalog = catalog
        self._executor = executor
        self._advisor = advisor
        self._logger = logger
        self._options = dict(options or {})
        self._conversation: ConversationLogger | None = (
            logger.conversation(self.kind.value) if logger else None
        )

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, f"inference.{self.kind.value}", message, context)

    def _record(self, kind: str, content: str | None) -> None:
        """Append an entry to the conversation log."""
        if self._conversation:
            self._conversation.entry(kind, content or f"[EMPTY_{kind}]")

    @property
    def strategy(self) -> StrategyKind:
        return self.kind

    @abstractmethod
    async def process_query(self, query: str) -> str:
        """Produce the final answer for a query."""

    @abstractmethod
    def build_system_prompt(self) -> str:
        """Describe the strategy and its tools to the model."""

    def close(self) -> None:
        """Release per-strategy state."""

    # ─────────────────────────────────────────────────────────────
    # Tools
    # ─────────────────────────────────────────────────────────────

    def tool_definitions(self) -> list[ToolDefinition]:
        """Declarations of the tools that are ready right now."""
        return [ToolDefinition.from_spec(spec) for spec in self._executor.ready_tools()]

    def tool_lines(self) -> str:
        """One line per ready tool, or a placeholder when there are none."""
        tools = self._executor.ready_tools()
        if not tools:
            return NO_TOOLS_TEXT
        return "\n".join(format_tool_line(spec) for spec in tools)

    async def run_tool(self, call: ToolCall) -> ToolOperationResult:
        """Execute a requested tool call and log it."""
        self._record("TOOL_CALL", f"{call.tool_name}({format_arguments(call.arguments)})")
        result = await self._executor.execute(call.tool_name, call.arguments)
        if result.success:
            self._record("TOOL_RESULT", result.result or "[EMPTY_RESULT]")
        else:
            self._record("ERROR", result.describe())
        return result
