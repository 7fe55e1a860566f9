"""Chat engine - front door that routes queries to a reasoning strategy."""

from typing import TYPE_CHECKING, Any

from toolmind_core.errors import EngineError, ReflectionError, create_error
from toolmind_core.logging import truncate
from toolmind_core.types import LogLevel

from .types import ASSISTANT_ROLE, USER_ROLE, ConversationMemory

if TYPE_CHECKING:
    from toolmind_core.inference import ReasoningStrategy
    from toolmind_core.llm import LanguageModel
    from toolmind_core.logging import EngineLogger
    from toolmind_core.mcp import ToolCatalog

_QUERY_PREVIEW = 100


class ChatEngine:
    """
    Answer user queries with a language model and a reasoning strategy.

    Query flow:
    1. Record the user turn
    2. Warn if the model reports itself unhealthy
    3. Delegate to the strategy
    4. Record the assistant turn

    A failed query leaves the engine usable for the next one.
    """

    def __init__(
        self,
        llm: "LanguageModel",
        strategy: "ReasoningStrategy",
        catalog: "ToolCatalog | None" = None,
        memory: ConversationMemory | None = None,
        logger: "EngineLogger | None" = None,
    ):
        """Initialize chat engine.

        Args:
            llm: Language model used by the strategy
            strategy: Reasoning strategy that answers queries
            catalog: Optional tool catalog, for health and diagnostics
            memory: Conversation memory (a fresh one when omitted)
            logger: Optional logger
        """
        self._llm = llm
        self._strategy = strategy
        self._catalog = catalog
        self._memory = memory if memory is not None else ConversationMemory()
        self._logger = logger

        self._log(
            LogLevel.INFO,
            f"ChatEngine ready with {llm.provider_name}, strategy {strategy.strategy.value}",
        )

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "engine", message, context)

    @property
    def llm(self) -> "LanguageModel":
        return self._llm

    @property
    def strategy(self) -> "ReasoningStrategy":
        return self._strategy

    @property
    def catalog(self) -> "ToolCatalog | None":
        return self._catalog

    @property
    def memory(self) -> ConversationMemory:
        return self._memory

    async def process_query(self, query: str) -> str:
        """
        Answer one query.

        Args:
            query: User query

        Returns:
            Final answer text

        Raises:
            ReflectionError: Reflection-phase failures, unchanged
            EngineError(QUERY_FAILED): Any other failure
        """
        self._log(
            LogLevel.DEBUG,
            f"Processing query with {self._llm.provider_name}: "
            f"{truncate(query, _QUERY_PREVIEW)}",
        )
        if not self._llm.is_healthy():
            self._log(LogLevel.WARN, f"LLM {self._llm.provider_name} may not be functioning properly")

        self._memory.add_message(USER_ROLE, query)

        try:
            response = await self._strategy.process_query(query)
        except ReflectionError as e:
            self._log(LogLevel.ERROR, f"Reflection failed: {e.message}", e.to_dict())
            raise
        except Exception as e:
            reason = str(e) or type(e).__name__
            self._log(LogLevel.ERROR, f"Error processing query: {reason}")
            error = create_error("QUERY_FAILED", reason=reason)
            if isinstance(e, EngineError):
                error.cause = e
            raise error from e

        if response is not None:
            self._memory.add_message(ASSISTANT_ROLE, response)
        return response

    # ─────────────────────────────────────────────────────────────
    # Health and diagnostics
    # ─────────────────────────────────────────────────────────────

    def is_healthy(self) -> bool:
        """Model healthy and, with a catalog, at least one server connected."""
        try:
            llm_healthy = self._llm.is_healthy()
            servers_healthy = self._catalog is None or bool(self._catalog.connected_servers())
        except Exception as e:
            self._log(LogLevel.WARN, f"Health check failed: {e}")
            return False
        return llm_healthy and servers_healthy

    def llm_info(self) -> str:
        return (
            f"{self._llm.provider_name} (capabilities: {self._llm.capabilities}, "
            f"healthy: {self._llm.is_healthy()})"
        )

    def strategy_info(self) -> str:
        return self._strategy.strategy.name

    def diagnose(self) -> str:
        """Multi-line status report of the model, strategy, servers and memory."""
        lines = [
            "=== ChatEngine Diagnostics ===",
            f"LLM Provider: {self._llm.provider_name}",
            f"LLM Capabilities: {self._llm.capabilities}",
            f"LLM Healthy: {self._llm.is_healthy()}",
            f"Inference Strategy: {self.strategy_info()}",
        ]
        if self._catalog is not None:
            connected = self._catalog.connected_servers()
            lines.append(f"MCP Servers Connected: {len(connected)}")
            if connected:
                lines.append(f"Connected Servers: {', '.join(connected)}")
        else:
            lines.append("MCP Servers: Not configured")
        lines.append(f"Memory: {type(self._memory).__name__} ({len(self._memory)} messages)")
        lines.append(f"Overall Health: {'Healthy' if self.is_healthy() else 'Issues detected'}")
        return "\n".join(lines)

    async def close(self) -> None:
        """Close the strategy and disconnect every server."""
        self._strategy.close()
        if self._catalog is not None:
            await self._catalog.close()
        self._log(LogLevel.INFO, "ChatEngine closed")
