"""Tool executor - readiness cache, bounded retries and fallback suggestions."""

import asyncio
import re
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from toolmind_core.config.models import ExecutorConfig
from toolmind_core.errors import EngineError, create_error, get_error_factory
from toolmind_core.mcp.types import ToolSpec
from toolmind_core.types import LogLevel

from .cache import AvailabilityCache
from .formatters import format_catalog_summary
from .types import ToolOperationResult

if TYPE_CHECKING:
    from toolmind_core.logging import EngineLogger
    from toolmind_core.mcp import ToolCatalog
    from toolmind_core.policy import PolicyAdvisor

_KEYWORD_SPLIT = re.compile(r"[-_]")


class ToolExecutor:
    """Runs tools through the catalog with readiness caching and retries.

    Per tool the readiness state moves unknown -> cached -> expired -> unknown.
    A failed execution after the full retry budget invalidates the cached
    entry so the next call re-checks availability.
    """

    def __init__(
        self,
        catalog: "ToolCatalog",
        config: ExecutorConfig | None = None,
        advisor: "PolicyAdvisor | None" = None,
        logger: "EngineLogger | None" = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize tool executor.

        Args:
            catalog: Tool catalog used for resolution and invocation
            config: Executor configuration (defaults to ExecutorConfig())
            advisor: Optional policy advisor for adaptive retries and
                validation-error classification
            logger: Optional logger
            clock: Monotonic clock used for cache timestamps
            sleep: Awaitable sleep used between attempts
        """
        self._catalog = catalog
        self._config = config or ExecutorConfig()
        self._advisor = advisor
        self._logger = logger
        self._sleep = sleep
        self._cache = AvailabilityCache(self._config.cache_ttl_seconds, clock)

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "executor", message, context)

    @property
    def catalog(self) -> "ToolCatalog":
        return self._catalog

    # ─────────────────────────────────────────────────────────────
    # Readiness
    # ─────────────────────────────────────────────────────────────

    def is_ready(self, name: str) -> bool:
        """Check whether a tool can be called right now.

        A live cache entry answers directly; otherwise the catalog is asked
        and the answer is cached with the current clock time.

        Args:
            name: Simple or namespaced tool name

        Returns:
            True if the tool resolves and its server is connected
        """
        resolved = self._catalog.resolve(name)
        if resolved is None:
            return False

        entry = self._cache.get(resolved)
        if entry is not None:
            return entry.available

        available = self._catalog.is_tool_available(resolved)
        self._cache.put(resolved, available)
        self._log(LogLevel.DEBUG, f"Checked availability of '{resolved}': {available}")
        return available

    def invalidate(self, name: str) -> None:
        """Forget the cached readiness of one tool."""
        resolved = self._catalog.resolve(name) or name
        self._cache.invalidate(resolved)

    def clear(self) -> None:
        """Forget all cached readiness."""
        self._cache.clear()

    # ─────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────

    async def execute(self, name: str, arguments: dict[str, Any] | None = None) -> ToolOperationResult:
        """Execute a tool with bounded retries.

        Args:
            name: Simple or namespaced tool name
            arguments: Tool arguments

        Returns:
            ToolOperationResult; failures carry an EngineError and suggestions
        """
        arguments = arguments or {}

        if not self.is_ready(name):
            error = create_error("TOOL_NOT_AVAILABLE", tool_name=name)
            self._log(LogLevel.WARN, f"Tool not available: {name}", {"tool_name": name})
            return ToolOperationResult(
                success=False,
                tool_name=name,
                error=error,
                suggestions=self.suggest_alternatives(name),
                attempts=0,
            )

        resolved = self._catalog.resolve(name) or name
        max_attempts = self._retry_budget(resolved)
        tool_log = self._logger.tool(resolved) if self._logger else None
        start = time.monotonic()
        last_error: EngineError | None = None

        for attempt in range(1, max_attempts + 1):
            if tool_log:
                tool_log.calling(attempt, max_attempts, arguments)
            attempt_start = time.monotonic()
            try:
                output = await self._catalog.call_tool(resolved, arguments)
            except Exception as e:
                last_error = get_error_factory().from_exception(e, tool_name=resolved)
                if last_error.code == "TOOL_NOT_AVAILABLE":
                    # Server dropped after the readiness check; not retried
                    self._cache.invalidate(resolved)
                    self._log(
                        LogLevel.WARN,
                        f"Tool not available: {resolved}",
                        {"tool_name": resolved, "attempt": attempt},
                    )
                    return ToolOperationResult(
                        success=False,
                        tool_name=resolved,
                        error=last_error,
                        suggestions=self.suggest_alternatives(resolved),
                        attempts=attempt,
                        duration_ms=int((time.monotonic() - start) * 1000),
                    )
                if attempt < max_attempts:
                    delay = attempt * self._config.backoff_seconds
                    if tool_log:
                        tool_log.retrying(attempt, max_attempts, delay, last_error.message)
                    await self._sleep(delay)
                continue

            if tool_log:
                tool_log.result(output, int((time.monotonic() - attempt_start) * 1000))
            return ToolOperationResult(
                success=True,
                tool_name=resolved,
                result=output,
                attempts=attempt,
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        self._cache.invalidate(resolved)
        reason = last_error.message if last_error else "unknown error"
        if tool_log:
            tool_log.error(reason, max_attempts)

        if self._advisor is not None and self._advisor.is_validation_error(reason, resolved):
            error = create_error("SCHEMA_VALIDATION_FAILED", tool_name=resolved, reason=reason)
        else:
            error = create_error(
                "TOOL_EXECUTION_FAILED",
                tool_name=resolved,
                attempts=max_attempts,
                reason=reason,
            )
        error.cause = last_error

        return ToolOperationResult(
            success=False,
            tool_name=resolved,
            error=error,
            suggestions=self.suggest_alternatives(resolved),
            attempts=max_attempts,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    def _retry_budget(self, resolved: str) -> int:
        if self._config.adaptive_retries and self._advisor is not None:
            return self._advisor.optimal_retries(resolved)
        return self._config.max_retries

    # ─────────────────────────────────────────────────────────────
    # Suggestions and summaries
    # ─────────────────────────────────────────────────────────────

    def suggest_alternatives(self, name: str) -> list[str]:
        """Suggest catalog tools related to a failing tool name.

        The keyword is the first token of the name split on '-' or '_'.

        Args:
            name: Simple or namespaced name of the failing tool

        Returns:
            Up to max_suggestions namespaced names, possibly empty
        """
        keyword = _KEYWORD_SPLIT.split(name, maxsplit=1)[0]
        if not keyword:
            return []

        excluded = {name}
        resolved = self._catalog.resolve(name)
        if resolved:
            excluded.add(resolved)
            spec = self._catalog.lookup(resolved)
            if spec:
                excluded.add(spec.name)

        suggestions: list[str] = []
        for spec in self._catalog.search(keyword):
            candidate = spec.qualified_name
            if candidate in excluded or candidate in suggestions:
                continue
            suggestions.append(candidate)
            if len(suggestions) >= self._config.max_suggestions:
                break
        return suggestions

    def ready_tools(self) -> list[ToolSpec]:
        """Catalog tools currently judged ready."""
        return [spec for spec in self._catalog.list_tools() if self.is_ready(spec.qualified_name)]

    def formatted_catalog_summary(self) -> str:
        """Describe every ready tool for inclusion in a prompt."""
        return format_catalog_summary(self.ready_tools())

    def get_stats(self) -> dict[str, Any]:
        return {
            "cached_tools": len(self._cache),
            "live_entries": self._cache.live_count(),
            "cache_ttl_seconds": self._cache.ttl_seconds,
            "max_retries": self._config.max_retries,
        }
