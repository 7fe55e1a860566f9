"""Engine logger - colored or JSON component logging."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from toolmind_core.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from toolmind_core.types import LogFormat, LogLevel

# Conversation entry kind -> max characters kept in the log
CONVERSATION_TRUNCATION = {
    "USER": 200,
    "ANALYSIS": 300,
    "TOOL_CALL": 200,
    "TOOL_RESULT": 400,
    "ASSISTANT": 500,
    "ERROR": 300,
}

_COMPONENT_COLORS = {
    "engine": MAGENTA,
    "inference": CYAN,
    "catalog": GREEN,
    "executor": GREEN,
    "policy": LIGHT_BLUE,
    "mcp": ORANGE,
    "config": MAGENTA,
}


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_params: bool = True
    show_results: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stderr)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = {name: True for name in _COMPONENT_COLORS}


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut with '...'."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class EngineLogger:
    """Main logger facade. Creates scoped loggers for tools and conversations."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def tool(self, tool_name: str) -> "ToolLogger":
        """Get a logger scoped to one tool execution.

        Args:
            tool_name: Namespaced tool identity

        Returns:
            ToolLogger instance
        """
        return ToolLogger(self, tool_name)

    def conversation(self, strategy: str) -> "ConversationLogger":
        """Get a logger for the conversation trace of a reasoning strategy.

        Args:
            strategy: Strategy name used as log context

        Returns:
            ConversationLogger instance
        """
        return ConversationLogger(self, strategy)

    def configure(self, config: LogConfig) -> None:
        """Update configuration.

        Args:
            config: New logger configuration
        """
        self.config = config

    def _should_log(self, level: LogLevel) -> bool:
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method.

        Args:
            level: Log level
            component: Component name; dotted names ("mcp.weather") are
                enabled or disabled by their first segment
            message: Log message
            context: Additional context data
        """
        if not self._should_log(level):
            return

        root = component.split(".", 1)[0]
        if not self.config.components.get(root, True):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, root, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.output)

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        root: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = _COMPONENT_COLORS.get(root, RESET)

        # Format: [COMPONENT] message
        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_params:
            context_str = truncate(str(context), self.config.truncate_at)
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)


class ToolLogger:
    """Logger for the attempts of one tool execution."""

    def __init__(self, parent: EngineLogger, tool_name: str):
        self.parent = parent
        self.tool_name = tool_name

    def calling(self, attempt: int, max_attempts: int, params: dict[str, Any] | None = None) -> None:
        """Log an execution attempt.

        Args:
            attempt: Current attempt number (1-based)
            max_attempts: Retry budget
            params: Optional tool arguments
        """
        context: dict[str, Any] = {
            "event": "tool_calling",
            "tool_name": self.tool_name,
            "attempt": attempt,
            "max_attempts": max_attempts,
        }
        if params and self.parent.config.show_params:
            context["params"] = params

        message = f"Calling tool '{self.tool_name}' (attempt {attempt}/{max_attempts})"
        self.parent._log(LogLevel.INFO, "executor", message, context)

    def result(self, result: str, duration_ms: int) -> None:
        """Log a successful execution.

        Args:
            result: Tool output text
            duration_ms: Execution duration in milliseconds
        """
        context: dict[str, Any] = {
            "event": "tool_result",
            "tool_name": self.tool_name,
            "duration_ms": duration_ms,
        }
        if self.parent.config.show_results:
            context["result"] = truncate(str(result), self.parent.config.truncate_at)

        duration_s = duration_ms / 1000
        message = f"Tool '{self.tool_name}' completed ({duration_s:.2f}s) ✓"
        self.parent._log(LogLevel.INFO, "executor", message, context)

    def retrying(self, attempt: int, max_attempts: int, delay_seconds: float, error: str) -> None:
        """Log a failed attempt that will be retried."""
        context = {
            "event": "tool_retrying",
            "tool_name": self.tool_name,
            "attempt": attempt,
            "max_attempts": max_attempts,
            "delay_seconds": delay_seconds,
            "error": error,
        }
        message = (
            f"Tool '{self.tool_name}' failed, retrying "
            f"(attempt {attempt}/{max_attempts}, delay: {delay_seconds}s): {error}"
        )
        self.parent._log(LogLevel.WARN, "executor", message, context)

    def error(self, error: str, attempts: int) -> None:
        """Log an execution that exhausted its retry budget."""
        context = {
            "event": "tool_error",
            "tool_name": self.tool_name,
            "attempts": attempts,
            "error": error,
        }
        message = f"Tool '{self.tool_name}' failed after {attempts} attempts: {error}"
        self.parent._log(LogLevel.ERROR, "executor", message, context)


class ConversationLogger:
    """Logger for the conversation trace of a reasoning strategy.

    Entries are truncated per kind (see CONVERSATION_TRUNCATION).
    """

    def __init__(self, parent: EngineLogger, strategy: str):
        self.parent = parent
        self.strategy = strategy

    def entry(self, kind: str, content: str) -> str:
        """Log one conversation entry.

        Args:
            kind: USER, ANALYSIS, TOOL_CALL, TOOL_RESULT, ASSISTANT or ERROR
            content: Entry text

        Returns:
            The truncated text that was logged
        """
        limit = CONVERSATION_TRUNCATION.get(kind, self.parent.config.truncate_at)
        text = truncate(content or "", limit)
        level = LogLevel.WARN if kind == "ERROR" else LogLevel.DEBUG
        self.parent._log(
            level,
            "inference",
            f"{kind}: {text}",
            {"event": "conversation", "strategy": self.strategy, "kind": kind},
        )
        return text
