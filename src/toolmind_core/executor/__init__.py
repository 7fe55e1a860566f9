"""toolmind tool executor - readiness caching, retries and suggestions."""

from .cache import DEFAULT_TTL_SECONDS, AvailabilityCache, is_expired
from .executor import ToolExecutor
from .formatters import (
    NO_TOOLS_TEXT,
    format_catalog_summary,
    format_tool_line,
    format_tool_signature,
)
from .types import CachedAvailability, ToolOperationResult

__all__ = [
    # Executor
    "ToolExecutor",
    # Types
    "ToolOperationResult",
    "CachedAvailability",
    # Cache
    "AvailabilityCache",
    "is_expired",
    "DEFAULT_TTL_SECONDS",
    # Formatters
    "format_catalog_summary",
    "format_tool_signature",
    "format_tool_line",
    "NO_TOOLS_TEXT",
]
