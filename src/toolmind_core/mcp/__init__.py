"""toolmind MCP layer - tool server connections and the tool catalog."""

from .catalog import ConnectionFactory, ServerConnection, ToolCatalog
from .connection import EMPTY_RESULT_TEXT, MCPConnection, extract_text
from .dependencies import DependencyChecker, sort_by_priority
from .types import (
    NAMESPACE_SEPARATOR,
    MCPCallResult,
    ParameterSpec,
    ServerStatus,
    ToolSpec,
    namespaced,
)

__all__ = [
    # Catalog
    "ToolCatalog",
    "ServerConnection",
    "ConnectionFactory",
    # Connection
    "MCPConnection",
    "extract_text",
    "EMPTY_RESULT_TEXT",
    # Dependency checks
    "DependencyChecker",
    "sort_by_priority",
    # Types
    "ToolSpec",
    "ParameterSpec",
    "ServerStatus",
    "MCPCallResult",
    "NAMESPACE_SEPARATOR",
    "namespaced",
]
