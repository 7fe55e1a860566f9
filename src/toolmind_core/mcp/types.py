"""MCP layer types for toolmind."""

from dataclasses import dataclass, field
from typing import Any

from toolmind_core.types import ConnectionStatus

# Separator between server name and tool name in a namespaced identity
NAMESPACE_SEPARATOR = "_"


def namespaced(server: str, tool: str) -> str:
    """Build the external identity of a tool: ``{server}_{tool}``."""
    return f"{server}{NAMESPACE_SEPARATOR}{tool}"


@dataclass(frozen=True)
class ParameterSpec:
    """One parameter of a tool input schema."""

    name: str
    type: str = "any"
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class ToolSpec:
    """A tool discovered on an MCP server.

    Never mutated; rediscovery builds new instances.
    """

    name: str  # Simple name as exposed by the server
    server: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def qualified_name(self) -> str:
        return namespaced(self.server, self.name)

    @property
    def properties(self) -> dict[str, Any]:
        props = self.input_schema.get("properties") if self.input_schema else None
        return props if isinstance(props, dict) else {}

    @property
    def required(self) -> list[str]:
        required = self.input_schema.get("required") if self.input_schema else None
        return [str(name) for name in required] if isinstance(required, list) else []

    @property
    def parameters(self) -> list[ParameterSpec]:
        """Parameters in schema order."""
        required = set(self.required)
        params = []
        for name, prop in self.properties.items():
            prop = prop if isinstance(prop, dict) else {}
            params.append(
                ParameterSpec(
                    name=name,
                    type=str(prop.get("type", "any")),
                    description=str(prop.get("description", "")),
                    required=name in required,
                )
            )
        return params


@dataclass
class ServerStatus:
    """Status of an MCP server connection."""

    name: str
    status: ConnectionStatus
    tools: list[str] = field(default_factory=list)
    error: str | None = None
    last_connected: str | None = None


@dataclass
class MCPCallResult:
    """Result of an MCP tool call (low-level)."""

    success: bool
    content: str  # First non-empty text block
    duration_ms: int
    error: str | None = None
    is_error: bool = False  # MCP isError flag
