"""Tool Catalog - registry of tool servers and the tools they expose."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from toolmind_core.config.models import ServerDescriptor
from toolmind_core.errors import EngineError, create_error
from toolmind_core.logging.logger import EngineLogger
from toolmind_core.types import ConnectionStatus, LogLevel

from .connection import MCPConnection
from .dependencies import DependencyChecker, sort_by_priority
from .types import NAMESPACE_SEPARATOR, MCPCallResult, ServerStatus, ToolSpec


class ServerConnection(Protocol):
    """What the catalog needs from a live server connection."""

    descriptor: ServerDescriptor

    @property
    def name(self) -> str: ...

    @property
    def status(self) -> ConnectionStatus: ...

    async def connect(self, max_retries: int = 0) -> None: ...

    async def disconnect(self) -> None: ...

    async def refresh_tools(self) -> list[ToolSpec]: ...

    def list_tools(self) -> list[ToolSpec]: ...

    def get_status(self) -> ServerStatus: ...

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> MCPCallResult: ...


ConnectionFactory = Callable[[ServerDescriptor], ServerConnection]


class ToolCatalog:
    """Central catalog of tool servers and their tools.

    Every tool is exposed under its namespaced identity ``{server}_{tool}``.
    The identity-to-server mapping is rebuilt per server on discovery and
    swapped in under a lock, so readers always see a consistent snapshot.
    """

    def __init__(
        self,
        descriptors: Iterable[ServerDescriptor] = (),
        logger: EngineLogger | None = None,
        connection_factory: ConnectionFactory | None = None,
        connect_retries: int = 0,
    ):
        """Initialize tool catalog.

        Args:
            descriptors: Server descriptors from configuration
            logger: Optional logger
            connection_factory: Builds a connection for a descriptor
                (defaults to a FastMCP-backed MCPConnection)
            connect_retries: Retries per server at connect time
        """
        ordered = sort_by_priority(list(descriptors))
        self._descriptors: dict[str, ServerDescriptor] = {d.name: d for d in ordered}
        self._logger = logger
        self._connection_factory = connection_factory or self._create_connection
        self._connect_retries = connect_retries

        self._lock = threading.Lock()
        self._connections: dict[str, ServerConnection] = {}
        self._status: dict[str, ConnectionStatus] = {
            name: ConnectionStatus.DISCONNECTED for name in self._descriptors
        }
        self._errors: dict[str, str] = {}
        self._tools: dict[str, ToolSpec] = {}

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "catalog", message, context)

    def _create_connection(self, descriptor: ServerDescriptor) -> ServerConnection:
        return MCPConnection(descriptor, self._logger, on_tools_changed=self._handle_tools_changed)

    # ─────────────────────────────────────────────────────────────
    # Connection lifecycle
    # ─────────────────────────────────────────────────────────────

    async def connect_all(self) -> dict[str, ServerStatus]:
        """Connect to every eligible server in priority order.

        Disabled servers and servers whose required environment variable
        is missing stay DISCONNECTED. A failing server is marked ERROR and
        the remaining servers are still attempted.

        Returns:
            Dict of server name to status
        """
        if not self._descriptors:
            self._log(LogLevel.INFO, "No MCP servers configured")
            return {}

        self._log(LogLevel.INFO, f"Connecting to {len(self._descriptors)} MCP servers")

        for descriptor in list(self._descriptors.values()):
            if not descriptor.enabled:
                self._set_status(descriptor.name, ConnectionStatus.DISCONNECTED)
                self._log(LogLevel.INFO, f"Skipping disabled server '{descriptor.name}'")
                continue

            env_var = descriptor.requires.env_var
            if env_var and not DependencyChecker.env_available(env_var):
                self._set_status(descriptor.name, ConnectionStatus.DISCONNECTED)
                self._log(
                    LogLevel.WARN,
                    f"Skipping server '{descriptor.name}': environment variable {env_var} not set",
                )
                continue

            await self.connect(descriptor.name)

        status = self.get_status()
        connected = sum(1 for s in status.values() if s.status == ConnectionStatus.CONNECTED)
        self._log(LogLevel.INFO, f"Connected to {connected}/{len(status)} servers")
        return status

    async def connect(self, server_name: str) -> bool:
        """Connect one server and discover its tools.

        Args:
            server_name: Name of a configured server

        Returns:
            True when the server is connected, False when it failed (status ERROR)

        Raises:
            EngineError(SERVER_CONNECTION_FAILED) if the server is not configured
        """
        descriptor = self._descriptors.get(server_name)
        if descriptor is None:
            raise create_error(
                "SERVER_CONNECTION_FAILED",
                server_name=server_name,
                detail=f"MCP server '{server_name}' is not configured",
            )

        connection = self._connection_factory(descriptor)
        self._set_status(server_name, ConnectionStatus.CONNECTING)
        try:
            await connection.connect(max_retries=self._connect_retries)
        except Exception as e:
            with self._lock:
                self._status[server_name] = ConnectionStatus.ERROR
                self._errors[server_name] = str(e)
            self._drop_server_tools(server_name)
            self._log(
                LogLevel.ERROR,
                f"Failed to connect to '{server_name}': {e}",
                {"server_name": server_name},
            )
            return False

        with self._lock:
            self._connections[server_name] = connection
            self._status[server_name] = ConnectionStatus.CONNECTED
            self._errors.pop(server_name, None)
        self._register(server_name, connection.list_tools())
        return True

    async def disconnect(self, server_name: str) -> None:
        """Disconnect one server and forget its tools."""
        with self._lock:
            connection = self._connections.pop(server_name, None)
        self._drop_server_tools(server_name)
        self._set_status(server_name, ConnectionStatus.DISCONNECTED)
        if connection is not None:
            await connection.disconnect()

    async def close(self) -> None:
        """Disconnect all servers."""
        self._log(LogLevel.INFO, "Disconnecting from all MCP servers")
        for server_name in list(self._connections):
            try:
                await self.disconnect(server_name)
            except Exception as e:
                self._log(LogLevel.WARN, f"Error disconnecting '{server_name}': {e}")

    def _set_status(self, server_name: str, status: ConnectionStatus) -> None:
        with self._lock:
            self._status[server_name] = status

    # ─────────────────────────────────────────────────────────────
    # Discovery
    # ─────────────────────────────────────────────────────────────

    async def discover(self, connection: ServerConnection) -> list[ToolSpec]:
        """Query a connected server for its tools and register them.

        Replaces every entry previously registered for that server.

        Args:
            connection: Connected server handle

        Returns:
            The tools now registered for the server
        """
        tools = await connection.refresh_tools()
        return self._register(connection.name, tools)

    def _handle_tools_changed(self, server_name: str, tools: list[ToolSpec]) -> None:
        self._log(LogLevel.INFO, f"Tools changed on server '{server_name}': {len(tools)} tools")
        self._register(server_name, tools)

    def _register(self, server_name: str, tools: Iterable[ToolSpec]) -> list[ToolSpec]:
        with self._lock:
            rebuilt = {
                key: spec for key, spec in self._tools.items() if spec.server != server_name
            }
            registered: list[ToolSpec] = []
            for spec in tools:
                if spec.server != server_name:
                    spec = ToolSpec(spec.name, server_name, spec.description, spec.input_schema)
                key = spec.qualified_name
                owner = rebuilt.get(key)
                if owner is not None and owner.server != server_name:
                    self._log(
                        LogLevel.WARN,
                        f"Tool identity '{key}' already owned by server '{owner.server}', "
                        f"ignoring duplicate from '{server_name}'",
                    )
                    continue
                rebuilt[key] = spec
                registered.append(spec)
            self._tools = self._in_priority_order(rebuilt)

        self._log(
            LogLevel.INFO,
            f"Discovered {len(registered)} tools on '{server_name}'",
            {"server_name": server_name, "tools": [s.qualified_name for s in registered]},
        )
        return registered

    def _in_priority_order(self, tools: dict[str, ToolSpec]) -> dict[str, ToolSpec]:
        """Order entries by owning server priority, keeping discovery order per server."""
        rank = {name: index for index, name in enumerate(self._descriptors)}
        return dict(sorted(tools.items(), key=lambda item: rank.get(item[1].server, len(rank))))

    def _drop_server_tools(self, server_name: str) -> None:
        with self._lock:
            self._tools = {k: s for k, s in self._tools.items() if s.server != server_name}

    # ─────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────

    def resolve(self, name: str) -> str | None:
        """Resolve a tool name to its namespaced identity.

        A registered namespaced identity resolves to itself; otherwise the
        identity ending in ``_{name}`` from the highest-priority server wins.

        Args:
            name: Simple or namespaced tool name

        Returns:
            Namespaced identity, or None if not found
        """
        if not name:
            return None
        tools = self._tools
        if name in tools:
            return name
        suffix = NAMESPACE_SEPARATOR + name
        for key in tools:
            if key.endswith(suffix):
                return key
        return None

    def resolve_or_raise(self, name: str) -> str:
        """Resolve a tool name or raise.

        Raises:
            EngineError(TOOL_NOT_AVAILABLE) if the name does not resolve
        """
        resolved = self.resolve(name)
        if resolved is None:
            raise create_error(
                "TOOL_NOT_AVAILABLE",
                tool_name=name,
                detail=f"Tool '{name}' not found in catalog",
            )
        return resolved

    def lookup(self, name: str) -> ToolSpec | None:
        """Get the spec registered under a namespaced identity."""
        return self._tools.get(name)

    def server_of(self, name: str) -> str | None:
        """Get the owning server of a namespaced identity."""
        spec = self._tools.get(name)
        return spec.server if spec else None

    def search(self, keyword: str) -> list[ToolSpec]:
        """Find tools whose namespaced name or description contains keyword.

        Case-insensitive substring match.
        """
        needle = keyword.lower()
        return [
            spec
            for key, spec in self._tools.items()
            if needle in key.lower() or needle in spec.description.lower()
        ]

    def list_tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def list_tools_by_server(self, server_name: str) -> list[ToolSpec]:
        return [spec for spec in self._tools.values() if spec.server == server_name]

    def is_tool_available(self, name: str) -> bool:
        """True if the name resolves and its server is connected."""
        resolved = self.resolve(name)
        if resolved is None:
            return False
        server = self.server_of(resolved)
        return server is not None and self._status.get(server) == ConnectionStatus.CONNECTED

    # ─────────────────────────────────────────────────────────────
    # Servers
    # ─────────────────────────────────────────────────────────────

    def descriptor(self, server_name: str) -> ServerDescriptor | None:
        return self._descriptors.get(server_name)

    def descriptors(self) -> list[ServerDescriptor]:
        """Configured descriptors, highest priority first."""
        return list(self._descriptors.values())

    def connected_servers(self) -> list[str]:
        return [
            name
            for name, status in self._status.items()
            if status == ConnectionStatus.CONNECTED
        ]

    def server_status(self, server_name: str) -> ConnectionStatus | None:
        return self._status.get(server_name)

    def get_status(self) -> dict[str, ServerStatus]:
        """Get status of all configured servers."""
        result: dict[str, ServerStatus] = {}
        for name in self._descriptors:
            connection = self._connections.get(name)
            if connection is not None and self._status.get(name) == ConnectionStatus.CONNECTED:
                result[name] = connection.get_status()
            else:
                result[name] = ServerStatus(
                    name=name,
                    status=self._status.get(name, ConnectionStatus.DISCONNECTED),
                    error=self._errors.get(name),
                )
        return result

    # ─────────────────────────────────────────────────────────────
    # Invocation
    # ─────────────────────────────────────────────────────────────

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        """Call a tool on its owning server.

        Args:
            name: Simple or namespaced tool name
            arguments: Tool arguments

        Returns:
            Text result of the call

        Raises:
            EngineError(TOOL_NOT_AVAILABLE) if the tool or its server is unavailable
            EngineError(TOOL_FAILED) if the server reports an error result
            EngineError(TOOL_TIMEOUT) if the call exceeds the request timeout
        """
        resolved = self.resolve_or_raise(name)
        spec = self._tools[resolved]
        connection = self._connections.get(spec.server)
        if connection is None or self._status.get(spec.server) != ConnectionStatus.CONNECTED:
            raise create_error(
                "TOOL_NOT_AVAILABLE",
                tool_name=resolved,
                server_name=spec.server,
                detail=f"MCP server '{spec.server}' not connected",
            )

        try:
            result = await connection.call_tool(spec.name, arguments)
        except EngineError as e:
            raise e.with_context(tool_name=resolved, server_name=spec.server) from e

        if result.is_error:
            raise create_error(
                "TOOL_FAILED",
                tool_name=resolved,
                server_name=spec.server,
                reason=result.error or "Tool returned an error",
            )
        return result.content

