"""MCP Connection - one FastMCP client per tool server.

The catalog owns these; each connection keeps the tool list of its server
current, including refreshes pushed through tools/list_changed.
"""

import asyncio
import shlex
import time
from collections.abc import Awaitable, Callable
from contextlib import AsyncExitStack
from datetime import datetime
from typing import Any

import mcp.types
from fastmcp.client import Client
from fastmcp.client.messages import MessageHandler
from fastmcp.client.transports import (
    ClientTransport,
    SSETransport,
    StdioTransport,
    StreamableHttpTransport,
)

from toolmind_core.config.models import ServerDescriptor
from toolmind_core.errors import EngineError, create_error
from toolmind_core.logging.logger import EngineLogger
from toolmind_core.types import ConnectionStatus, LogLevel, MCPTransport

from .types import MCPCallResult, ServerStatus, ToolSpec

# Receives the server name and its refreshed tools
ToolChangeCallback = Callable[[str, list[ToolSpec]], Awaitable[None] | None]

EMPTY_RESULT_TEXT = "Tool executed successfully (no message)"


class _ListChangedHandler(MessageHandler):
    def __init__(self, on_change: Callable[[], Awaitable[None]]):
        self._on_change = on_change

    async def on_tool_list_changed(self, message: mcp.types.ToolListChangedNotification) -> None:
        await self._on_change()


class MCPConnection:
    """Connection to a single tool server.

    Status moves DISCONNECTED -> CONNECTING -> CONNECTED, or to ERROR when a
    connect attempt fails. Tools are only callable while CONNECTED.
    """

    def __init__(
        self,
        descriptor: ServerDescriptor,
        logger: EngineLogger | None = None,
        on_tools_changed: ToolChangeCallback | None = None,
    ):
        """Initialize MCP connection.

        Args:
            descriptor: Server descriptor from configuration
            logger: Optional logger
            on_tools_changed: Called after a list_changed refresh
        """
        self.descriptor = descriptor
        self._logger = logger
        self._on_tools_changed = on_tools_changed
        self._status = ConnectionStatus.DISCONNECTED
        self._tools: dict[str, ToolSpec] = {}
        self._connected_at: datetime | None = None
        self._error: str | None = None

        self._client: Client | None = None
        self._stack: AsyncExitStack | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, f"mcp.{self.name}", message, context)

    def _fail(self, detail: str) -> EngineError:
        return create_error("SERVER_CONNECTION_FAILED", server_name=self.name, detail=detail)

    def get_status(self) -> ServerStatus:
        return ServerStatus(
            name=self.name,
            status=self._status,
            tools=list(self._tools),
            error=self._error,
            last_connected=self._connected_at.isoformat() if self._connected_at else None,
        )

    def list_tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def connect(
        self,
        max_retries: int = 0,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> None:
        """Connect and list the server's tools.

        Failed attempts are retried with a doubling delay capped at max_delay.

        Args:
            max_retries: Extra attempts after the first one
            initial_delay: Delay before the first retry in seconds
            max_delay: Upper bound on the delay in seconds

        Raises:
            EngineError(SERVER_CONNECTION_FAILED) once every attempt has failed
        """
        if self._status == ConnectionStatus.CONNECTED:
            return

        delay = initial_delay
        attempts = max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self._open()
                return
            except Exception as e:
                self._error = str(e)
                if attempt == attempts:
                    self._log(LogLevel.ERROR, f"Connection failed after {attempts} attempts: {e}")
                    raise self._fail(f"Failed to connect to MCP server '{self.name}': {e}") from e
                self._log(
                    LogLevel.WARN,
                    f"Connection attempt {attempt}/{attempts} failed, retrying in {delay:.1f}s: {e}",
                )
            await asyncio.sleep(delay)
            delay = min(delay * 2, max_delay)

    async def _open(self) -> None:
        self._status = ConnectionStatus.CONNECTING
        self._log(LogLevel.INFO, f"Connecting ({self.descriptor.transport.value})")
        try:
            self._client = Client(
                transport=self.build_transport(),
                message_handler=_ListChangedHandler(self._tools_changed),
                timeout=self.descriptor.timeout,
                name=f"toolmind-{self.name}",
            )
            self._stack = AsyncExitStack()
            await self._stack.enter_async_context(self._client)
            await self.refresh_tools()
        except Exception:
            self._status = ConnectionStatus.ERROR
            await self._release()
            raise

        self._status = ConnectionStatus.CONNECTED
        self._connected_at = datetime.now()
        self._error = None
        self._log(LogLevel.INFO, f"Connected ({len(self._tools)} tools)")

    async def _release(self, timeout: float | None = None) -> None:
        stack, self._stack, self._client = self._stack, None, None
        if stack is None:
            return
        try:
            await asyncio.wait_for(stack.aclose(), timeout=timeout)
        except TimeoutError:
            self._log(LogLevel.WARN, f"Client did not close within {timeout}s")
        except Exception as e:
            self._log(LogLevel.DEBUG, f"Error closing client: {e}")

    async def disconnect(self, timeout: float = 5.0) -> None:
        """Close the client and forget the server's tools."""
        if self._status == ConnectionStatus.DISCONNECTED:
            return
        await self._release(timeout)
        self._status = ConnectionStatus.DISCONNECTED
        self._tools = {}
        self._log(LogLevel.INFO, "Disconnected")

    def build_transport(self) -> ClientTransport:
        """FastMCP transport for the descriptor.

        stdio descriptors spawn their command line; http descriptors use SSE
        when the URL ends in /sse and streamable HTTP otherwise.

        Raises:
            EngineError(SERVER_CONNECTION_FAILED) if the target is missing or malformed
        """
        if self.descriptor.transport == MCPTransport.HTTP:
            url = (self.descriptor.url or "").rstrip("/")
            if not url:
                raise self._fail(f"No URL specified for HTTP server '{self.name}'")
            if url.endswith("/sse"):
                return SSETransport(url=url)
            return StreamableHttpTransport(url=url)

        try:
            argv = shlex.split(self.descriptor.command or "")
        except ValueError as e:
            raise self._fail(f"Invalid command for stdio server '{self.name}': {e}") from e
        if not argv:
            raise self._fail(f"No command specified for stdio server '{self.name}'")
        return StdioTransport(command=argv[0], args=argv[1:], env=self.descriptor.env or None)

    # ─────────────────────────────────────────────────────────────
    # Tools
    # ─────────────────────────────────────────────────────────────

    async def refresh_tools(self) -> list[ToolSpec]:
        """Replace the known tools with the server's current list.

        Raises:
            EngineError(SERVER_CONNECTION_FAILED) without an open client
        """
        if self._client is None:
            raise self._fail(f"MCP server '{self.name}' not connected")

        listed = await self._client.list_tools()
        self._tools = {
            tool.name: ToolSpec(
                name=tool.name,
                server=self.name,
                description=tool.description or "",
                input_schema=dict(tool.inputSchema or {}),
            )
            for tool in listed
        }
        self._log(LogLevel.DEBUG, f"Listed {len(self._tools)} tools")
        return list(self._tools.values())

    async def _tools_changed(self) -> None:
        try:
            tools = await self.refresh_tools()
        except Exception as e:
            self._log(LogLevel.ERROR, f"Refresh after tools/list_changed failed: {e}")
            return
        self._log(LogLevel.INFO, f"Tool list changed ({len(tools)} tools)")

        if self._on_tools_changed is None:
            return
        try:
            outcome = self._on_tools_changed(self.name, tools)
            if asyncio.iscoroutine(outcome):
                await outcome
        except Exception as e:
            self._log(LogLevel.WARN, f"Tools-changed callback failed: {e}")

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> MCPCallResult:
        """Call a tool by its simple name, bounded by the descriptor timeout.

        Raises:
            EngineError(TOOL_NOT_AVAILABLE) if not connected or the tool is unknown
            EngineError(TOOL_TIMEOUT) if the call outlives the timeout
        """
        if self._status != ConnectionStatus.CONNECTED or self._client is None:
            detail = f"MCP server '{self.name}' not connected"
        elif tool_name not in self._tools:
            detail = f"Tool '{tool_name}' not found on server '{self.name}'"
        else:
            detail = None
        if detail:
            raise create_error(
                "TOOL_NOT_AVAILABLE", tool_name=tool_name, server_name=self.name, detail=detail
            )

        started = time.monotonic()
        try:
            result = await asyncio.wait_for(
                self._client.call_tool_mcp(tool_name, arguments),
                timeout=self.descriptor.timeout,
            )
        except TimeoutError as e:
            raise create_error(
                "TOOL_TIMEOUT",
                tool_name=tool_name,
                server_name=self.name,
                timeout_seconds=self.descriptor.timeout,
            ) from e

        text = extract_text(result)
        is_error = bool(getattr(result, "isError", False))
        return MCPCallResult(
            success=not is_error,
            content=text,
            duration_ms=int((time.monotonic() - started) * 1000),
            error=text if is_error else None,
            is_error=is_error,
        )


def extract_text(result: Any) -> str:
    """Return the first non-empty text block of a call result.

    Results without text yield EMPTY_RESULT_TEXT.
    """
    content = getattr(result, "content", None)
    if isinstance(content, list):
        for item in content:
            text = getattr(item, "text", None)
            if isinstance(text, str) and text.strip():
                return text
    return EMPTY_RESULT_TEXT
