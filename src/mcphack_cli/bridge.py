"""MCP session over a spawned child process (stdio transport).

Async client that launches a local MCP server and talks JSON-RPC to it over the
child's stdin/stdout, using the official MCP Python SDK.

Usage:
    async with McpStdioSession(spec) as session:
        tools = await session.list_tools()
        result = await session.call_tool("echo", {"message": "hi"})
"""

from __future__ import annotations

import contextlib
import logging
import os

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from mcphack_cli.exceptions import SchemaError, SessionError, UnsupportedTargetError
from mcphack_cli.models import ToolDescriptor
from mcphack_cli.target import LocalCommand, RemoteUrl, TargetSpec

if TYPE_CHECKING:
    from mcp.types import CallToolResult

logger = logging.getLogger(__name__)


class ToolSession(Protocol):
    """What the invocation pipeline needs from an established session."""

    async def list_tools(self) -> list[ToolDescriptor]: ...

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> Any: ...


SessionFactory = Callable[[TargetSpec], contextlib.AbstractAsyncContextManager[ToolSession]]


class McpStdioSession:
    """MCP client session bound to exactly one spawned child process.

    The child's stderr goes to the null device so banners and log noise never
    mix with the protocol stream. Entering the context spawns the process and
    performs the ``initialize`` handshake; leaving it is best-effort and never
    raises.
    """

    def __init__(self, spec: LocalCommand):
        self.spec = spec
        self._session: ClientSession | None = None
        self._exit_stack: contextlib.AsyncExitStack | None = None

    @property
    def program(self) -> str:
        return self.spec.program

    async def __aenter__(self) -> McpStdioSession:
        await self._connect_internal()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._close_internal()

    def _server_parameters(self) -> StdioServerParameters:
        return StdioServerParameters(
            command=self.spec.program,
            args=list(self.spec.args),
            env=dict(os.environ),
        )

    async def _connect_internal(self) -> None:
        """Spawn the child process and run the MCP handshake."""
        self._exit_stack = contextlib.AsyncExitStack()
        await self._exit_stack.__aenter__()

        try:
            errlog = self._exit_stack.enter_context(open(os.devnull, "w"))  # noqa: SIM115
            read, write = await self._exit_stack.enter_async_context(
                stdio_client(self._server_parameters(), errlog=errlog),
            )
        except Exception as e:
            await self._close_internal()
            raise SessionError(f"Failed to spawn MCP process: {self.program}: {e}") from e

        try:
            session = await self._exit_stack.enter_async_context(ClientSession(read, write))
            init_result = await session.initialize()
        except Exception as e:
            await self._close_internal()
            raise SessionError(f"Failed to initialize MCP session with {self.program}: {e}") from e

        self._session = session
        server_info = getattr(init_result, "serverInfo", None)
        logger.info(
            "connected local process %s (server=%s)",
            self.spec,
            getattr(server_info, "name", "<unknown>"),
        )

    async def _close_internal(self) -> None:
        """Release the session and the child process; errors are only logged."""
        self._session = None
        if self._exit_stack is not None:
            try:
                await self._exit_stack.__aexit__(None, None, None)
            except Exception as e:
                logger.debug("ignoring shutdown error for %s: %s", self.program, e)
            self._exit_stack = None

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise SessionError("Not connected")
        return self._session

    async def list_tools(self) -> list[ToolDescriptor]:
        """List every tool offered by the server, following pagination cursors."""
        session = self._require_session()
        tools: list[ToolDescriptor] = []
        cursor: str | None = None
        try:
            while True:
                page = await session.list_tools(cursor=cursor) if cursor else await session.list_tools()
                for tool in page.tools or []:
                    tools.append(ToolDescriptor.from_raw(tool.model_dump(mode="json", exclude_none=True)))
                cursor = page.nextCursor
                if not cursor:
                    break
        except (SessionError, SchemaError):
            raise
        except Exception as e:
            raise SessionError(f"Failed to list tools from {self.program}: {e}") from e
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> CallToolResult:
        """Call a tool by name; ``arguments=None`` omits the payload entirely."""
        session = self._require_session()
        try:
            return await session.call_tool(name, arguments)
        except Exception as e:
            raise SessionError(f"tool invocation failed: {name}: {e}") from e


def open_session(spec: TargetSpec) -> McpStdioSession:
    """Default session factory: only local process targets can be opened."""
    if isinstance(spec, LocalCommand):
        return McpStdioSession(spec)
    if isinstance(spec, RemoteUrl):
        raise UnsupportedTargetError(f"remote targets are not supported yet: {spec}")
    raise UnsupportedTargetError(f"unknown target kind: {spec!r}")
