"""mcp-hack - inspect, invoke and fuzz the tools of MCP servers.

Programmatic use: :func:`parse_target` to describe a target, then
:func:`fetch_tools` / :func:`invoke_tool` (async) against it.
"""

__version__ = "0.1.0"

from mcphack_cli.exceptions import (
    InvocationError,
    McpHackError,
    MissingRequiredParameterError,
    ParameterError,
    SchemaError,
    SessionError,
    TargetParseError,
    ToolNotFoundError,
    UnsupportedTargetError,
)
from mcphack_cli.executor import fetch_tools, invoke_tool, run_async
from mcphack_cli.target import LocalCommand, RemoteUrl, TargetKind, parse_target

__all__ = [
    "InvocationError",
    "LocalCommand",
    "McpHackError",
    "MissingRequiredParameterError",
    "ParameterError",
    "RemoteUrl",
    "SchemaError",
    "SessionError",
    "TargetKind",
    "TargetParseError",
    "ToolNotFoundError",
    "UnsupportedTargetError",
    "__version__",
    "fetch_tools",
    "invoke_tool",
    "parse_target",
    "run_async",
]
