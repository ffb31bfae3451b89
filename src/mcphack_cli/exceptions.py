"""Exception hierarchy shared by every mcp-hack command."""

from __future__ import annotations


class McpHackError(Exception):
    """Base class for all errors surfaced to the user."""


class TargetParseError(McpHackError):
    """Raised when a target string cannot be parsed."""


class UnsupportedTargetError(McpHackError):
    """Raised when an operation needs a session the target kind cannot provide."""


class ParameterError(McpHackError):
    """Raised for malformed KEY=VALUE pairs, parameter files or wordlists."""


class SchemaError(McpHackError):
    """Raised when a discovered tool descriptor is structurally invalid."""


class ToolNotFoundError(McpHackError):
    """Raised when the requested tool is not among the discovered tools."""

    def __init__(self, name: str):
        super().__init__(f"tool `{name}` not found")
        self.name = name


class MissingRequiredParameterError(McpHackError):
    """Raised when a required schema property has no supplied value."""

    def __init__(self, parameter: str):
        super().__init__(f"missing required parameter: `{parameter}`")
        self.parameter = parameter


class SessionError(McpHackError):
    """Raised when spawning, handshaking, listing or calling fails."""


class InvocationError(McpHackError):
    """Wraps any failure of a single invocation together with its elapsed time."""

    def __init__(self, cause: BaseException, elapsed_ms: int):
        super().__init__(str(cause))
        self.cause = cause
        self.elapsed_ms = elapsed_ms
