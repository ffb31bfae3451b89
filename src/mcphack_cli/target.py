"""Target parsing (local command vs remote URL).

``parse_target`` turns the free-form ``--target`` / ``MCP_TARGET`` value into a
:class:`TargetSpec`:

- ``https://example.org/mcp``                          -> RemoteUrl (remote-http)
- ``wss://mcp.example/ws``                             -> RemoteUrl (remote-ws)
- ``npx -y @modelcontextprotocol/server-everything``   -> LocalCommand
- ``ftp://example.com/resource``                       -> LocalCommand (unknown scheme)

Parsing is pure string work: nothing is spawned or contacted here.
"""

from __future__ import annotations

import shlex

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from pydantic import AnyUrl

from mcphack_cli.exceptions import TargetParseError

TARGET_ENV_VAR = "MCP_TARGET"

HTTP_SCHEMES = frozenset({"http", "https"})
WS_SCHEMES = frozenset({"ws", "wss"})
REMOTE_SCHEMES = HTTP_SCHEMES | WS_SCHEMES


class TargetKind(str, Enum):
    """Classification of the high-level target kind."""

    LOCAL_PROCESS = "local-process"
    REMOTE_HTTP = "remote-http"
    REMOTE_WS = "remote-ws"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class LocalCommand:
    """A local MCP server process to spawn."""

    original: str
    program: str
    args: tuple[str, ...] = field(default_factory=tuple)

    def kind(self) -> TargetKind:
        return TargetKind.LOCAL_PROCESS

    def is_local(self) -> bool:
        return self.kind() is TargetKind.LOCAL_PROCESS

    def is_remote(self) -> bool:
        return self.kind() in (TargetKind.REMOTE_HTTP, TargetKind.REMOTE_WS)

    def __str__(self) -> str:
        if not self.args:
            return f"local: {self.program}"
        return f"local: {self.program} {' '.join(self.args)}"


@dataclass(frozen=True)
class RemoteUrl:
    """A remote MCP endpoint (http/https or ws/wss)."""

    original: str
    url: AnyUrl

    @property
    def scheme(self) -> str:
        return self.url.scheme.lower()

    def kind(self) -> TargetKind:
        if self.scheme in HTTP_SCHEMES:
            return TargetKind.REMOTE_HTTP
        if self.scheme in WS_SCHEMES:
            return TargetKind.REMOTE_WS
        return TargetKind.UNKNOWN

    def is_local(self) -> bool:
        return self.kind() is TargetKind.LOCAL_PROCESS

    def is_remote(self) -> bool:
        return self.kind() in (TargetKind.REMOTE_HTTP, TargetKind.REMOTE_WS)

    def __str__(self) -> str:
        return f"remote: {self.url}"


TargetSpec = Union[LocalCommand, RemoteUrl]


def _parse_remote(trimmed: str) -> AnyUrl | None:
    try:
        url = AnyUrl(trimmed)
    except ValueError:
        return None
    if url.scheme.lower() not in REMOTE_SCHEMES:
        return None
    return url


def parse_target(raw: str) -> TargetSpec:
    """Parse a target string into a :data:`TargetSpec`.

    1. Reject empty / whitespace-only input.
    2. If it parses as a URL with an http/https/ws/wss scheme, it is remote.
    3. Otherwise split it with shell quoting rules into program + args.

    Raises:
        TargetParseError: the string is empty, cannot be split, or yields no program.
    """
    trimmed = raw.strip()
    if not trimmed:
        raise TargetParseError("target string is empty")

    url = _parse_remote(trimmed)
    if url is not None:
        return RemoteUrl(original=raw, url=url)

    try:
        parts = shlex.split(trimmed)
    except ValueError as e:
        raise TargetParseError(f"failed to parse local command line (shell splitting): {e}") from e
    if not parts:
        raise TargetParseError("no tokens produced when parsing local command target")
    program = parts[0]
    if not program:
        raise TargetParseError("empty program name in local command target")
    return LocalCommand(original=raw, program=program, args=tuple(parts[1:]))


def resolve_target_value(*candidates: str | None) -> str | None:
    """Return the first non-blank candidate, stripped.

    Callers pass sources in priority order (explicit option first, then the
    ``MCP_TARGET`` value). Blank values from any source count as absent.
    """
    for value in candidates:
        if value is not None and value.strip():
            return value.strip()
    return None
