"""Test helper utilities for mcp-hack unit tests.

Provides common functionality used across multiple test modules:
- In-memory MCP server fake (session factory, recorded calls)
- Call result construction
- Response validation
"""

from __future__ import annotations

import json

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from mcp.types import CallToolResult, TextContent

from mcphack_cli.models import ToolDescriptor
from mcphack_cli.target import TargetSpec


def text_result(text: str, *, is_error: bool = False) -> CallToolResult:
    """Build a single-text-block call result like a real server returns."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def echo_arguments(arguments: dict[str, Any] | None) -> CallToolResult:
    return text_result(json.dumps(arguments, sort_keys=True))


def tool(name: str, properties: dict[str, Any] | None = None, required: list[str] | None = None, description: str | None = None) -> dict[str, Any]:
    """Raw tool object as it appears in a ``tools/list`` response."""
    raw: dict[str, Any] = {"name": name, "inputSchema": {"type": "object", "properties": properties or {}}}
    if required is not None:
        raw["inputSchema"]["required"] = required
    if description is not None:
        raw["description"] = description
    return raw


@dataclass
class FakeServer:
    """Scripted MCP server; ``factory`` is a drop-in session factory.

    ``responses`` maps a tool name to a result, an exception to raise, or a
    callable receiving the arguments.
    """

    tools: list[dict[str, Any]] = field(default_factory=list)
    responses: dict[str, Any] = field(default_factory=dict)
    fail_on_enter: Exception | None = None
    fail_on_list: Exception | None = None
    opened: list[TargetSpec] = field(default_factory=list)
    calls: list[tuple[str, dict[str, Any] | None]] = field(default_factory=list)
    closed: int = 0

    def factory(self, spec: TargetSpec) -> FakeSession:
        self.opened.append(spec)
        return FakeSession(self)


class FakeSession:
    def __init__(self, server: FakeServer):
        self.server = server

    async def __aenter__(self) -> FakeSession:
        if self.server.fail_on_enter is not None:
            raise self.server.fail_on_enter
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.server.closed += 1

    async def list_tools(self) -> list[ToolDescriptor]:
        if self.server.fail_on_list is not None:
            raise self.server.fail_on_list
        return [ToolDescriptor.from_raw(raw) for raw in self.server.tools]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        self.server.calls.append((name, arguments))
        response = self.server.responses.get(name, echo_arguments)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(arguments)
        return response


def assert_string_invariants(
    value: str,
    *,
    expected: str | None = None,
    starts_with: str | None = None,
    must_contain: list[str] | None = None,
    allow_empty: bool = False,
) -> None:
    assert isinstance(value, str)
    if value == "" and allow_empty:
        return
    assert len(value) > 0
    assert value == value.strip()
    assert "\n" not in value
    assert "\r" not in value
    if expected is not None:
        assert value == expected
    if starts_with is not None:
        assert value.startswith(starts_with)
    if must_contain:
        for token in must_contain:
            assert token in value


def assert_url_shape(url: str, *, scheme: str, host: str, path: str) -> None:
    parsed = urlparse(url)
    assert parsed.scheme == scheme
    assert parsed.netloc == host
    assert parsed.path == path
    assert url.count("://") == 1
    assert " " not in url


def assert_mapping_invariants(mapping: dict[str, Any], *, expected_keys: list[str] | None = None) -> None:
    assert isinstance(mapping, dict)
    assert all(isinstance(k, str) for k in mapping)
    assert all(k != "" and k.strip() == k for k in mapping)
    # Must round-trip through JSON unchanged.
    assert json.loads(json.dumps(mapping)) == mapping
    if expected_keys is not None:
        for key in expected_keys:
            assert key in mapping


def assert_int_invariants(value: int, *, min_value: int | None = None, max_value: int | None = None) -> None:
    assert isinstance(value, int)
    assert not isinstance(value, bool)
    if min_value is not None:
        assert value >= min_value
    if max_value is not None:
        assert value <= max_value


def parse_json_lines(output: str) -> list[dict[str, Any]]:
    """Decode one JSON document per non-empty output line."""
    return [json.loads(line) for line in output.splitlines() if line.strip()]
