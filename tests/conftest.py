"""Shared fixtures for mcp-hack tests.

Fixtures:
- _restore_root_logging - undo ``logging.basicConfig(force=True)`` after each test (autouse)
- fake_server - a FakeServer offering a small, typed tool set
"""

from __future__ import annotations

import logging

import pytest

from tests.helpers import FakeServer, tool


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer(
        tools=[
            tool("echo", {"message": {"type": "string", "description": "Text to echo"}}, required=["message"], description="Echo back\nthe message"),
            tool(
                "add",
                {"a": {"type": "integer"}, "b": {"type": "integer"}},
                required=["a", "b"],
                description="Add two integers",
            ),
            tool("ping"),
        ],
    )
