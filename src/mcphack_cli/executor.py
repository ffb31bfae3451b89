"""Invocation pipeline: spawn -> discover -> resolve -> build arguments -> call -> shutdown.

Every public coroutine owns exactly one session for its whole duration and
measures the wall-clock time of the full span, shutdown included.
All session access goes through a *session factory* so the pipeline can be
driven by an in-memory fake in tests.
"""

from __future__ import annotations

import asyncio
import logging
import string

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import click

from mcphack_cli.bridge import SessionFactory, open_session
from mcphack_cli.coercion import build_arguments_from_schema
from mcphack_cli.exceptions import InvocationError, ToolNotFoundError
from mcphack_cli.mcp_utils import DebugLogger
from mcphack_cli.models import InvocationResult, ToolDescriptor
from mcphack_cli.params import prompt_for_missing_required
from mcphack_cli.target import TargetSpec

logger = logging.getLogger(__name__)


@dataclass
class ToolList:
    """Tools discovered from one target plus the elapsed spawn -> shutdown time."""

    tools: list[ToolDescriptor] = field(default_factory=list)
    elapsed_ms: int = 0

    def count(self) -> int:
        return len(self.tools)

    def __iter__(self):
        return iter(self.tools)


_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def ascii_lower(text: str) -> str:
    """Lowercase A-Z only; every other character is left unchanged."""
    return text.translate(_ASCII_LOWER)


def find_tool_case_insensitive(tools: Iterable[ToolDescriptor], name: str) -> ToolDescriptor | None:
    """Return the first tool whose name equals ``name`` ignoring ASCII case."""
    wanted = ascii_lower(name)
    for tool in tools:
        if ascii_lower(tool.name) == wanted:
            return tool
    return None


async def fetch_tools(
    spec: TargetSpec,
    *,
    session_factory: SessionFactory = open_session,
    debug: DebugLogger | None = None,
) -> ToolList:
    """Spawn the target, list its tools and shut it down again."""
    debug = debug or DebugLogger()
    with debug.time_operation(f"list-tools {spec}") as timer:
        try:
            async with session_factory(spec) as session:
                tools = await session.list_tools()
        except Exception as e:
            raise InvocationError(e, timer.elapsed_ms) from e
    logger.info("discovered %d tool(s) from %s in %d ms", len(tools), spec, timer.elapsed_ms)
    return ToolList(tools=tools, elapsed_ms=timer.elapsed_ms)


async def invoke_tool(
    spec: TargetSpec,
    tool_name: str,
    provided: dict[str, str],
    *,
    interactive: bool = False,
    prompt: Callable[[str], str] | None = None,
    session_factory: SessionFactory = open_session,
    debug: DebugLogger | None = None,
) -> InvocationResult:
    """Run one full tool invocation against a freshly spawned target.

    Arguments are omitted from the request when the built object is empty.
    Any failure is re-raised as :class:`InvocationError` carrying the elapsed
    time; shutdown errors never reach the caller.
    """
    debug = debug or DebugLogger()
    provided = dict(provided)
    with debug.time_operation(f"exec {tool_name}") as timer:
        try:
            async with session_factory(spec) as session:
                tools = await session.list_tools()
                tool = find_tool_case_insensitive(tools, tool_name)
                if tool is None:
                    raise ToolNotFoundError(tool_name)

                # Prompts block the loop with the child still running; the schema
                # they ask from comes from this session's tool list.
                if interactive:
                    prompt_kwargs = {"prompt": prompt} if prompt is not None else {}
                    prompt_for_missing_required(tool.input_schema, provided, **prompt_kwargs)

                arguments = build_arguments_from_schema(tool.input_schema, provided)
                debug.debug(f"calling {tool.name} with {arguments}")
                result = await session.call_tool(tool.name, arguments or None)
        except click.Abort:
            raise
        except Exception as e:
            raise InvocationError(e, timer.elapsed_ms) from e

    return InvocationResult(tool=tool.name, arguments=arguments, result=result, elapsed_ms=timer.elapsed_ms)


def run_async(coro: Any) -> Any:
    """Run an async coroutine on a fresh event loop."""
    return asyncio.run(coro)
