"""Wordlist-driven fuzzing of a single tool.

For every word the placeholder is substituted into the raw ``--param`` pairs
(key or value position, every occurrence) and the full invocation pipeline is
run once. Iterations are strictly sequential and independent: a failing word
is reported and the next one still runs.

Example::

    mcp-hack fuzz tool read_file --param "path=FUZZ" -w common.txt -t "my-server"
"""

from __future__ import annotations

import logging

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mcphack_cli.bridge import SessionFactory, open_session
from mcphack_cli.exceptions import InvocationError, McpHackError, ParameterError
from mcphack_cli.executor import invoke_tool, run_async
from mcphack_cli.mcp_utils import DebugLogger
from mcphack_cli.models import InvocationResult
from mcphack_cli.params import merge_file_params, parse_param_pairs, substitute_placeholder
from mcphack_cli.target import TargetSpec

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "FUZZ"


@dataclass
class FuzzRecord:
    """Outcome of one fuzzing iteration."""

    request_index: int
    total_requests: int
    word: str
    elapsed_ms: int
    result: InvocationResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_json(self, *, tool: str, target: str, raw: bool = False) -> dict[str, Any]:
        if not self.ok or self.result is None:
            return {
                "status": "error",
                "request_index": self.request_index,
                "total_requests": self.total_requests,
                "word": self.word,
                "error": self.error,
                "elapsed_ms": self.elapsed_ms,
            }
        record: dict[str, Any] = {
            "status": "ok",
            "request_index": self.request_index,
            "total_requests": self.total_requests,
            "word": self.word,
            "tool": tool,
            "target": target,
            "elapsed_ms": self.elapsed_ms,
            "arguments": self.result.arguments,
        }
        if raw:
            record["result"] = self.result.raw()
        else:
            record["result_summary"] = self.result.summary()
        return record


def read_wordlist(path: str | Path) -> list[str]:
    """Read one word per line; line terminators are dropped, blank lines kept."""
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ParameterError(f"Failed to open wordlist file: {path}: {e}") from e


def fuzz_tool(
    spec: TargetSpec,
    tool_name: str,
    words: Sequence[str],
    pairs: Sequence[str],
    *,
    file_params: dict[str, str] | None = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
    session_factory: SessionFactory = open_session,
    debug: DebugLogger | None = None,
) -> Iterator[FuzzRecord]:
    """Yield one :class:`FuzzRecord` per word, in wordlist order.

    Only ``pairs`` (the CLI ``--param`` values) see the placeholder;
    ``file_params`` are merged verbatim and never override CLI keys.
    Interactive prompting is always off.
    """
    if not placeholder:
        raise ParameterError("placeholder cannot be empty")
    total = len(words)
    for index, word in enumerate(words):
        try:
            provided = parse_param_pairs(substitute_placeholder(pairs, placeholder, word))
            if file_params:
                merge_file_params(provided, file_params)
            result = run_async(
                invoke_tool(
                    spec,
                    tool_name,
                    provided,
                    interactive=False,
                    session_factory=session_factory,
                    debug=debug,
                ),
            )
        except InvocationError as e:
            logger.info("request %d/%d word=%r failed: %s", index + 1, total, word, e)
            yield FuzzRecord(index, total, word, elapsed_ms=e.elapsed_ms, error=str(e))
            continue
        except McpHackError as e:
            yield FuzzRecord(index, total, word, elapsed_ms=0, error=str(e))
            continue
        yield FuzzRecord(index, total, word, elapsed_ms=result.elapsed_ms, result=result)
