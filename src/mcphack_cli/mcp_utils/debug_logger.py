"""Debug logger utility for mcp-hack.

Provides configuration-aware debug logging and operation timing.
"""

from __future__ import annotations

import logging
import time

from typing import Any

logger = logging.getLogger(__name__)


class DebugLogger:
    """Debug logger that respects the run's configured debug setting."""

    def __init__(self, enabled: bool = False, log: logging.Logger | None = None):
        self.enabled = enabled
        self._log = log or logger

    @classmethod
    def from_config(cls, config: Any) -> DebugLogger:
        return cls(enabled=bool(getattr(config, "debug_enabled", False)))

    def debug(self, message: str) -> None:
        """Log a debug message if debug mode is enabled."""
        if self.enabled:
            self._log.debug(f"[DEBUG] {message}")

    def debug_performance(self, operation: str, duration_ms: int) -> None:
        """Log a performance-related debug message if debug mode is enabled."""
        if self.enabled:
            self._log.debug(f"[DEBUG-PERF] {operation} took {duration_ms}ms")

    def debug_tool_execution(self, tool_name: str, status: str, details: str | None = None) -> None:
        """Log a tool execution debug message if debug mode is enabled.

        Args:
            tool_name: The name of the tool being executed
            status: The status (START, SUCCESS, ERROR)
            details: Additional details (optional)
        """
        if self.enabled:
            message = f"[DEBUG-TOOL] {tool_name} - {status}"
            if details:
                message += f": {details}"
            self._log.debug(message)

    def time_operation(self, operation_name: str) -> OperationTimer:
        """Context manager to time an operation and log the duration.

        Example:
            with debug_logger.time_operation("exec echo") as timer:
                ...
            timer.elapsed_ms
        """
        return OperationTimer(self, operation_name)


class OperationTimer:
    """Wall-clock timer; ``elapsed_ms`` is valid inside and after the block."""

    def __init__(self, owner: DebugLogger, operation: str):
        self.owner = owner
        self.operation = operation
        self.start_time: float | None = None
        self.end_time: float | None = None

    def __enter__(self) -> OperationTimer:
        self.start_time = time.monotonic()
        self.owner.debug_tool_execution(self.operation, "START")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end_time = time.monotonic()
        status = "ERROR" if exc_type else "SUCCESS"
        self.owner.debug_performance(self.operation, self.elapsed_ms)
        self.owner.debug_tool_execution(self.operation, status, str(exc_val) if exc_val else None)

    @property
    def elapsed_ms(self) -> int:
        if self.start_time is None:
            return 0
        end = self.end_time if self.end_time is not None else time.monotonic()
        return int((end - self.start_time) * 1000)
