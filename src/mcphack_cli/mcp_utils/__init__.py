"""Shared helpers for talking to MCP targets."""

from .debug_logger import DebugLogger

__all__ = [
    "DebugLogger",
]
