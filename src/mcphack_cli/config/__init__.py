"""Runtime configuration for mcp-hack.

Provides the immutable runtime configuration and the manager that builds it.
"""

from .config_manager import ConfigManager, RuntimeConfig, StyleOptions, derive_log_level

__all__ = [
    "ConfigManager",
    "RuntimeConfig",
    "StyleOptions",
    "derive_log_level",
]
