"""Configuration manager for mcp-hack.

Builds one :class:`RuntimeConfig` at process start from command-line flags and
environment variables. The value is passed explicitly to the commands and the
reporting helpers; nothing here is process-global.
"""

from __future__ import annotations

import logging
import os
import sys

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from mcphack_cli.exceptions import ParameterError
from mcphack_cli.target import TARGET_ENV_VAR, resolve_target_value

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def derive_log_level(verbose: int, quiet: bool) -> int:
    """Map ``-v`` / ``-q`` to a :mod:`logging` level (quiet wins)."""
    if quiet:
        return logging.ERROR
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


@dataclass(frozen=True)
class StyleOptions:
    """Human-output styling decisions (color, emoji, width)."""

    use_color: bool = True
    use_emoji: bool = True
    width: int = 100

    MIN_WIDTH = 40
    MAX_WIDTH = 220
    DEFAULT_WIDTH = 100

    @classmethod
    def detect(cls, environ: Mapping[str, str] | None = None) -> StyleOptions:
        env = os.environ if environ is None else environ
        try:
            width = int(env.get("COLUMNS", ""))
            width = max(cls.MIN_WIDTH, min(cls.MAX_WIDTH, width))
        except ValueError:
            width = cls.DEFAULT_WIDTH
        return cls(
            use_color="NO_COLOR" not in env,
            use_emoji="NO_EMOJI" not in env,
            width=width,
        )


@dataclass(frozen=True)
class RuntimeConfig:
    """Everything a command needs to know about the current process run."""

    log_level: int = logging.WARNING
    target: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    style: StyleOptions = field(default_factory=StyleOptions)

    @property
    def debug_enabled(self) -> bool:
        return self.log_level <= logging.DEBUG

    def effective_target(self, override: str | None = None) -> str | None:
        """Subcommand target beats the global one; blank values count as absent."""
        return resolve_target_value(override, self.target)


class ConfigManager:
    """Builds :class:`RuntimeConfig` from flags and environment."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = os.environ if environ is None else environ

    def build(
        self,
        *,
        verbose: int = 0,
        quiet: bool = False,
        target: str | None = None,
        headers: Sequence[str] = (),
    ) -> RuntimeConfig:
        env_target = self._environ.get(TARGET_ENV_VAR)
        resolved_target = resolve_target_value(target, env_target)
        return RuntimeConfig(
            log_level=derive_log_level(verbose, quiet),
            target=resolved_target,
            headers=self.parse_headers(headers),
            style=StyleOptions.detect(self._environ),
        )

    @staticmethod
    def parse_headers(headers: Sequence[str]) -> dict[str, str]:
        """Parse repeatable ``-H KEY=VALUE`` options (reserved for remote transports)."""
        parsed: dict[str, str] = {}
        for header in headers:
            key, sep, value = header.partition("=")
            if not sep or not key.strip():
                raise ParameterError(f"invalid --header (expected KEY=VALUE): {header}")
            parsed[key.strip()] = value.strip()
        return parsed

    @staticmethod
    def configure_logging(config: RuntimeConfig) -> None:
        """Install the stderr log handler once, at the configured level."""
        logging.basicConfig(level=config.log_level, stream=sys.stderr, format=LOG_FORMAT, force=True)
        if config.headers:
            logger.info("headers %s are reserved for remote transports and ignored", sorted(config.headers))
