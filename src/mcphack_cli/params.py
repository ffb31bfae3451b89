"""Parameter collection: ``--param`` pairs, parameter files and interactive prompts.

Precedence is fixed: CLI pairs are inserted first (the last duplicate wins),
file entries only fill keys the CLI did not set, and prompts only fill
required keys that are still missing.
"""

from __future__ import annotations

import json
import logging

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import click
import yaml

from mcphack_cli.exceptions import ParameterError
from mcphack_cli.models import InputSchema

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
YAML_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _PlainScalarLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates and timestamps as the text written in the file."""


_PlainScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != YAML_TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def split_param_pair(pair: str) -> tuple[str, str]:
    """Split ``KEY=VALUE`` on the first ``=``; key and value are trimmed."""
    key, sep, value = pair.partition("=")
    if not sep:
        raise ParameterError(f"invalid --param (expected KEY=VALUE): {pair}")
    key = key.strip()
    if not key:
        raise ParameterError(f"invalid --param (empty key): {pair}")
    return key, value.strip()


def parse_param_pairs(pairs: Iterable[str], provided: dict[str, str] | None = None) -> dict[str, str]:
    """Insert every ``KEY=VALUE`` pair into ``provided`` (unconditionally)."""
    result = provided if provided is not None else {}
    for pair in pairs:
        key, value = split_param_pair(pair)
        result[key] = value
    return result


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def read_param_file(path: str | Path) -> dict[str, str]:
    """Load a JSON or YAML parameter file into a flat ``name -> text`` mapping.

    YAML is chosen by a ``.yaml`` / ``.yml`` extension (any case); anything
    else is parsed as JSON. Non-string values are rendered as compact JSON.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParameterError(f"failed to read param file: {path}: {e}") from e

    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = yaml.load(text, Loader=_PlainScalarLoader)
        except yaml.YAMLError as e:
            raise ParameterError(f"failed to parse YAML param file: {path}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParameterError(f"failed to parse JSON param file: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ParameterError("param file root must be an object")
    return {str(key): _stringify(value) for key, value in data.items()}


def merge_file_params(provided: dict[str, str], file_params: dict[str, str]) -> dict[str, str]:
    """Add file entries whose keys are not already present (CLI wins)."""
    for key, value in file_params.items():
        if key in provided:
            logger.debug("param %r from file ignored; set on command line", key)
            continue
        provided[key] = value
    return provided


def collect_parameters(pairs: Iterable[str], param_file: str | Path | None = None) -> dict[str, str]:
    """Build the raw parameter map from CLI pairs and an optional file."""
    provided = parse_param_pairs(pairs)
    if param_file is not None:
        merge_file_params(provided, read_param_file(param_file))
    return provided


def substitute_placeholder(pairs: Iterable[str], placeholder: str, word: str) -> list[str]:
    """Replace every occurrence of ``placeholder`` in each raw pair before splitting."""
    return [pair.replace(placeholder, word) for pair in pairs]


def _click_prompt(message: str) -> str:
    return click.prompt(message, default="", show_default=False, prompt_suffix=" ", err=True)


def prompt_for_missing_required(
    schema: InputSchema | None,
    provided: dict[str, str],
    prompt: Callable[[str], str] = _click_prompt,
    notify: Callable[[str], None] = lambda msg: click.echo(msg, err=True),
) -> dict[str, str]:
    """Ask for every required property that has no value yet.

    Empty answers are rejected and asked again. Values are stored as raw
    strings; coercion happens later.
    """
    if schema is None:
        return provided
    required = set(schema.required)
    for name, prop in schema.properties.items():
        if name not in required or name in provided:
            continue
        ptype = prop.type or "string"
        while True:
            value = prompt(f"Enter value for required param '{name}' (type: {ptype}):").strip()
            if value:
                provided[name] = value
                break
            notify("  (value required)")
    return provided
