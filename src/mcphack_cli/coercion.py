"""Schema-driven coercion of raw string parameters into typed JSON values.

Only primitive hints are understood (integer, number, boolean, array); nested
objects, enums and patterns are passed through untouched.
"""

from __future__ import annotations

import math
import re

from typing import Any

from mcphack_cli.exceptions import MissingRequiredParameterError
from mcphack_cli.models import InputSchema

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

TRUE_WORDS = frozenset({"true", "1", "yes", "y"})
FALSE_WORDS = frozenset({"false", "0", "no", "n"})

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_NUMBER_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def _parse_int64(raw: str) -> int | None:
    if not _INTEGER_RE.fullmatch(raw):
        return None
    value = int(raw)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def _parse_finite_float(raw: str) -> float | None:
    if not _NUMBER_RE.fullmatch(raw):
        return None
    value = float(raw)
    return value if math.isfinite(value) else None


def coerce_value(raw: str, type_hint: str | None) -> Any:
    """Coerce ``raw`` according to a primitive JSON type hint.

    Unparsable integers, numbers and booleans keep the original string.

    Example::

        coerce_value("42", "integer")     # 42
        coerce_value("x42", "integer")    # "x42"
        coerce_value("No", "boolean")     # False
        coerce_value("a,b, c", "array")   # ["a", "b", "c"]
    """
    if type_hint == "integer":
        parsed_int = _parse_int64(raw)
        return raw if parsed_int is None else parsed_int
    if type_hint == "number":
        parsed_float = _parse_finite_float(raw)
        return raw if parsed_float is None else parsed_float
    if type_hint == "boolean":
        lowered = raw.lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
        return raw
    if type_hint == "array":
        return [segment.strip() for segment in raw.split(",")]
    return raw


def build_arguments_from_schema(schema: InputSchema | None, provided: dict[str, str]) -> dict[str, Any]:
    """Build the typed argument object for a tool call.

    Declared properties are coerced in schema order; a required property with
    no value fails with the first missing name. Keys the schema does not
    declare are passed through as strings.

    Raises:
        MissingRequiredParameterError: a required property was not supplied.
    """
    remaining = dict(provided)
    result: dict[str, Any] = {}
    if schema is None:
        return remaining

    required = set(schema.required)
    for name in schema.properties:
        if name in remaining:
            result[name] = coerce_value(remaining.pop(name), schema.type_of(name))
        elif name in required:
            raise MissingRequiredParameterError(name)

    # Required names the schema lists without declaring a property.
    for name in schema.required:
        if name not in result and name not in remaining:
            raise MissingRequiredParameterError(name)

    result.update(remaining)
    return result
