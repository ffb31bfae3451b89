from __future__ import annotations

import json

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mcphack_cli.exceptions import SchemaError


class PropertySchema(BaseModel):
    """Declared type of a single tool parameter."""

    model_config = ConfigDict(extra="allow")

    type: str | None = Field(None, description="JSON type name (integer, number, boolean, array, ...).")
    description: str | None = Field(None, description="Human readable parameter description.")

    @field_validator("type", "description", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> str | None:
        # Union types such as ["string", "null"] carry no single coercion hint.
        return value if isinstance(value, str) else None


class InputSchema(BaseModel):
    """A tool's declared parameter shape."""

    model_config = ConfigDict(extra="allow")

    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_must_be_object(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("properties must be an object")
        return {name: prop if isinstance(prop, dict) else {} for name, prop in value.items()}

    @field_validator("required", mode="before")
    @classmethod
    def _required_must_be_names(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError("required must be a list of parameter names")
        return value

    def type_of(self, name: str) -> str | None:
        prop = self.properties.get(name)
        return prop.type if prop is not None else None


class ParameterInfo(BaseModel):
    """Flattened view of one parameter for `get` output."""

    name: str
    type: str
    required: bool
    description: str


class ToolDescriptor(BaseModel):
    """One tool as reported by ``tools/list``.

    Accepts both ``input_schema`` and ``inputSchema`` for the schema key.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    description: str | None = None
    input_schema: InputSchema | None = Field(None, alias="inputSchema")

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> ToolDescriptor:
        """Validate a loosely typed tool object, failing fast on bad structure."""
        if not isinstance(raw, dict):
            raise SchemaError("tool descriptor is not an object")
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            label = raw.get("name") if isinstance(raw.get("name"), str) else "<unnamed>"
            details = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise SchemaError(f"tool `{label}` has a malformed descriptor: {details}") from e

    def parameters(self) -> list[ParameterInfo]:
        """Return (name, type, required, description) for every declared property."""
        if self.input_schema is None:
            return []
        required = set(self.input_schema.required)
        return [
            ParameterInfo(
                name=name,
                type=prop.type or "any",
                required=name in required,
                description=prop.description or "",
            )
            for name, prop in self.input_schema.properties.items()
        ]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass
class InvocationResult:
    """A successful tool call: the arguments sent and the server's payload."""

    tool: str
    arguments: dict[str, Any]
    result: Any
    elapsed_ms: int

    def raw(self) -> Any:
        try:
            return _dump_result(self.result, exclude_none=False)
        except (TypeError, ValueError):
            return {"error": "serialize"}

    def summary(self) -> Any:
        return summarize_call_result(self.result)


def _dump_result(result: Any, exclude_none: bool) -> Any:
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
    # Round-trip plain payloads so non-JSON values fail here, not at render time.
    return json.loads(json.dumps(result))


def summarize_call_result(result: Any) -> Any:
    """Best-effort JSON view of a call result; a stub note when it cannot be serialized."""
    try:
        return _dump_result(result, exclude_none=True)
    except (TypeError, ValueError):
        return {"note": "unable to serialize result"}
