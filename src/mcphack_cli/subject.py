from __future__ import annotations

from enum import Enum


class Subject(str, Enum):
    """Top-level subjects a command can target."""

    TOOLS = "tools"
    TOOL = "tool"
    # Placeholders until resources and prompts are implemented.
    RESOURCES = "resources"
    PROMPTS = "prompts"

    @classmethod
    def names(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def from_str_ci(cls, value: str) -> Subject | None:
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None

    def is_implemented(self) -> bool:
        return self in (Subject.TOOLS, Subject.TOOL)

    def is_singular_tool(self) -> bool:
        return self is Subject.TOOL

    def __str__(self) -> str:
        return self.value
