"""Verb schema models.

A deliberately small subset of JSON Schema: enough to describe which properties a verb takes,
their primitive type, and which verbs may be nested under it.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

PropertyType = Literal["string", "boolean", "number", "integer", "object", "array"]


class PropertySchema(BaseModel):
    """Schema of one action property."""

    type: PropertyType | None = None
    enum: list[Any] | None = None
    title: str | None = None
    description: str | None = None
    default: Any = None
    properties: dict[str, "PropertySchema"] | None = None


class VerbSchema(BaseModel):
    """Schema of one action verb."""

    verb: str
    title: str | None = None
    description: str | None = None
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    subactions: list[str] = Field(default_factory=list)

    @property
    def required_properties(self) -> list[str]:
        return [p for p in self.properties if p in self.required]

    @property
    def optional_properties(self) -> list[str]:
        return [p for p in self.properties if p not in self.required]

    @property
    def child_verbs_allowed(self) -> list[str]:
        return list(self.subactions)

    @property
    def label(self) -> str:
        return self.title or self.verb


def default_for(prop: PropertySchema) -> Any:
    """Initial value for a property when a new action is created."""

    if prop.default is not None:
        return prop.default
    if prop.enum:
        return prop.enum[0]
    if prop.type == "string":
        return ""
    if prop.type == "boolean":
        return False
    if prop.type in ("number", "integer"):
        return 0
    if prop.type == "object":
        return {}
    if prop.type == "array":
        return []
    return None
