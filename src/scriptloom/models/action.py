"""Action tree node model."""

from __future__ import annotations

import copy
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

RESERVED_KEYS = frozenset({"verb", "subactions"})


def _check_reserved(value: dict[str, Any]) -> dict[str, Any]:
    clash = RESERVED_KEYS.intersection(value)
    if clash:
        raise ValueError(f"reserved keys cannot be properties: {sorted(clash)}")
    return value


class ActionNode(BaseModel):
    """One site script action, optionally holding ordered subactions.

    ``identity`` is internal editing metadata and never appears in the canonical form. A node
    whose ``children`` is ``None`` has no ``subactions`` key at all; an empty tuple means the key
    is present but empty.
    """

    model_config = ConfigDict(frozen=True)

    identity: str | None = None
    verb: str = Field(min_length=1)
    properties: dict[str, Any] = Field(default_factory=dict)
    children: tuple["ActionNode", ...] | None = None

    @field_validator("properties")
    @classmethod
    def check_properties(cls, value: dict[str, Any]) -> dict[str, Any]:
        return _check_reserved(value)

    @classmethod
    def new(
        cls,
        verb: str,
        properties: dict[str, Any] | None = None,
        children: list[ActionNode] | tuple[ActionNode, ...] | None = None,
    ) -> ActionNode:
        """Build a node that has not been adopted into a document yet."""

        return cls(
            verb=verb,
            properties=dict(properties or {}),
            children=tuple(children) if children is not None else None,
        )

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def with_identity(self, identity: str | None) -> ActionNode:
        return self.model_copy(update={"identity": identity})

    def with_children(self, children: list[ActionNode] | tuple[ActionNode, ...] | None) -> ActionNode:
        return self.model_copy(update={"children": tuple(children) if children is not None else None})

    def with_properties(self, properties: dict[str, Any]) -> ActionNode:
        # model_copy skips validation
        _check_reserved(properties)
        return self.model_copy(update={"properties": dict(properties)})

    def iter_nodes(self) -> Iterator[ActionNode]:
        """Yield this node and its descendants depth-first."""

        yield self
        for child in self.children or ():
            yield from child.iter_nodes()

    def to_canonical(self) -> dict[str, Any]:
        """Return the persisted shape: ``verb``, properties, then ``subactions`` if present."""

        out: dict[str, Any] = {"verb": self.verb}
        for key, value in self.properties.items():
            out[key] = copy.deepcopy(value)
        if self.children is not None:
            out["subactions"] = [child.to_canonical() for child in self.children]
        return out
