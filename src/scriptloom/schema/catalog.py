"""Schema catalog of site script verbs.

The catalog answers the questions the editor asks about verbs: which ones exist, what they are
called, which properties they take and which verbs may be nested under them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import TypeAdapter

from scriptloom.logging import get_logger
from scriptloom.models.action import ActionNode
from scriptloom.models.schema import VerbSchema, default_for
from scriptloom.utils.text import display_value

logger = get_logger(__name__)

SEE_PROPERTIES_DEFAULT_COUNT = 2
SUMMARY_VALUE_MAX_LEN = 60


class SchemaCatalog:
    """In-memory catalog of root verbs and subaction verbs."""

    def __init__(self, actions: Iterable[VerbSchema], subactions: Iterable[VerbSchema] = ()) -> None:
        self._actions: dict[str, VerbSchema] = {s.verb: s for s in actions}
        self._subactions: dict[str, VerbSchema] = {s.verb: s for s in subactions}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SchemaCatalog:
        """Build a catalog from ``{"actions": [...], "subactions": [...]}``."""

        adapter = TypeAdapter(list[VerbSchema])
        actions = adapter.validate_python(data.get("actions", []))
        subactions = adapter.validate_python(data.get("subactions", []))
        return cls(actions, subactions)

    @classmethod
    def load(cls, path: Path) -> SchemaCatalog:
        """Load a catalog from a JSON file."""

        catalog = cls.from_mapping(json.loads(path.read_text(encoding="utf-8")))
        logger.info(
            "Loaded schema catalog from %s (%d verbs, %d subaction verbs)",
            path,
            len(catalog._actions),
            len(catalog._subactions),
        )
        return catalog

    def schema_for(self, verb: str, parent_verb: str | None = None) -> VerbSchema | None:
        """Resolve a verb's schema.

        Subaction verbs are looked up first when ``parent_verb`` is given, then root verbs.
        """

        if parent_verb is not None:
            sub = self._subactions.get(verb)
            if sub is not None:
                return sub
        return self._actions.get(verb) or self._subactions.get(verb)

    def is_known(self, verb: str, parent_verb: str | None = None) -> bool:
        if parent_verb is None:
            return verb in self._actions
        return verb in self.available_subactions(parent_verb)

    def available_actions(self) -> list[VerbSchema]:
        """Root verbs, in catalog order."""

        return list(self._actions.values())

    def available_subactions(self, parent_verb: str) -> list[VerbSchema]:
        """Verbs that may be nested under ``parent_verb``."""

        parent = self._actions.get(parent_verb) or self._subactions.get(parent_verb)
        if parent is None:
            return []
        out: list[VerbSchema] = []
        for verb in parent.child_verbs_allowed:
            schema = self._subactions.get(verb) or self._actions.get(verb)
            if schema is not None:
                out.append(schema)
        return out

    def new_action(self, verb: str, parent_verb: str | None = None) -> ActionNode:
        """Create an unadopted action with every declared property at its default.

        Raises:
            KeyError: If the verb is unknown.
        """

        schema = self.schema_for(verb, parent_verb)
        if schema is None:
            raise KeyError(verb)
        properties = {name: default_for(prop) for name, prop in schema.properties.items()}
        children: list[ActionNode] | None = [] if schema.child_verbs_allowed else None
        return ActionNode.new(verb, properties, children)

    def label_for(self, verb: str, parent_verb: str | None = None) -> str:
        schema = self.schema_for(verb, parent_verb)
        return schema.label if schema is not None else verb

    def description_for(self, verb: str, parent_verb: str | None = None) -> str:
        schema = self.schema_for(verb, parent_verb)
        return (schema.description or "") if schema is not None else ""

    def summarize(
        self,
        node: ActionNode,
        *,
        parent_verb: str | None = None,
        count: int | None = SEE_PROPERTIES_DEFAULT_COUNT,
        max_len: int | None = SUMMARY_VALUE_MAX_LEN,
    ) -> list[tuple[str, str]]:
        """Return ``(title, value)`` pairs describing a node's properties.

        Properties follow schema order; properties the schema does not know are appended.
        ``count=None`` lists every property.
        """

        schema = self.schema_for(node.verb, parent_verb)
        names = list(schema.properties) if schema is not None else []
        names += [p for p in node.properties if p not in names]

        pairs: list[tuple[str, str]] = []
        for name in names:
            prop = schema.properties.get(name) if schema is not None else None
            title = (prop.title if prop is not None else None) or name
            pairs.append((title, display_value(node.properties.get(name), max_len)))
        return pairs if count is None else pairs[:count]
