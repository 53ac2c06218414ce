"""Schema-validation gate.

The gate is the only thing the editor consults before accepting raw text. It is injected into the
document wrapper, codec and arbiter; nothing looks it up globally.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Protocol

from scriptloom.logging import get_logger
from scriptloom.models.schema import PropertySchema, VerbSchema
from scriptloom.schema.catalog import SchemaCatalog

logger = get_logger(__name__)

_STRUCTURAL_KEYS = ("verb", "subactions")


class SchemaGate(Protocol):
    """What the editor needs from a site script schema."""

    def schema_for(self, verb: str, parent_verb: str | None = None) -> VerbSchema | None:
        """Schema of a verb, or ``None`` if the verb is unknown."""

    def validate(self, raw_text: str) -> bool | Awaitable[bool]:
        """Whether raw text is a conforming site script. May be a coroutine."""


class CatalogSchemaGate:
    """Gate backed by a :class:`SchemaCatalog`, performing only narrow structural checks."""

    def __init__(self, catalog: SchemaCatalog) -> None:
        self.catalog = catalog

    def schema_for(self, verb: str, parent_verb: str | None = None) -> VerbSchema | None:
        return self.catalog.schema_for(verb, parent_verb)

    def validate(self, raw_text: str) -> bool:
        problems = self.explain(raw_text)
        if problems:
            logger.debug("Site script rejected: %s", "; ".join(problems[:5]))
        return not problems

    def explain(self, raw_text: str) -> list[str]:
        """List every conformity problem found in ``raw_text``."""

        try:
            content = json.loads(raw_text)
        except (TypeError, ValueError) as e:
            return [f"not valid JSON: {e}"]
        return self.check_content(content)

    def check_content(self, content: Any) -> list[str]:
        if not isinstance(content, dict):
            return ["content must be an object"]
        actions = content.get("actions")
        if not isinstance(actions, list):
            return ["content must have an 'actions' list"]

        problems: list[str] = []
        for i, action in enumerate(actions):
            problems.extend(self._check_action(action, f"actions[{i}]", parent_verb=None))
        return problems

    def _check_action(self, action: Any, where: str, parent_verb: str | None) -> list[str]:
        if not isinstance(action, dict):
            return [f"{where}: action must be an object"]
        verb = action.get("verb")
        if not isinstance(verb, str) or not verb:
            return [f"{where}: missing verb"]
        if not self.catalog.is_known(verb, parent_verb):
            if parent_verb is None:
                return [f"{where}: unknown verb {verb!r}"]
            return [f"{where}: verb {verb!r} is not allowed under {parent_verb!r}"]

        schema = self.catalog.schema_for(verb, parent_verb)
        assert schema is not None
        problems: list[str] = []

        for name in schema.required:
            if action.get(name) is None:
                problems.append(f"{where}.{name}: required property missing")

        for name, value in action.items():
            if name in _STRUCTURAL_KEYS:
                continue
            prop = schema.properties.get(name)
            if prop is None:
                problems.append(f"{where}.{name}: unknown property for {verb!r}")
                continue
            problem = _check_value(prop, value)
            if problem:
                problems.append(f"{where}.{name}: {problem}")

        if "subactions" in action:
            subactions = action["subactions"]
            if not schema.child_verbs_allowed:
                problems.append(f"{where}: {verb!r} does not take subactions")
            elif not isinstance(subactions, list):
                problems.append(f"{where}.subactions: must be a list")
            else:
                for j, sub in enumerate(subactions):
                    problems.extend(self._check_action(sub, f"{where}.subactions[{j}]", parent_verb=verb))
        return problems


def _check_value(prop: PropertySchema, value: Any) -> str | None:
    if value is None:
        return None
    if prop.enum is not None and value not in prop.enum:
        return f"{value!r} is not one of {prop.enum}"
    expected = prop.type
    if expected is None:
        return None
    if expected == "string" and not isinstance(value, str):
        return "expected a string"
    if expected == "boolean" and not isinstance(value, bool):
        return "expected a boolean"
    if expected == "number" and (isinstance(value, bool) or not isinstance(value, (int, float))):
        return "expected a number"
    if expected == "integer" and (isinstance(value, bool) or not isinstance(value, int)):
        return "expected an integer"
    if expected == "object" and not isinstance(value, dict):
        return "expected an object"
    if expected == "array" and not isinstance(value, list):
        return "expected an array"
    return None
