"""Canonical codec.

Converts between :class:`ScriptDocument` and the persisted site script content::

    {"$schema": "...", "actions": [{"verb": "...", ..., "subactions": [...]}], "version": 1}

Identities and editing state never reach the encoded form; decoding always mints fresh
identities.
"""

from __future__ import annotations

import copy
import json
from typing import Any

from scriptloom.document.wrapper import ScriptDocument
from scriptloom.errors import InvalidScriptError
from scriptloom.logging import get_logger
from scriptloom.schema.gate import SchemaGate
from scriptloom.utils.ids import IdentityKeyGenerator, default_keys

logger = get_logger(__name__)


class CanonicalCodec:
    """Encode documents to canonical content and decode them back."""

    def __init__(
        self,
        gate: SchemaGate | None = None,
        keys: IdentityKeyGenerator | None = None,
        indent: int = 4,
    ) -> None:
        self.gate = gate
        self.keys = keys or default_keys
        self.indent = indent

    def decode(self, content: str | dict[str, Any] | list[Any]) -> ScriptDocument:
        """Build a document from canonical content.

        Args:
            content: JSON text, a content object with an ``actions`` list, or a bare action list.

        Raises:
            InvalidScriptError: If the content is not structurally a site script, or (with a
                gate) uses a verb the schema does not know.
        """

        if isinstance(content, str):
            try:
                content = json.loads(content)
            except ValueError as e:
                raise InvalidScriptError(f"not valid JSON: {e}") from e

        if isinstance(content, list):
            actions, envelope = content, {}
        elif isinstance(content, dict):
            actions = content.get("actions", [])
            envelope = {k: v for k, v in content.items() if k != "actions"}
        else:
            raise InvalidScriptError("content must be an object or a list of actions")
        if not isinstance(actions, list):
            raise InvalidScriptError("'actions' must be a list")

        document = ScriptDocument.from_canonical(actions, envelope=envelope, gate=self.gate, keys=self.keys)
        if self.gate is not None:
            self._check_verbs(document)
        logger.debug("Decoded %d root actions (%d nodes)", len(document), len(document.identities()))
        return document

    def _check_verbs(self, document: ScriptDocument) -> None:
        assert self.gate is not None
        for node in document.iter_nodes():
            parent = document.parent_of(node.identity or "")
            if self.gate.schema_for(node.verb, parent.verb if parent else None) is None:
                where = ".".join(str(i) for i in document.path_of(node.identity or "") or ())
                raise InvalidScriptError(f"unknown verb {node.verb!r} at {where}")

    def encode(self, document: ScriptDocument) -> dict[str, Any]:
        """Canonical content object: ``$schema`` first, then ``actions``, then other envelope keys."""

        out: dict[str, Any] = {}
        if "$schema" in document.envelope:
            out["$schema"] = document.envelope["$schema"]
        out["actions"] = document.to_canonical_form()
        for key, value in document.envelope.items():
            if key != "$schema":
                out[key] = copy.deepcopy(value)
        return out

    def encode_actions(self, document: ScriptDocument) -> list[dict[str, Any]]:
        return document.to_canonical_form()

    def encode_text(self, document: ScriptDocument) -> str:
        """Canonical content as displayed in the text editor."""

        return json.dumps(self.encode(document), indent=self.indent or None, ensure_ascii=False)
