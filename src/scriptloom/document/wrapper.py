"""Editable site script document.

A :class:`ScriptDocument` is an immutable value: every edit returns an
:class:`~scriptloom.document.results.EditResult` carrying a new document, and holders of the
previous document never observe the change. Nodes are addressed by identity; an identity → path
index is rebuilt for each document so no node needs a reference to its parent.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping

from scriptloom.errors import IdentityCorruptionError, InvalidScriptError
from scriptloom.logging import get_logger
from scriptloom.models.action import ActionNode
from scriptloom.schema.gate import SchemaGate
from scriptloom.document.results import EditResult
from scriptloom.utils.ids import IdentityKeyGenerator, child_prefix, default_keys

logger = get_logger(__name__)

NodePath = tuple[int, ...]


def _build_index(actions: Iterable[ActionNode]) -> dict[str, NodePath]:
    index: dict[str, NodePath] = {}

    def visit(nodes: Iterable[ActionNode], base: NodePath) -> None:
        for i, node in enumerate(nodes):
            path = base + (i,)
            if not node.identity:
                raise IdentityCorruptionError(f"node at {path} has no identity")
            if node.identity in index:
                raise IdentityCorruptionError(
                    f"identity {node.identity!r} appears at {index[node.identity]} and {path}"
                )
            index[node.identity] = path
            visit(node.children or (), path)

    visit(actions, ())
    return index


def _update_at(
    nodes: tuple[ActionNode, ...],
    path: NodePath,
    fn: Callable[[ActionNode], ActionNode],
) -> tuple[ActionNode, ...]:
    i = path[0]
    node = nodes[i]
    if len(path) == 1:
        updated = fn(node)
    else:
        updated = node.with_children(_update_at(node.children or (), path[1:], fn))
    return nodes[:i] + (updated,) + nodes[i + 1 :]


def _move(nodes: tuple[ActionNode, ...], from_index: int, to_index: int) -> tuple[ActionNode, ...]:
    items = list(nodes)
    items.insert(to_index, items.pop(from_index))
    return tuple(items)


def _in_range(index: int, size: int) -> bool:
    return 0 <= index < size


def parse_action(obj: Any, where: str = "actions[0]") -> ActionNode:
    """Turn one canonical action object into an unadopted :class:`ActionNode`.

    Raises:
        InvalidScriptError: If the object is not structurally an action.
    """

    if not isinstance(obj, dict):
        raise InvalidScriptError(f"{where}: action must be an object")
    verb = obj.get("verb")
    if not isinstance(verb, str) or not verb:
        raise InvalidScriptError(f"{where}: action must have a non-empty string verb")

    children: list[ActionNode] | None = None
    if "subactions" in obj:
        raw_children = obj["subactions"]
        if not isinstance(raw_children, list):
            raise InvalidScriptError(f"{where}.subactions: must be a list")
        children = [parse_action(c, f"{where}.subactions[{j}]") for j, c in enumerate(raw_children)]

    properties = {k: v for k, v in obj.items() if k not in ("verb", "subactions")}
    return ActionNode.new(verb, properties, children)


@dataclass(frozen=True)
class ScriptDocument:
    """Root list of actions plus the set of nodes open for editing."""

    actions: tuple[ActionNode, ...] = ()
    open_identities: frozenset[str] = frozenset()
    envelope: Mapping[str, Any] = field(default_factory=dict)
    gate: SchemaGate | None = field(default=None, compare=False, repr=False)
    keys: IdentityKeyGenerator = field(default=default_keys, compare=False, repr=False)
    retired: frozenset[str] = field(default=frozenset(), compare=False, repr=False)
    _index: dict[str, NodePath] = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", tuple(self.actions))
        object.__setattr__(self, "open_identities", frozenset(self.open_identities))
        object.__setattr__(self, "envelope", dict(self.envelope))
        index = _build_index(self.actions)
        dangling = self.open_identities.difference(index)
        if dangling:
            raise IdentityCorruptionError(f"open identities without a node: {sorted(dangling)}")
        object.__setattr__(self, "retired", frozenset(self.retired))
        revived = self.retired.intersection(index)
        if revived:
            raise IdentityCorruptionError(f"retired identities are live again: {sorted(revived)}")
        object.__setattr__(self, "_index", index)

    # ------------------------------------------------------------------ construction

    @classmethod
    def from_canonical(
        cls,
        actions: Iterable[Any],
        *,
        envelope: Mapping[str, Any] | None = None,
        gate: SchemaGate | None = None,
        keys: IdentityKeyGenerator | None = None,
        open_identities: Iterable[str] = (),
    ) -> ScriptDocument:
        """Build a document from canonical action objects.

        Every node gets a fresh identity, depth-first in position order. ``open_identities`` is
        only kept for identities that exist in the new tree, which for fresh identities means
        none unless the caller passes identities it knows were just issued.
        """

        keys = keys or default_keys
        nodes = [parse_action(obj, f"actions[{i}]") for i, obj in enumerate(actions)]
        live: set[str] = set()
        adopted = tuple(_adopt(n, keys, keys.prefix, live) for n in nodes)
        kept = frozenset(i for i in open_identities if i in live)
        return cls(adopted, kept, envelope or {}, gate, keys)

    def _evolve(self, actions: tuple[ActionNode, ...], open_identities: Iterable[str] | None = None) -> ScriptDocument:
        index = _build_index(actions)
        current = self.open_identities if open_identities is None else open_identities
        kept = frozenset(i for i in current if i in index)
        retired = self.retired.union(set(self._index).difference(index))
        return dataclasses.replace(self, actions=actions, open_identities=kept, retired=retired)

    # ------------------------------------------------------------------ lookups

    def __len__(self) -> int:
        return len(self.actions)

    def __contains__(self, identity: object) -> bool:
        return identity in self._index

    def identities(self) -> list[str]:
        """All node identities, depth-first."""

        return [n.identity for a in self.actions for n in a.iter_nodes() if n.identity]

    def iter_nodes(self) -> Iterator[ActionNode]:
        for action in self.actions:
            yield from action.iter_nodes()

    def path_of(self, identity: str) -> NodePath | None:
        return self._index.get(identity)

    def find(self, identity: str) -> ActionNode | None:
        path = self._index.get(identity)
        return self._at(path) if path is not None else None

    def parent_of(self, identity: str) -> ActionNode | None:
        """Parent node, or ``None`` for root actions and unknown identities."""

        path = self._index.get(identity)
        if path is None or len(path) == 1:
            return None
        return self._at(path[:-1])

    def is_open(self, identity: str) -> bool:
        return identity in self.open_identities

    def _at(self, path: NodePath) -> ActionNode:
        node = self.actions[path[0]]
        for i in path[1:]:
            node = (node.children or ())[i]
        return node

    def _taken(self) -> set[str]:
        """Identities a new node may not adopt: live ones plus every one removed so far."""

        return set(self._index).union(self.retired)

    def _subtree_identities(self, identity: str) -> set[str]:
        node = self.find(identity)
        if node is None:
            return set()
        return {n.identity for n in node.iter_nodes() if n.identity}

    # ------------------------------------------------------------------ signals

    def _fail(self, error: str, message: str, identity: str | None = None) -> EditResult:
        logger.debug("Edit rejected (%s): %s", error, message)
        return EditResult(self, error, message, identity)  # type: ignore[arg-type]

    def _not_found(self, identity: str) -> EditResult:
        return self._fail("not_found", f"no action with identity {identity!r}", identity)

    def _out_of_bounds(self, from_index: int, to_index: int, size: int) -> EditResult:
        return self._fail(
            "index_out_of_bounds",
            f"cannot move {from_index} -> {to_index} in a list of {size}",
        )

    # ------------------------------------------------------------------ root edits

    def add_action(self, node: ActionNode) -> EditResult:
        """Append ``node`` to the root actions."""

        live = self._taken()
        adopted = _adopt(node, self.keys, self.keys.prefix, live)
        return EditResult(self._evolve(self.actions + (adopted,)), identity=adopted.identity)

    def remove_action(self, identity: str) -> EditResult:
        """Remove a root action and forget the editing state of its subtree."""

        path = self._index.get(identity)
        if path is None:
            return self._not_found(identity)
        if len(path) != 1:
            return self._fail("not_found", f"{identity!r} is not a root action", identity)
        i = path[0]
        return EditResult(self._evolve(self.actions[:i] + self.actions[i + 1 :]), identity=identity)

    def replace_action(self, identity: str, node: ActionNode) -> EditResult:
        """Replace the node at ``identity`` (any depth) keeping its position.

        A replacement without an identity, or with the same one, is a property-level edit and
        keeps ``identity``. A different identity structurally replaces the node: ``identity``
        stops resolving from then on.
        """

        path = self._index.get(identity)
        if path is None:
            return self._not_found(identity)

        live = self._taken() - self._subtree_identities(identity)
        if node.identity is None:
            node = node.with_identity(identity)
        prefix = self.keys.prefix if len(path) == 1 else child_prefix(self._at(path[:-1]).identity or "")
        adopted = _adopt(node, self.keys, prefix, live)
        return EditResult(self._evolve(_update_at(self.actions, path, lambda _: adopted)), identity=adopted.identity)

    def update_properties(self, identity: str, changes: Mapping[str, Any]) -> EditResult:
        """Merge ``changes`` into a node's properties, keeping identity and subactions."""

        node = self.find(identity)
        if node is None:
            return self._not_found(identity)
        try:
            updated = node.with_properties({**node.properties, **changes})
        except ValueError as e:
            return self._fail("structural_violation", str(e), identity)
        return self.replace_action(identity, updated)

    def reorder_actions(self, from_index: int, to_index: int) -> EditResult:
        """Move the root action at ``from_index`` to ``to_index``."""

        size = len(self.actions)
        if not (_in_range(from_index, size) and _in_range(to_index, size)):
            return self._out_of_bounds(from_index, to_index, size)
        if from_index == to_index:
            return EditResult(self, identity=self.actions[from_index].identity)
        moved = self.actions[from_index].identity
        return EditResult(self._evolve(_move(self.actions, from_index, to_index)), identity=moved)

    # ------------------------------------------------------------------ nested edits

    def add_sub_action(self, parent_identity: str, node: ActionNode) -> EditResult:
        """Append ``node`` to the subactions of ``parent_identity`` (any depth)."""

        parent_path = self._index.get(parent_identity)
        if parent_path is None:
            return self._not_found(parent_identity)
        parent = self._at(parent_path)

        violation = self._child_violation(parent, node.verb)
        if violation:
            return self._fail("structural_violation", violation, parent_identity)

        live = self._taken()
        adopted = _adopt(node, self.keys, child_prefix(parent_identity), live)

        def append(p: ActionNode) -> ActionNode:
            return p.with_children((p.children or ()) + (adopted,))

        return EditResult(self._evolve(_update_at(self.actions, parent_path, append)), identity=adopted.identity)

    def remove_sub_action(self, parent_identity: str, child_identity: str) -> EditResult:
        """Remove a direct child of ``parent_identity``."""

        parent_path = self._index.get(parent_identity)
        if parent_path is None:
            return self._not_found(parent_identity)
        child_path = self._index.get(child_identity)
        if child_path is None or child_path[:-1] != parent_path:
            return self._fail(
                "not_found",
                f"{child_identity!r} is not a subaction of {parent_identity!r}",
                child_identity,
            )
        k = child_path[-1]

        def drop(p: ActionNode) -> ActionNode:
            children = p.children or ()
            return p.with_children(children[:k] + children[k + 1 :])

        return EditResult(self._evolve(_update_at(self.actions, parent_path, drop)), identity=child_identity)

    def reorder_sub_actions(self, parent_identity: str, from_index: int, to_index: int) -> EditResult:
        """Move one subaction of ``parent_identity`` from ``from_index`` to ``to_index``."""

        parent_path = self._index.get(parent_identity)
        if parent_path is None:
            return self._not_found(parent_identity)
        children = self._at(parent_path).children or ()
        size = len(children)
        if not (_in_range(from_index, size) and _in_range(to_index, size)):
            return self._out_of_bounds(from_index, to_index, size)
        if from_index == to_index:
            return EditResult(self, identity=children[from_index].identity)

        def reorder(p: ActionNode) -> ActionNode:
            return p.with_children(_move(p.children or (), from_index, to_index))

        moved = children[from_index].identity
        return EditResult(self._evolve(_update_at(self.actions, parent_path, reorder)), identity=moved)

    def _child_violation(self, parent: ActionNode, child_verb: str) -> str | None:
        schema = None
        if self.gate is not None:
            grandparent = self.parent_of(parent.identity or "")
            schema = self.gate.schema_for(parent.verb, grandparent.verb if grandparent else None)
        if schema is None:
            if parent.children is None:
                return f"{parent.verb!r} does not support subactions"
            return None
        allowed = schema.child_verbs_allowed
        if not allowed:
            return f"{parent.verb!r} does not support subactions"
        if child_verb not in allowed:
            return f"{child_verb!r} is not allowed under {parent.verb!r}"
        return None

    # ------------------------------------------------------------------ editing state

    def toggle_editing(self, identity: str) -> EditResult:
        """Open ``identity`` if closed, close it if open. Other nodes are unaffected."""

        if identity not in self._index:
            return self._not_found(identity)
        return EditResult(self._evolve(self.actions, self.open_identities ^ {identity}), identity=identity)

    def close_all(self) -> EditResult:
        return EditResult(self._evolve(self.actions, ()))

    # ------------------------------------------------------------------ canonical form

    def to_canonical_form(self) -> list[dict[str, Any]]:
        """Ordered list of canonical action objects, free of identities and editing state."""

        return [action.to_canonical() for action in self.actions]

    def canonically_equal(self, other: ScriptDocument) -> bool:
        """Whether both documents serialize to the same canonical content."""

        return self.to_canonical_form() == other.to_canonical_form() and dict(self.envelope) == dict(other.envelope)


def _adopt(node: ActionNode, keys: IdentityKeyGenerator, prefix: str, live: set[str]) -> ActionNode:
    """Give ``node`` and its descendants identities that are not already live.

    Existing identities are kept when unused; ``live`` is updated in place.
    """

    identity = node.identity
    # caller-chosen identities may sit ahead of the counter
    while not identity or identity in live:
        identity = keys.next(prefix)
    live.add(identity)
    children = None
    if node.children is not None:
        children = tuple(_adopt(c, keys, child_prefix(identity), live) for c in node.children)
    return node.model_copy(update={"identity": identity, "children": children})
