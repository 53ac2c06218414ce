"""Tests for ScriptDocument edit operations."""

from __future__ import annotations

import pytest

from scriptloom.codec import CanonicalCodec
from scriptloom.document.wrapper import ScriptDocument
from scriptloom.errors import IdentityCorruptionError
from scriptloom.models.action import ActionNode
from scriptloom.utils.ids import IdentityKeyGenerator, format_identity

from conftest import LIST_SCRIPT


def _two_actions() -> ScriptDocument:
    return ScriptDocument.from_canonical(
        [
            {"verb": "setTitle", "title": "Contoso"},
            {"verb": "applyTheme", "themeName": "Blue"},
        ]
    )


def _list_doc(codec: CanonicalCodec) -> ScriptDocument:
    return codec.decode(LIST_SCRIPT)


def test_reorder_actions_moves_node_and_keeps_identities() -> None:
    """It should swap two root actions without touching their identities."""

    doc = _two_actions()
    a, b = (n.identity for n in doc.actions)

    result = doc.reorder_actions(0, 1)

    assert result.ok
    assert [n.identity for n in result.document.actions] == [b, a]
    assert result.document.to_canonical_form() == [
        {"verb": "applyTheme", "themeName": "Blue"},
        {"verb": "setTitle", "title": "Contoso"},
    ]


def test_reorder_is_a_permutation(codec: CanonicalCodec) -> None:
    """It should never change the set of root identities."""

    doc = _list_doc(codec)
    before = [n.identity for n in doc.actions]

    moved = doc.reorder_actions(2, 0).document

    after = [n.identity for n in moved.actions]
    assert sorted(after) == sorted(before)
    assert after == [before[2], before[0], before[1]]


def test_reorder_same_index_is_noop() -> None:
    """It should return an equivalent document when from == to."""

    doc = _two_actions()
    result = doc.reorder_actions(1, 1)

    assert result.ok
    assert result.document == doc


@pytest.mark.parametrize("src,dst", [(-1, 0), (0, 2), (5, 0), (0, -3)])
def test_reorder_out_of_bounds(src: int, dst: int) -> None:
    """It should report index_out_of_bounds and leave the document unchanged."""

    doc = _two_actions()
    result = doc.reorder_actions(src, dst)

    assert result.error == "index_out_of_bounds"
    assert result.document is doc


def test_edits_do_not_mutate_previous_document() -> None:
    """It should leave earlier documents untouched."""

    doc = _two_actions()
    snapshot = doc.to_canonical_form()

    doc.add_action(ActionNode.new("applyTheme", {"themeName": "Red"}))
    doc.reorder_actions(0, 1)
    doc.update_properties(doc.actions[0].identity, {"title": "Fabrikam"})

    assert doc.to_canonical_form() == snapshot


def test_add_action_assigns_fresh_identity() -> None:
    """It should append the node with an identity unused in the tree."""

    doc = _two_actions()
    taken = doc.actions[0].identity
    result = doc.add_action(ActionNode(identity=taken, verb="setTitle", properties={"title": "x"}))

    assert result.ok
    new_id = result.identity
    assert new_id is not None and new_id != taken
    assert result.document.actions[-1].identity == new_id
    assert len(set(result.document.identities())) == 3


def test_remove_action_twice_reports_not_found() -> None:
    """A double-fired delete should degrade to a not_found signal."""

    doc = _two_actions()
    target = doc.actions[0].identity

    first = doc.remove_action(target)
    second = first.document.remove_action(target)

    assert first.ok
    assert second.error == "not_found"
    assert second.document is first.document


def test_remove_action_rejects_nested_identity(codec: CanonicalCodec) -> None:
    """It should only remove root actions."""

    doc = _list_doc(codec)
    nested = doc.actions[1].children[0].identity

    result = doc.remove_action(nested)

    assert result.error == "not_found"
    assert nested in result.document


def test_add_then_remove_sub_action_restores_children(codec: CanonicalCodec) -> None:
    """Adding then removing a subaction should give back the prior child list."""

    doc = _list_doc(codec)
    parent = doc.actions[1].identity
    before = doc.find(parent).children

    added = doc.add_sub_action(parent, ActionNode.new("setDescription", {"description": "d"}))
    assert added.ok
    assert added.document.parent_of(added.identity).identity == parent

    removed = added.document.remove_sub_action(parent, added.identity)
    assert removed.ok
    assert removed.document.find(parent).children == before


def test_add_sub_action_to_childless_verb_is_structural_violation(codec: CanonicalCodec) -> None:
    """It should refuse children under a verb that does not support them."""

    doc = _list_doc(codec)
    title_action = doc.actions[0].identity

    result = doc.add_sub_action(title_action, ActionNode.new("setDescription", {"description": "d"}))

    assert result.error == "structural_violation"
    assert result.document is doc
    assert doc.find(title_action).children is None


def test_add_sub_action_with_disallowed_child_verb(codec: CanonicalCodec) -> None:
    """It should refuse a child verb the parent schema does not list."""

    doc = _list_doc(codec)
    result = doc.add_sub_action(doc.actions[1].identity, ActionNode.new("applyTheme", {"themeName": "x"}))

    assert result.error == "structural_violation"


def test_add_sub_action_without_gate_uses_children_presence() -> None:
    """Without a schema gate, only nodes that already hold a subactions list accept children."""

    doc = ScriptDocument.from_canonical(
        [
            {"verb": "createSPList", "listName": "L", "subactions": []},
            {"verb": "setTitle", "title": "T"},
        ]
    )
    child = ActionNode.new("setDescription", {"description": "d"})

    assert doc.add_sub_action(doc.actions[0].identity, child).ok
    assert doc.add_sub_action(doc.actions[1].identity, child).error == "structural_violation"


def test_add_sub_action_unknown_parent() -> None:
    """It should report not_found for a missing parent."""

    doc = _two_actions()
    result = doc.add_sub_action("missing", ActionNode.new("setTitle"))

    assert result.error == "not_found"


def test_remove_sub_action_requires_direct_child(codec: CanonicalCodec) -> None:
    """It should not remove a node through the wrong parent."""

    doc = _list_doc(codec)
    child = doc.actions[1].children[0].identity

    result = doc.remove_sub_action(doc.actions[0].identity, child)

    assert result.error == "not_found"
    assert child in result.document


def test_reorder_sub_actions(codec: CanonicalCodec) -> None:
    """It should reorder one parent's children only."""

    doc = _list_doc(codec)
    parent = doc.actions[1]
    first, second = (c.identity for c in parent.children)

    result = doc.reorder_sub_actions(parent.identity, 1, 0)

    assert result.ok
    assert [c.identity for c in result.document.find(parent.identity).children] == [second, first]
    assert [n.identity for n in result.document.actions] == [n.identity for n in doc.actions]
    assert doc.reorder_sub_actions(parent.identity, 0, 2).error == "index_out_of_bounds"


def test_toggle_editing_twice_restores_open_set(codec: CanonicalCodec) -> None:
    """Toggling the same node twice should give back the original open set."""

    doc = _list_doc(codec)
    other = doc.actions[2].identity
    doc = doc.toggle_editing(other).document
    target = doc.actions[1].children[1].identity

    opened = doc.toggle_editing(target).document
    closed = opened.toggle_editing(target).document

    assert opened.open_identities == {other, target}
    assert closed.open_identities == doc.open_identities


def test_toggle_editing_is_independent_per_node(codec: CanonicalCodec) -> None:
    """Opening a parent should not open or close its children."""

    doc = _list_doc(codec)
    parent = doc.actions[1]
    child = parent.children[0].identity

    doc = doc.toggle_editing(child).document
    doc = doc.toggle_editing(parent.identity).document
    doc = doc.toggle_editing(parent.identity).document

    assert doc.is_open(child)
    assert not doc.is_open(parent.identity)


def test_toggle_editing_unknown_identity() -> None:
    """It should report not_found."""

    assert _two_actions().toggle_editing("nope").error == "not_found"


def test_remove_clears_descendant_open_identities(codec: CanonicalCodec) -> None:
    """Removing a node should drop its own and its descendants' open state."""

    doc = _list_doc(codec)
    parent = doc.actions[1]
    kept = doc.actions[0].identity
    for identity in [parent.identity, parent.children[0].identity, parent.children[1].identity, kept]:
        doc = doc.toggle_editing(identity).document

    removed = doc.remove_action(parent.identity).document

    assert removed.open_identities == {kept}


def test_remove_sub_action_clears_open_identity(codec: CanonicalCodec) -> None:
    """Removing a subaction should close it."""

    doc = _list_doc(codec)
    parent = doc.actions[1].identity
    child = doc.actions[1].children[0].identity
    doc = doc.toggle_editing(child).document

    removed = doc.remove_sub_action(parent, child).document

    assert child not in removed.open_identities


def test_open_state_survives_reorder(codec: CanonicalCodec) -> None:
    """Open nodes should stay open when they move."""

    doc = _list_doc(codec)
    target = doc.actions[2].identity
    doc = doc.toggle_editing(target).document

    moved = doc.reorder_actions(2, 0).document

    assert moved.actions[0].identity == target
    assert moved.is_open(target)


def test_replace_action_keeps_identity_for_property_edit(codec: CanonicalCodec) -> None:
    """A replacement without its own identity should keep the old one."""

    doc = _list_doc(codec)
    child = doc.actions[1].children[0]
    doc = doc.toggle_editing(child.identity).document

    result = doc.replace_action(child.identity, ActionNode.new("setDescription", {"description": "VIP"}))

    assert result.ok
    assert result.identity == child.identity
    assert result.document.find(child.identity).properties == {"description": "VIP"}
    assert result.document.path_of(child.identity) == doc.path_of(child.identity)
    assert result.document.is_open(child.identity)


def test_replace_action_with_new_identity_retires_old_one() -> None:
    """A structural replacement should stop the old identity from resolving."""

    doc = _two_actions()
    old = doc.actions[0].identity
    doc = doc.toggle_editing(old).document

    result = doc.replace_action(old, ActionNode(identity="replacement", verb="setTitle", properties={"title": "N"}))

    assert result.ok
    assert result.identity == "replacement"
    assert old not in result.document
    assert result.document.actions[0].identity == "replacement"
    assert result.document.open_identities == frozenset()
    assert result.document.remove_action(old).error == "not_found"


def test_replace_action_never_duplicates_identities() -> None:
    """A replacement reusing a sibling's identity should get a fresh one."""

    doc = _two_actions()
    first, second = (n.identity for n in doc.actions)

    result = doc.replace_action(first, ActionNode(identity=second, verb="setTitle"))

    ids = result.document.identities()
    assert len(ids) == len(set(ids)) == 2
    assert result.identity not in (first, second)


def test_minted_identity_skips_caller_chosen_one() -> None:
    """A caller-chosen identity ahead of the counter must not be minted again later."""

    keys = IdentityKeyGenerator("mint_")
    doc = ScriptDocument.from_canonical([{"verb": "setTitle", "title": "T"}], keys=keys)
    first = doc.actions[0].identity
    upcoming = format_identity(int(first[len("mint_") :]) + 1, "mint_")

    doc = doc.replace_action(first, ActionNode(identity=upcoming, verb="setTitle")).document
    result = doc.add_action(ActionNode.new("applyTheme", {"themeName": "Blue"}))

    assert result.ok
    assert result.identity != upcoming
    ids = result.document.identities()
    assert len(ids) == len(set(ids)) == 2


def test_removed_identity_is_never_reused() -> None:
    """Re-adding a removed node should give it a fresh identity."""

    doc = _two_actions()
    removed = doc.actions[1]

    doc = doc.remove_action(removed.identity).document
    result = doc.add_action(removed)

    assert result.ok
    assert result.identity != removed.identity
    assert removed.identity not in result.document
    assert removed.identity in result.document.retired
    assert result.document.toggle_editing(result.identity).document.retired == result.document.retired


def test_replaced_subtree_identities_are_retired(codec: CanonicalCodec) -> None:
    """Children dropped by a structural replacement cannot come back either."""

    doc = _list_doc(codec)
    parent = doc.actions[1]
    child = parent.children[0]

    doc = doc.replace_action(parent.identity, ActionNode.new("createSPList", {"listName": "L"}, [])).document
    result = doc.add_sub_action(parent.identity, child)

    assert result.ok
    assert child.identity in doc.retired
    assert result.identity != child.identity


def test_retired_identity_cannot_be_live() -> None:
    """A document whose live nodes include a retired identity is corrupt."""

    node = ActionNode(identity="a", verb="setTitle")
    with pytest.raises(IdentityCorruptionError):
        ScriptDocument((node,), retired=frozenset({"a"}))


def test_update_properties_preserves_identity_and_children(codec: CanonicalCodec) -> None:
    """Property edits should keep identity and subactions."""

    doc = _list_doc(codec)
    parent = doc.actions[1]

    result = doc.update_properties(parent.identity, {"listName": "Clients"})

    node = result.document.find(parent.identity)
    assert node.properties["listName"] == "Clients"
    assert node.properties["templateType"] == 100
    assert [c.identity for c in node.children] == [c.identity for c in parent.children]


def test_update_properties_rejects_reserved_keys() -> None:
    """Properties named like structural keys should be refused."""

    doc = _two_actions()
    result = doc.update_properties(doc.actions[0].identity, {"subactions": []})

    assert result.error == "structural_violation"


def test_identities_unique_after_nested_edits(codec: CanonicalCodec) -> None:
    """Identities should stay unique across adds, moves and replacements at any depth."""

    doc = _list_doc(codec)
    parent = doc.actions[1].identity
    for _ in range(3):
        doc = doc.add_sub_action(parent, ActionNode.new("setDescription", {"description": "x"})).document
    doc = doc.reorder_sub_actions(parent, 0, 4).document
    doc = doc.add_action(doc.find(parent)).document
    doc = doc.reorder_actions(3, 0).document

    ids = doc.identities()
    assert len(ids) == len(set(ids))


def test_subaction_identities_carry_parent_prefix(codec: CanonicalCodec) -> None:
    """Subaction identities should be derived from the parent for readability."""

    doc = _list_doc(codec)
    parent = doc.actions[1]

    assert all(c.identity.startswith(f"{parent.identity}/") for c in parent.children)


def test_close_all() -> None:
    """It should close every open node."""

    doc = _two_actions()
    for node in doc.actions:
        doc = doc.toggle_editing(node.identity).document

    assert doc.close_all().document.open_identities == frozenset()


def test_duplicate_identities_are_fatal() -> None:
    """Corrupted identity bookkeeping should abort loudly."""

    node = ActionNode(identity="dup", verb="setTitle")
    with pytest.raises(IdentityCorruptionError):
        ScriptDocument(actions=(node, node))


def test_dangling_open_identity_is_fatal() -> None:
    """Open identities must resolve to a node."""

    with pytest.raises(IdentityCorruptionError):
        ScriptDocument(actions=(ActionNode(identity="a", verb="setTitle"),), open_identities=frozenset({"b"}))
