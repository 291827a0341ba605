from __future__ import annotations

"""
Unit tests for the Tri-State Selection Tree.

Verifies downward force-set, upward stabilization, the unconditional
check-changed bubble, non-selectable leaves, toggle semantics and the
change outbox.
"""

import gc
from typing import Callable, List

import pytest

from solutiondumper.core.tree.node import SelectionTree, TreeNode
from solutiondumper.domain.models import CheckState


def _folder(name: str, *children: TreeNode) -> TreeNode:
    node = TreeNode(name)
    for child in children:
        node.add_child(child)
    return node


def _assert_tri_state_invariant(root: TreeNode) -> None:
    for node in root.walk():
        if not node.children:
            assert node.check is not CheckState.INDETERMINATE
            continue
        states = {c.check for c in node.children}
        if states == {CheckState.CHECKED}:
            assert node.check is CheckState.CHECKED
        elif states == {CheckState.UNCHECKED}:
            assert node.check is CheckState.UNCHECKED
        else:
            assert node.check is CheckState.INDETERMINATE


@pytest.fixture
def sample(make_node: Callable[..., TreeNode]) -> SelectionTree:
    """root -> [proj -> [a, b, sub -> [c, d]], sln]"""
    sub = _folder("sub", make_node("c"), make_node("d"))
    proj = _folder("proj", make_node("a"), make_node("b"), sub)
    root = _folder("root", proj, make_node("App.sln"))
    return SelectionTree(root)


def _find(tree: SelectionTree, name: str) -> TreeNode:
    return next(n for n in tree.walk() if n.name == name)


# -----------------------------------------------------------------------------
# Propagation
# -----------------------------------------------------------------------------

def test_check_folder_forces_all_descendants(sample: SelectionTree) -> None:
    proj = _find(sample, "proj")

    assert proj.set_checked(CheckState.CHECKED) is True

    assert all(n.check is CheckState.CHECKED for n in proj.walk())
    assert sample.root.check is CheckState.INDETERMINATE
    _assert_tri_state_invariant(sample.root)


def test_single_leaf_makes_ancestors_indeterminate(sample: SelectionTree) -> None:
    _find(sample, "c").set_checked(CheckState.CHECKED)

    assert _find(sample, "sub").check is CheckState.INDETERMINATE
    assert _find(sample, "proj").check is CheckState.INDETERMINATE
    assert sample.root.check is CheckState.INDETERMINATE
    _assert_tri_state_invariant(sample.root)


def test_unchecking_last_checked_sibling_clears_parent(sample: SelectionTree) -> None:
    c = _find(sample, "c")
    c.set_checked(CheckState.CHECKED)
    c.set_checked(CheckState.UNCHECKED)

    assert _find(sample, "sub").check is CheckState.UNCHECKED
    assert sample.root.check is CheckState.UNCHECKED


def test_unchecking_one_of_many_checked_siblings(sample: SelectionTree) -> None:
    sub = _find(sample, "sub")
    sub.set_checked(CheckState.CHECKED)

    _find(sample, "d").set_checked(CheckState.UNCHECKED)

    assert sub.check is CheckState.INDETERMINATE
    _assert_tri_state_invariant(sample.root)


def test_checking_every_leaf_checks_root(sample: SelectionTree) -> None:
    for leaf in [n for n in sample.walk() if not n.children]:
        leaf.set_checked(CheckState.CHECKED)

    assert sample.root.check is CheckState.CHECKED


def test_set_same_value_is_noop(sample: SelectionTree) -> None:
    a = _find(sample, "a")
    seen: List[TreeNode] = []
    sample.root.add_check_listener(seen.append)

    assert a.set_checked(CheckState.CHECKED) is True
    assert a.set_checked(CheckState.CHECKED) is False
    assert len(seen) == 1


def test_indeterminate_cannot_be_set(sample: SelectionTree) -> None:
    with pytest.raises(ValueError):
        _find(sample, "a").set_checked(CheckState.INDETERMINATE)


# -----------------------------------------------------------------------------
# Non-selectable nodes
# -----------------------------------------------------------------------------

def test_non_selectable_leaf_ignores_requests(make_node: Callable[..., TreeNode]) -> None:
    big = make_node("big.cs", selectable=False, size=2000)
    root = _folder("root", _folder("proj", make_node("a.cs"), big))

    assert big.set_checked(CheckState.CHECKED) is False
    assert big.check is CheckState.UNCHECKED


def test_check_all_skips_non_selectable_descendants(make_node: Callable[..., TreeNode]) -> None:
    big = make_node("big.cs", selectable=False, size=2000)
    proj = _folder("proj", make_node("a.cs"), big)
    root = _folder("root", proj)

    root.set_checked(CheckState.CHECKED)

    assert big.check is CheckState.UNCHECKED
    assert proj.children[0].check is CheckState.CHECKED
    assert proj.check is CheckState.INDETERMINATE
    assert root.check is CheckState.INDETERMINATE


def test_toggle_indeterminate_with_only_locked_leaves_remaining_clears(
        make_node: Callable[..., TreeNode]
) -> None:
    big = make_node("big.cs", selectable=False, size=2000)
    proj = _folder("proj", make_node("a.cs"), big)
    root = _folder("root", proj)
    root.set_checked(CheckState.CHECKED)

    assert proj.toggle() is True
    assert proj.check is CheckState.UNCHECKED
    assert proj.children[0].check is CheckState.UNCHECKED


def test_toggle_indeterminate_with_unchecked_leaves_checks(sample: SelectionTree) -> None:
    _find(sample, "a").set_checked(CheckState.CHECKED)
    proj = _find(sample, "proj")
    assert proj.check is CheckState.INDETERMINATE

    proj.toggle()

    assert proj.check is CheckState.CHECKED


# -----------------------------------------------------------------------------
# Signalling
# -----------------------------------------------------------------------------

def test_check_changed_bubbles_when_ancestors_are_stable(sample: SelectionTree) -> None:
    _find(sample, "a").set_checked(CheckState.CHECKED)
    _find(sample, "c").set_checked(CheckState.CHECKED)
    assert sample.root.check is CheckState.INDETERMINATE

    seen: List[TreeNode] = []
    sample.root.add_check_listener(seen.append)

    # proj stays indeterminate, but the root still hears about the leaf change
    _find(sample, "d").set_checked(CheckState.CHECKED)

    assert [n.name for n in seen] == ["d"]


def test_bulk_check_emits_one_signal(sample: SelectionTree) -> None:
    seen: List[TreeNode] = []
    sample.root.add_check_listener(seen.append)

    sample.root.set_checked(CheckState.CHECKED)

    assert seen == [sample.root]


def test_changes_are_queued_not_pushed(sample: SelectionTree) -> None:
    sample.drain_changes()
    _find(sample, "c").set_checked(CheckState.CHECKED)

    changes = sample.drain_changes()
    changed = {(n.name, attr) for n, attr in changes}

    assert ("c", "check") in changed
    assert ("sub", "check") in changed
    assert ("root", "check") in changed
    assert sample.drain_changes() == []


def test_untracked_tree_collects_nothing(make_node: Callable[..., TreeNode]) -> None:
    tree = SelectionTree(_folder("root", make_node("a")), track_changes=False)
    tree.root.set_checked(CheckState.CHECKED)
    assert tree.drain_changes() == []


def test_parent_link_does_not_own(make_node: Callable[..., TreeNode]) -> None:
    leaf = make_node("a")
    _folder("root", leaf)
    gc.collect()

    assert leaf.parent is None
