from __future__ import annotations

"""
Flattened Filter Index.

Snapshots the tree into parallel post-order arrays (nodes, lower-cased
search keys, parent positions) so that a filter term can be evaluated with
one linear scan. The scan reads only the key and parent arrays, never the
live nodes, which makes it safe to run on a worker thread.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from solutiondumper.core.tree.node import TreeNode
from solutiondumper.domain.errors import FilterCancelled
from solutiondumper.domain.models import CheckState


@dataclass(frozen=True)
class FlatIndex:
    """
    Post-order snapshot of a tree, versioned with the tree it came from.

    Attributes:
        version: Tree version the snapshot belongs to.
        nodes: Live nodes in post-order (children before parents, root last).
        keys: Lower-cased 'name path' search key per node.
        parents: Position of each node's parent, -1 for the root.
    """
    version: int
    nodes: Tuple[TreeNode, ...]
    keys: Tuple[str, ...]
    parents: Tuple[int, ...]

    @classmethod
    def build(cls, root: TreeNode, version: int) -> FlatIndex:
        order = _post_order(root)
        positions: Dict[int, int] = {id(node): i for i, node in enumerate(order)}

        parents: List[int] = []
        for node in order:
            parent = node.parent
            parents.append(positions.get(id(parent), -1) if parent is not None else -1)

        return cls(
            version=version,
            nodes=tuple(order),
            keys=tuple(search_key(node) for node in order),
            parents=tuple(parents),
        )

    def __len__(self) -> int:
        return len(self.nodes)


# ==============================================================================
# SEARCH
# ==============================================================================

def search_key(node: TreeNode) -> str:
    return f"{node.name} {node.path or ''}".lower()


def normalize_term(term: Optional[str]) -> str:
    return (term or "").strip().lower()


def scan_visibility(
        keys: Sequence[str],
        parents: Sequence[int],
        term: str,
        cancel_event: Optional[threading.Event] = None,
) -> List[bool]:
    """
    Compute per-node visibility for a normalized, non-blank term.

    A node is visible when its key contains the term or any child is
    visible. Post-order guarantees that every child is evaluated before its
    parent, so the "has visible child" flag is final when the parent is read.

    Args:
        keys: Lower-cased search keys in post-order.
        parents: Parent position per node (-1 for the root).
        term: Lower-cased filter term.
        cancel_event: Checked once per node; when set the scan aborts.

    Returns:
        List[bool]: Visibility aligned with 'keys'.

    Raises:
        FilterCancelled: If 'cancel_event' is set during the scan.
    """
    count = len(keys)
    child_visible = [False] * count
    visible = [False] * count

    for i in range(count):
        if cancel_event is not None and cancel_event.is_set():
            raise FilterCancelled()

        is_visible = child_visible[i] or term in keys[i]
        visible[i] = is_visible

        if is_visible:
            parent = parents[i]
            if parent >= 0:
                child_visible[parent] = True

    return visible


# ==============================================================================
# APPLYING RESULTS (owner thread only)
# ==============================================================================

def apply_visibility(index: FlatIndex, visible: Sequence[bool]) -> None:
    """Write scan results back onto the live nodes in index order; matches auto-expand."""
    for node, is_visible in zip(index.nodes, visible):
        node.visible = is_visible
        if is_visible:
            node.expanded = True


def show_all_and_collapse_to_checked(index: FlatIndex) -> None:
    """
    Restore the unfiltered view.

    Every node becomes visible; only the root and the ancestors of checked
    nodes stay expanded. The root is kept expanded even with nothing checked
    so the projects remain reachable.
    """
    if not index.nodes:
        return

    keep_open: Set[int] = {id(index.nodes[-1])}
    for node in index.nodes:
        if node.check is not CheckState.CHECKED:
            continue
        for ancestor in node.iter_ancestors():
            if id(ancestor) in keep_open:
                break
            keep_open.add(id(ancestor))

    for node in index.nodes:
        node.visible = True
        node.expanded = id(node) in keep_open


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _post_order(root: TreeNode) -> List[TreeNode]:
    order: List[TreeNode] = []
    stack = [(root, iter(root.children))]
    while stack:
        node, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            order.append(node)
        else:
            stack.append((child, iter(child.children)))
    return order
