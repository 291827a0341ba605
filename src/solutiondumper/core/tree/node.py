from __future__ import annotations

"""
Tri-State Selection Tree.

Implements the checkbox tree shown to the user: folders, files and the
synthetic solution root. Checking a node forces every selectable descendant
to the same value, then re-derives ancestor values bottom-up until a level
stops changing. A separate "check changed" signal always bubbles to the
root so that listeners (the export aggregator) see every leaf change.

Property changes are not pushed to observers while the tree is being
mutated. They are appended to the owning SelectionTree's outbox and drained
by the presentation layer after each batch.
"""

import weakref
from collections import deque
from typing import Callable, Deque, Iterator, List, NamedTuple, Optional

from solutiondumper.domain.models import CheckState

CheckListener = Callable[["TreeNode"], None]


class NodeChange(NamedTuple):
    """A presentation-relevant attribute ('check', 'visible' or 'expanded') changed."""
    node: TreeNode
    attribute: str


# ==============================================================================
# TREE NODE
# ==============================================================================

class TreeNode:
    """
    A folder, file or solution root in the selection tree.

    A node owns its ordered children. The parent link is a weak reference
    used only for upward recomputation and signal bubbling.
    """

    def __init__(
            self,
            name: str,
            path: Optional[str] = None,
            *,
            is_file: bool = False,
            selectable: bool = True,
            size: Optional[int] = None,
            tooltip: Optional[str] = None,
    ):
        self.name = name
        self.path = path
        self.is_file = is_file
        self.selectable = selectable
        self.size = size
        self.tooltip = tooltip
        self.children: List[TreeNode] = []

        self._parent_ref: Optional[weakref.ReferenceType[TreeNode]] = None
        self._check = CheckState.UNCHECKED
        self._visible = True
        self._expanded = False
        self._check_listeners: List[CheckListener] = []
        self._outbox: Optional[Deque[NodeChange]] = None

    def __repr__(self) -> str:
        return f"TreeNode({self.name!r}, check={self._check.value})"

    # -------------------------------------------------------------------------
    # STRUCTURE
    # -------------------------------------------------------------------------

    @property
    def parent(self) -> Optional[TreeNode]:
        return self._parent_ref() if self._parent_ref is not None else None

    def add_child(self, child: TreeNode) -> TreeNode:
        child._parent_ref = weakref.ref(self)
        if self._outbox is not None:
            for node in child.walk():
                node._outbox = self._outbox
        self.children.append(child)
        return child

    def iter_ancestors(self) -> Iterator[TreeNode]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and all descendants in pre-order (tree order)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    # -------------------------------------------------------------------------
    # PRESENTATION FLAGS
    # -------------------------------------------------------------------------

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        if self._visible == value:
            return
        self._visible = value
        self._emit("visible")

    @property
    def expanded(self) -> bool:
        return self._expanded

    @expanded.setter
    def expanded(self, value: bool) -> None:
        if self._expanded == value:
            return
        self._expanded = value
        self._emit("expanded")

    # -------------------------------------------------------------------------
    # CHECK STATE
    # -------------------------------------------------------------------------

    @property
    def check(self) -> CheckState:
        return self._check

    @property
    def is_checked(self) -> bool:
        return self._check is CheckState.CHECKED

    def add_check_listener(self, listener: CheckListener) -> None:
        """Register a callback fired whenever a check changes in this subtree."""
        self._check_listeners.append(listener)

    def set_checked(self, value: CheckState) -> bool:
        """
        Set this node to CHECKED or UNCHECKED and propagate.

        Non-selectable nodes ignore the request. Repeating the current value
        is a no-op and emits nothing.

        Args:
            value: CheckState.CHECKED or CheckState.UNCHECKED.

        Returns:
            bool: True if any node in the tree changed.

        Raises:
            ValueError: If 'value' is INDETERMINATE.
        """
        if value is CheckState.INDETERMINATE:
            raise ValueError("The indeterminate state is derived and cannot be set directly.")

        if not self.selectable or self._check is value:
            return False

        if self._force_subtree(value) == 0:
            return False

        parent = self.parent
        if parent is not None:
            parent._recompute_upward()

        self._bubble_check_changed()
        return True

    def toggle(self) -> bool:
        """
        Flip the node as a checkbox click would.

        Indeterminate nodes clear when every selectable file beneath them is
        already checked and check otherwise.
        """
        if self._check is CheckState.CHECKED:
            target = CheckState.UNCHECKED
        elif self._check is CheckState.UNCHECKED:
            target = CheckState.CHECKED
        elif self._selectable_files_all_checked():
            target = CheckState.UNCHECKED
        else:
            target = CheckState.CHECKED
        return self.set_checked(target)

    # -------------------------------------------------------------------------
    # PROPAGATION INTERNALS
    # -------------------------------------------------------------------------

    def _force_subtree(self, value: CheckState) -> int:
        """Force selectable descendants to 'value'; internal nodes re-derive. Returns change count."""
        if not self.selectable:
            return 0

        changed = 0
        if self.children:
            for child in self.children:
                changed += child._force_subtree(value)
            new_value = self._derive_from_children()
        else:
            new_value = value

        if self._set_check_silently(new_value):
            changed += 1
        return changed

    def _recompute_upward(self) -> None:
        node: Optional[TreeNode] = self
        while node is not None and node.children:
            if not node._set_check_silently(node._derive_from_children()):
                return
            node = node.parent

    def _derive_from_children(self) -> CheckState:
        all_checked = True
        all_unchecked = True
        for child in self.children:
            state = child._check
            if state is not CheckState.CHECKED:
                all_checked = False
            if state is not CheckState.UNCHECKED:
                all_unchecked = False
            if not all_checked and not all_unchecked:
                return CheckState.INDETERMINATE
        return CheckState.CHECKED if all_checked else CheckState.UNCHECKED

    def _set_check_silently(self, value: CheckState) -> bool:
        if self._check is value:
            return False
        self._check = value
        self._emit("check")
        return True

    def _bubble_check_changed(self) -> None:
        node: Optional[TreeNode] = self
        while node is not None:
            for listener in list(node._check_listeners):
                listener(self)
            node = node.parent

    def _selectable_files_all_checked(self) -> bool:
        return all(
            n._check is CheckState.CHECKED
            for n in self.walk()
            if not n.children and n.selectable
        )

    def _emit(self, attribute: str) -> None:
        if self._outbox is not None:
            self._outbox.append(NodeChange(self, attribute))


# ==============================================================================
# TREE OWNER
# ==============================================================================

class SelectionTree:
    """
    Owner of one loaded solution's node hierarchy.

    Holds the root (and therefore every node) alive and collects property
    changes until the presentation layer drains them.
    """

    def __init__(self, root: TreeNode, *, track_changes: bool = True):
        self.root = root
        self._changes: Optional[Deque[NodeChange]] = deque() if track_changes else None
        for node in root.walk():
            node._outbox = self._changes

    def walk(self) -> Iterator[TreeNode]:
        return self.root.walk()

    def drain_changes(self) -> List[NodeChange]:
        """Return and clear the pending property changes, oldest first."""
        if not self._changes:
            return []
        changes = list(self._changes)
        self._changes.clear()
        return changes
