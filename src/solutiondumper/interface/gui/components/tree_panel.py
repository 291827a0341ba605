from __future__ import annotations

"""
Tri-State Checkbox Tree View.

Renders the selection tree with a ttk.Treeview. Check state is drawn as a
glyph prefix, hidden nodes are detached (not deleted) from their parent so
they can be re-attached in original order, and expansion is mirrored both
ways between the widget and the node flags. The view never mutates the
model directly: clicks are forwarded to a toggle callback and the resulting
NodeChange batch is applied afterwards.
"""

from tkinter import ttk
from typing import Any, Callable, Dict, Iterable, Optional

import customtkinter as ctk

from solutiondumper.core.tree.node import NodeChange, TreeNode
from solutiondumper.domain.models import CheckState

_GLYPHS: Dict[CheckState, str] = {
    CheckState.UNCHECKED: "☐",
    CheckState.CHECKED: "☑",
    CheckState.INDETERMINATE: "◪",
}
_LOCKED_GLYPH = "⊘"


class TreePanel(ctk.CTkFrame):
    """
    Scrollable checkbox tree bound to one SelectionTree at a time.

    Args:
        master: Parent UI container.
        on_toggle: Invoked with the node the user clicked or toggled with space.
        on_expand: Invoked with (node, expanded) when the user opens/closes an item.
    """

    def __init__(
            self,
            master: Any,
            on_toggle: Optional[Callable[[TreeNode], None]] = None,
            on_expand: Optional[Callable[[TreeNode, bool], None]] = None,
            **kwargs: Any,
    ):
        super().__init__(master, corner_radius=10, **kwargs)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self.on_toggle = on_toggle
        self.on_expand = on_expand

        self.tree = ttk.Treeview(self, columns=("info",), selectmode="browse")
        self.tree.heading("#0", text="Solution", anchor="w")
        self.tree.heading("info", text="", anchor="w")
        self.tree.column("info", width=220, stretch=False)
        self.tree.grid(row=0, column=0, sticky="nsew", padx=(8, 0), pady=8)

        scroll = ctk.CTkScrollbar(self, command=self.tree.yview)
        scroll.grid(row=0, column=1, sticky="ns", pady=8)
        self.tree.configure(yscrollcommand=scroll.set)

        self._nodes: Dict[str, TreeNode] = {}
        self._items: Dict[int, str] = {}

        self.tree.bind("<Button-1>", self._on_click)
        self.tree.bind("<space>", self._on_space)
        self.tree.bind("<<TreeviewOpen>>", lambda _e: self._on_open_close(True))
        self.tree.bind("<<TreeviewClose>>", lambda _e: self._on_open_close(False))

    # -------------------------------------------------------------------------
    # POPULATION
    # -------------------------------------------------------------------------

    def load(self, root: TreeNode) -> None:
        """Replace the widget content with a freshly loaded tree."""
        self.clear()
        stack = [("", root)]
        while stack:
            parent_item, node = stack.pop()
            item = self.tree.insert(
                parent_item,
                "end",
                text=self._label(node),
                values=(self._info(node),),
                open=node.expanded,
            )
            self._nodes[item] = node
            self._items[id(node)] = item
            stack.extend((item, child) for child in reversed(node.children))

        # Detach nodes hidden by an active filter
        self._relayout(n for n in root.walk() if n.children)
        self._relayout_roots(root)

    def clear(self) -> None:
        self.tree.delete(*self.tree.get_children(""))
        self._nodes.clear()
        self._items.clear()

    # -------------------------------------------------------------------------
    # CHANGE APPLICATION
    # -------------------------------------------------------------------------

    def apply_changes(self, changes: Iterable[NodeChange]) -> None:
        """Reflect a drained batch of model changes in the widget."""
        dirty_parents: Dict[int, TreeNode] = {}
        root_dirty: Optional[TreeNode] = None

        for node, attribute in changes:
            item = self._items.get(id(node))
            if item is None:
                continue

            if attribute == "check":
                self.tree.item(item, text=self._label(node))
            elif attribute == "expanded":
                self.tree.item(item, open=node.expanded)
            elif attribute == "visible":
                parent = node.parent
                if parent is None:
                    root_dirty = node
                else:
                    dirty_parents[id(parent)] = parent

        self._relayout(dirty_parents.values())
        if root_dirty is not None:
            self._relayout_roots(root_dirty)

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    def _relayout(self, parents: Iterable[TreeNode]) -> None:
        for parent in parents:
            parent_item = self._items.get(id(parent))
            if parent_item is None:
                continue
            visible_items = [self._items[id(c)] for c in parent.children if c.visible]
            self.tree.set_children(parent_item, *visible_items)

    def _relayout_roots(self, root: TreeNode) -> None:
        item = self._items.get(id(root))
        if item is not None:
            self.tree.set_children("", *([item] if root.visible else []))

    def _label(self, node: TreeNode) -> str:
        glyph = _GLYPHS[node.check] if node.selectable else _LOCKED_GLYPH
        return f"{glyph} {node.name}"

    def _info(self, node: TreeNode) -> str:
        if node.tooltip:
            return node.tooltip
        if node.is_file and node.size is not None:
            return f"{node.size / 1024.0:.1f} KB"
        return ""

    def _on_click(self, event: Any) -> Optional[str]:
        if self.tree.identify_region(event.x, event.y) != "tree":
            return None
        if "indicator" in self.tree.identify_element(event.x, event.y):
            return None

        item = self.tree.identify_row(event.y)
        node = self._nodes.get(item)
        if node is not None and self.on_toggle is not None:
            self.tree.focus(item)
            self.tree.selection_set(item)
            self.on_toggle(node)
            return "break"
        return None

    def _on_space(self, _event: Any) -> str:
        for item in self.tree.selection():
            node = self._nodes.get(item)
            if node is not None and self.on_toggle is not None:
                self.on_toggle(node)
        return "break"

    def _on_open_close(self, expanded: bool) -> None:
        node = self._nodes.get(self.tree.focus())
        if node is not None and self.on_expand is not None:
            self.on_expand(node, expanded)
