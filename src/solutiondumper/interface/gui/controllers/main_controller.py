from __future__ import annotations

"""
Main Application Controller.

Bridges the View (UI Components) and the SolutionSession (Core Logic).
Handles solution loading, checkbox and filter events, export and clipboard
actions, and pushes the session's derived views (node changes, export
list, status) back into the widgets after each batch.
"""

import logging
import os
import tkinter as tk
import tkinter.messagebox as mb
from typing import Any, Dict, Optional

import customtkinter as ctk

from solutiondumper.core.engine.scheduler import Scheduler
from solutiondumper.core.session import SolutionSession
from solutiondumper.core.tree.node import TreeNode
from solutiondumper.domain import config as cfg
from solutiondumper.domain import constants as const
from solutiondumper.domain.errors import ClipboardError, ExportDestinationError, ResolutionError
from solutiondumper.domain.models import ExportList, ScanRules, StatusMessage

logger = logging.getLogger(__name__)

# ==============================================================================
# PRIMARY APPLICATION CONTROLLER
# ==============================================================================

class AppController:
    """
    Central controller class that bridges the UI (View) and the session (Model).
    """

    def __init__(
            self,
            app: ctk.CTk,
            app_state: Dict[str, Any],
            scheduler: Scheduler,
    ):
        """
        Initialize the controller with application context and state.

        Args:
            app: Root CustomTkinter application instance.
            app_state: Global persistent application state.
            scheduler: Main-loop scheduler shared with the session.
        """
        self.app = app
        self.app_state = app_state

        scan_options = cfg.load_scan_options(app_state)
        app_state["scan_options"] = scan_options

        self.session = SolutionSession(
            scheduler,
            ScanRules.from_options(scan_options),
            on_selection_changed=self._on_selection_changed,
            on_visibility_applied=self._on_visibility_applied,
            on_status=self._on_status,
        )

        # Shortcuts to registered View components
        self.toolbar_view: Any = None
        self.tree_view: Any = None
        self.selection_view: Any = None
        self.status_view: Any = None

    # -------------------------------------------------------------------------
    # VIEW REGISTRATION
    # -------------------------------------------------------------------------

    def register_views(self, toolbar: Any, tree: Any, selection: Any, status: Any) -> None:
        self.toolbar_view = toolbar
        self.tree_view = tree
        self.selection_view = selection
        self.status_view = status

    # -------------------------------------------------------------------------
    # SOLUTION LOADING
    # -------------------------------------------------------------------------

    def open_solution(self) -> None:
        """Prompt for a solution file and load it."""
        initial_dir = self.app_state["app_settings"].get("last_solution_dir") or os.getcwd()
        path = ctk.filedialog.askopenfilename(
            parent=self.app,
            title="Open solution",
            initialdir=initial_dir,
            filetypes=[("Solutions", "*.sln *.slnx"), ("All files", "*.*")],
        )
        if path:
            self.load_solution(path)

    def load_solution(self, path: str) -> None:
        """
        Load a solution into the session and rebuild the tree widget.

        On failure the previously displayed tree is kept; the session has
        already published the error status.
        """
        self.app.configure(cursor="watch")
        self.app.update_idletasks()
        try:
            tree = self.session.load(path)
        except ResolutionError as e:
            mb.showerror("Failed to load solution", str(e))
            return
        finally:
            self.app.configure(cursor="")

        # Full reload renders current state; pending deltas are obsolete
        self.session.drain_changes()
        self.tree_view.load(tree.root)
        self.toolbar_view.set_solution_path(self.session.solution_path or path)

        self.app_state["app_settings"]["last_solution_dir"] = os.path.dirname(
            os.path.abspath(path)
        )

    # -------------------------------------------------------------------------
    # TREE INTERACTION
    # -------------------------------------------------------------------------

    def on_node_toggled(self, node: TreeNode) -> None:
        self.session.toggle(node)
        self.flush_changes()

    def on_node_expanded(self, node: TreeNode, expanded: bool) -> None:
        node.expanded = expanded
        self.session.drain_changes()

    def check_all(self) -> None:
        self.session.check_all()
        self.flush_changes()

    def uncheck_all(self) -> None:
        self.session.uncheck_all()
        self.flush_changes()

    def on_filter_changed(self, _event: Optional[Any] = None) -> None:
        self.session.set_filter(self.toolbar_view.entry_filter.get())

    def flush_changes(self) -> None:
        """Push the drained node changes into the tree widget."""
        changes = self.session.drain_changes()
        if changes:
            self.tree_view.apply_changes(changes)

    # -------------------------------------------------------------------------
    # EXPORT ACTIONS
    # -------------------------------------------------------------------------

    def export_dump(self) -> None:
        if not self.session.can_export:
            return

        path = ctk.filedialog.asksaveasfilename(
            parent=self.app,
            title="Export dump",
            initialfile=const.DEFAULT_DUMP_FILE_NAME,
            defaultextension=".txt",
            filetypes=[("Text", "*.txt"), ("Markdown", "*.md")],
        )
        if not path:
            return

        try:
            failures = self.session.export_to_file(path)
        except ExportDestinationError as e:
            mb.showerror("Export failed", str(e))
            return

        if failures:
            logger.warning(f"Export completed with {len(failures)} unreadable file(s).")

    def copy_dump(self) -> None:
        if not self.session.can_export:
            return

        text = self.session.render_dump()
        try:
            self.app.clipboard_clear()
            self.app.clipboard_append(text)
            self.app.update()
        except tk.TclError as e:
            self.session.report_copy_failed(ClipboardError(str(e)))
            return

        self.session.report_copied()

    # -------------------------------------------------------------------------
    # SESSION CALLBACKS
    # -------------------------------------------------------------------------

    def _on_selection_changed(self, export_list: ExportList) -> None:
        if self.selection_view is not None:
            self.selection_view.show(export_list, self.session.root_dir)

    def _on_visibility_applied(self, _term: str) -> None:
        if self.tree_view is not None:
            self.flush_changes()

    def _on_status(self, message: Optional[StatusMessage]) -> None:
        if self.status_view is not None:
            self.status_view.show_status(message)

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def shutdown(self) -> None:
        self.session.close()
