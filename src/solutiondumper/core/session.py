from __future__ import annotations

"""
Loaded Solution Session.

Coordinates one loaded solution for a front end: all-or-nothing loading,
check mutations, filtering, debounced aggregation, export and the
transient status line. Every method must be called from the thread that
owns the scheduler.
"""

import logging
import os
from concurrent.futures import Executor
from typing import Callable, List, Optional

from solutiondumper.core.engine.aggregation import SelectionAggregator
from solutiondumper.core.engine.filtering import FilterEngine
from solutiondumper.core.engine.scheduler import Debouncer, Scheduler
from solutiondumper.core.export import writer
from solutiondumper.core.services.resolver import resolve_solution
from solutiondumper.core.services.scanner import enumerate_project_files
from solutiondumper.core.tree.builder import FileEnumerator, build_solution_tree
from solutiondumper.core.tree.index import FlatIndex
from solutiondumper.core.tree.node import NodeChange, SelectionTree, TreeNode
from solutiondumper.domain import constants as const
from solutiondumper.domain.errors import ExportDestinationError, ResolutionError
from solutiondumper.domain.models import (
    CheckState,
    DumpHeader,
    ExportList,
    ProjectDescriptor,
    ScanRules,
    StatusKind,
    StatusMessage,
)

logger = logging.getLogger(__name__)


class SolutionSession:
    """
    Owner of the currently loaded solution and its derived views.

    Args:
        scheduler: Owner-thread scheduler (Tk adapter or ManualScheduler).
        rules: Enumeration rules used on the next load.
        executor: Pool for background filter scans (private pool if omitted).
        track_changes: Collect node property changes for a presentation layer.
        on_selection_changed: Receives each rebuilt ExportList.
        on_visibility_applied: Receives the applied filter term.
        on_status: Receives the new StatusMessage, or None when it expires.
        enumerate_files: Candidate file source, replaceable for tests.
    """

    def __init__(
            self,
            scheduler: Scheduler,
            rules: ScanRules,
            *,
            executor: Optional[Executor] = None,
            track_changes: bool = True,
            on_selection_changed: Optional[Callable[[ExportList], None]] = None,
            on_visibility_applied: Optional[Callable[[str], None]] = None,
            on_status: Optional[Callable[[Optional[StatusMessage]], None]] = None,
            enumerate_files: FileEnumerator = enumerate_project_files,
    ):
        self.rules = rules
        self._track_changes = track_changes
        self._enumerate_files = enumerate_files
        self._on_selection_changed = on_selection_changed
        self._on_visibility_applied = on_visibility_applied
        self._on_status = on_status

        self.filter_engine = FilterEngine(scheduler, executor, on_applied=self._handle_filter_applied)
        self.aggregator = SelectionAggregator(scheduler, on_rebuilt=self._handle_rebuilt)
        self._status_timer = Debouncer(scheduler, 0, self.clear_status, restart=True)

        self.tree: Optional[SelectionTree] = None
        self.index: Optional[FlatIndex] = None
        self.solution_path: Optional[str] = None
        self.projects: List[ProjectDescriptor] = []
        self.version = 0
        self.status: Optional[StatusMessage] = None

    # -------------------------------------------------------------------------
    # PROPERTIES
    # -------------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self.tree is not None

    @property
    def root(self) -> Optional[TreeNode]:
        return self.tree.root if self.tree is not None else None

    @property
    def root_dir(self) -> str:
        """Directory that dump section paths are made relative to."""
        return os.path.dirname(self.solution_path) if self.solution_path else os.getcwd()

    @property
    def export_list(self) -> ExportList:
        return self.aggregator.current

    @property
    def can_export(self) -> bool:
        return len(self.aggregator.current) > 0

    # -------------------------------------------------------------------------
    # LOADING
    # -------------------------------------------------------------------------

    def load(self, solution_path: str) -> SelectionTree:
        """
        Resolve, enumerate and assemble a solution, then swap it in.

        The previous tree stays active until the new one is fully built; on
        failure nothing is replaced.

        Raises:
            ResolutionError: If the solution cannot be resolved.
        """
        full_path = os.path.abspath(solution_path)
        name = os.path.basename(full_path)
        self.show_status(StatusKind.INFO, "Loading solution…", expiry_ms=0)
        logger.info(f"Loading solution: {full_path}")

        try:
            projects = resolve_solution(full_path)
            tree = build_solution_tree(
                full_path,
                projects,
                self.rules,
                enumerate_files=self._enumerate_files,
                track_changes=self._track_changes,
            )
        except ResolutionError as e:
            logger.error(f"Load aborted: {e}")
            self.show_status(StatusKind.ERROR, f"Failed to load solution: {e}")
            raise

        self.version += 1
        index = FlatIndex.build(tree.root, self.version)

        self.tree = tree
        self.index = index
        self.solution_path = full_path
        self.projects = projects

        self.filter_engine.bind(index)
        self.aggregator.bind(tree.root)
        tree.root.add_check_listener(self.aggregator.schedule)

        self.filter_engine.apply_now()
        self.refresh_selection()

        logger.info(f"Solution loaded: version={self.version}, nodes={len(index)}")
        self.show_status(StatusKind.SUCCESS, f"Loaded '{name}' ({len(projects)} projects)")
        return tree

    # -------------------------------------------------------------------------
    # CHECK STATE
    # -------------------------------------------------------------------------

    def set_checked(self, node: TreeNode, value: CheckState) -> bool:
        return node.set_checked(value)

    def toggle(self, node: TreeNode) -> bool:
        return node.toggle()

    def check_all(self) -> bool:
        return self.root.set_checked(CheckState.CHECKED) if self.root else False

    def uncheck_all(self) -> bool:
        return self.root.set_checked(CheckState.UNCHECKED) if self.root else False

    def drain_changes(self) -> List[NodeChange]:
        return self.tree.drain_changes() if self.tree is not None else []

    # -------------------------------------------------------------------------
    # FILTERING
    # -------------------------------------------------------------------------

    def set_filter(self, term: Optional[str]) -> None:
        """Debounced filter update (keystroke path)."""
        self.filter_engine.set_term(term)

    def filter_now(self, term: Optional[str]) -> int:
        """Apply a filter synchronously; returns the number of visible nodes."""
        return self.filter_engine.apply_sync(term)

    # -------------------------------------------------------------------------
    # AGGREGATION
    # -------------------------------------------------------------------------

    def refresh_selection(self) -> ExportList:
        """Rebuild the export list immediately, flushing any pending rebuild."""
        export_list = self.aggregator.rebuild_now()
        self._handle_rebuilt(export_list)
        return export_list

    def _current_export_list(self) -> ExportList:
        if self.aggregator.is_pending:
            return self.refresh_selection()
        return self.aggregator.current

    # -------------------------------------------------------------------------
    # EXPORT
    # -------------------------------------------------------------------------

    def make_header(self, file_count: int) -> DumpHeader:
        return DumpHeader.now(self.solution_path or "", file_count)

    def export_to_file(self, destination: str) -> List[str]:
        """
        Write the current selection to 'destination'.

        Returns:
            List[str]: Files that could not be read (placeholders were written).

        Raises:
            ExportDestinationError: If the destination cannot be written.
        """
        export_list = self._current_export_list()
        if not export_list.files:
            self.show_status(StatusKind.WARNING, "Nothing selected to export.")
            return []

        self.show_status(StatusKind.INFO, "Exporting…", expiry_ms=0)
        try:
            failures = writer.export_to_file(
                destination,
                export_list.files,
                self.make_header(len(export_list)),
                self.root_dir,
            )
        except ExportDestinationError as e:
            self.show_status(StatusKind.ERROR, f"Export failed: {e}")
            raise

        self.show_status(StatusKind.SUCCESS, f"Exported ({len(export_list)} files)")
        return failures

    def render_dump(self) -> str:
        """Render the current selection into a string (clipboard/stdout)."""
        export_list = self._current_export_list()
        return writer.render_dump(
            export_list.files,
            self.make_header(len(export_list)),
            self.root_dir,
        )

    def report_copied(self) -> None:
        self.show_status(StatusKind.SUCCESS, f"Copied ({len(self.export_list)} files)")

    def report_copy_failed(self, error: Exception) -> None:
        logger.error(f"Clipboard write failed: {error}")
        self.show_status(StatusKind.ERROR, f"Failed to copy: {error}")

    # -------------------------------------------------------------------------
    # STATUS LINE
    # -------------------------------------------------------------------------

    def show_status(self, kind: StatusKind, text: str, expiry_ms: Optional[int] = None) -> None:
        """
        Publish a status message that clears itself after its expiry.

        Args:
            kind: Message severity.
            text: Message text.
            expiry_ms: Lifetime override; 0 keeps the message until replaced.
        """
        if expiry_ms is None:
            expiry_ms = const.STATUS_EXPIRY_MS[kind.value]

        self.status = StatusMessage(kind, text)
        if self._on_status is not None:
            self._on_status(self.status)

        if expiry_ms <= 0:
            self._status_timer.cancel()
        else:
            self._status_timer.trigger(expiry_ms)

    def clear_status(self) -> None:
        self._status_timer.cancel()
        self.status = None
        if self._on_status is not None:
            self._on_status(None)

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self.filter_engine.shutdown()
        self.aggregator.cancel()
        self._status_timer.cancel()

    # -------------------------------------------------------------------------
    # ENGINE CALLBACKS
    # -------------------------------------------------------------------------

    def _handle_rebuilt(self, export_list: ExportList) -> None:
        if self._on_selection_changed is not None:
            self._on_selection_changed(export_list)

    def _handle_filter_applied(self, term: str) -> None:
        if self._on_visibility_applied is not None:
            self._on_visibility_applied(term)
