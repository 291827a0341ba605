from __future__ import annotations

"""
GUI Entrypoint and Application Lifecycle Orchestrator.

Initializes the CustomTkinter environment, coordinates persistent state
loading, assembles the visual component hierarchy, and bridges UI events
with the AppController. Manages asynchronous log polling and persists the
user preferences on close.
"""

import logging
import queue
import sys
from logging.handlers import QueueHandler
from typing import Optional

from solutiondumper.domain import config as cfg
from solutiondumper.domain import constants as const
from solutiondumper.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
)
from solutiondumper.interface.gui.components.main_window import create_main_window
from solutiondumper.interface.gui.components.selection_panel import SelectionPanel
from solutiondumper.interface.gui.components.status_bar import StatusBar
from solutiondumper.interface.gui.components.toolbar import ToolbarFrame
from solutiondumper.interface.gui.components.tree_panel import TreePanel
from solutiondumper.interface.gui.controllers.main_controller import AppController
from solutiondumper.interface.gui.scheduler import TkScheduler

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# MAIN APPLICATION LOOP
# -----------------------------------------------------------------------------

def main(solution_path: Optional[str] = None) -> None:
    """
    Initialize and launch the Graphical User Interface.

    Executes the startup sequence: Logging Setup, State Recovery, UI
    Construction, Controller Binding, Log Polling and Loop Entry.

    Args:
        solution_path: Optional solution to load once the window is up.
    """
    # -----------------------------------------------------------------------------
    # PHASE 1: DIAGNOSTIC INFRASTRUCTURE SETUP
    # -----------------------------------------------------------------------------
    log_path = get_default_log_path()
    configure_logging(LoggingConfig(level="INFO", console=True, log_file=log_path))
    logger.info(f"GUI Lifecycle: Initializing v{const.CURRENT_CONFIG_VERSION}")

    gui_log_queue: queue.Queue = queue.Queue()
    gui_log_handler = QueueHandler(gui_log_queue)
    gui_log_handler.setLevel(logging.INFO)
    logging.getLogger().addHandler(gui_log_handler)

    # -----------------------------------------------------------------------------
    # PHASE 2: PERSISTENT STATE RECOVERY
    # -----------------------------------------------------------------------------
    app_state = cfg.load_app_state()

    # -----------------------------------------------------------------------------
    # PHASE 3: VIEW COMPONENT HIERARCHY CONSTRUCTION
    # -----------------------------------------------------------------------------
    app = create_main_window(app_state)
    scheduler = TkScheduler(app)

    toolbar = ToolbarFrame(app)
    toolbar.grid(row=0, column=0, columnspan=2, sticky="ew", padx=10, pady=(10, 5))

    tree_panel = TreePanel(app)
    tree_panel.grid(row=1, column=0, sticky="nsew", padx=(10, 5), pady=5)

    selection_panel = SelectionPanel(app)
    selection_panel.grid(row=1, column=1, sticky="nsew", padx=(5, 10), pady=5)

    status_bar = StatusBar(app)
    status_bar.grid(row=2, column=0, columnspan=2, sticky="ew")

    # -----------------------------------------------------------------------------
    # PHASE 4: CONTROLLER INTEGRATION AND EVENT BINDING
    # -----------------------------------------------------------------------------
    controller = AppController(app, app_state, scheduler)
    controller.register_views(toolbar, tree_panel, selection_panel, status_bar)

    tree_panel.on_toggle = controller.on_node_toggled
    tree_panel.on_expand = controller.on_node_expanded

    toolbar.btn_open.configure(command=controller.open_solution)
    toolbar.btn_check_all.configure(command=controller.check_all)
    toolbar.btn_uncheck_all.configure(command=controller.uncheck_all)
    toolbar.entry_filter.bind("<KeyRelease>", controller.on_filter_changed)

    selection_panel.btn_export.configure(command=controller.export_dump)
    selection_panel.btn_copy.configure(command=controller.copy_dump)

    # -----------------------------------------------------------------------------
    # PHASE 5: BACKGROUND POLLING
    # -----------------------------------------------------------------------------
    log_formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s", "%H:%M:%S")

    def poll_log_queue() -> None:
        """Show the newest log line in the status bar."""
        latest: Optional[str] = None
        while True:
            try:
                record = gui_log_queue.get_nowait()
            except queue.Empty:
                break
            latest = log_formatter.format(record)
        if latest is not None:
            status_bar.show_log(latest)
        app.after(100, poll_log_queue)

    # -----------------------------------------------------------------------------
    # PHASE 6: LIFECYCLE FINALIZATION
    # -----------------------------------------------------------------------------
    def on_closing() -> None:
        """Persist preferences and terminate the process."""
        controller.shutdown()
        scheduler.stop()
        cfg.save_app_state(app_state)
        logging.getLogger().removeHandler(gui_log_handler)
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_closing)
    app.after(100, poll_log_queue)

    if solution_path:
        app.after(0, lambda: controller.load_solution(solution_path))

    app.mainloop()


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
