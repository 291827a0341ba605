from __future__ import annotations

"""
Main Application Window Factory.

Initializes the root CustomTkinter application window, configures
global theme attributes, and establishes the primary structural
grid: toolbar, tree and selection panes, status bar.
"""

from typing import Any, Dict

import customtkinter as ctk

from solutiondumper.domain import constants as const

# -----------------------------------------------------------------------------
# ROOT WINDOW CONSTRUCTION
# -----------------------------------------------------------------------------

def create_main_window(app_state: Dict[str, Any]) -> ctk.CTk:
    """
    Instantiate and configure the primary application window.

    Args:
        app_state: Persisted application state (theme is read from it).

    Returns:
        ctk.CTk: The configured root application instance.
    """
    theme = app_state.get("app_settings", {}).get("theme", "System")
    ctk.set_appearance_mode(theme)
    ctk.set_default_color_theme("blue")

    app = ctk.CTk()

    app.title(f"{const.APP_TITLE} - v{const.CURRENT_CONFIG_VERSION}")
    app.geometry("1200x760")

    # Row 0 toolbar, row 1 content (tree | selection), row 2 status bar
    app.grid_columnconfigure(0, weight=3)
    app.grid_columnconfigure(1, weight=2)
    app.grid_rowconfigure(1, weight=1)

    return app
