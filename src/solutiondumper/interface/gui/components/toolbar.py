from __future__ import annotations

"""
Solution Toolbar.

Open button, read-only solution path, filter entry and bulk check actions.
"""

from typing import Any

import customtkinter as ctk


class ToolbarFrame(ctk.CTkFrame):
    """Top row of the main window."""

    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=10, **kwargs)
        self.grid_columnconfigure(1, weight=1)

        self.btn_open = ctk.CTkButton(self, text="Open solution…", width=130)
        self.btn_open.grid(row=0, column=0, padx=(10, 5), pady=10)

        self.entry_solution = ctk.CTkEntry(self, placeholder_text="No solution loaded")
        self.entry_solution.grid(row=0, column=1, padx=5, pady=10, sticky="ew")
        self.entry_solution.configure(state="readonly")

        self.entry_filter = ctk.CTkEntry(self, placeholder_text="Filter files…", width=240)
        self.entry_filter.grid(row=0, column=2, padx=5, pady=10)

        self.btn_check_all = ctk.CTkButton(self, text="Check all", width=90)
        self.btn_check_all.grid(row=0, column=3, padx=5, pady=10)

        self.btn_uncheck_all = ctk.CTkButton(self, text="Clear", width=70, fg_color="gray40")
        self.btn_uncheck_all.grid(row=0, column=4, padx=(5, 10), pady=10)

    def set_solution_path(self, path: str) -> None:
        self.entry_solution.configure(state="normal")
        self.entry_solution.delete(0, "end")
        self.entry_solution.insert(0, path)
        self.entry_solution.configure(state="readonly")
