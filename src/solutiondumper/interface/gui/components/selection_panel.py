from __future__ import annotations

"""
Selected Files Panel.

Shows the current export list in export order together with its file
count and total size, and hosts the Export and Copy actions which are only
enabled while the list is non-empty.
"""

from typing import Any

import customtkinter as ctk

from solutiondumper.domain.models import ExportList
from solutiondumper.infra.fs import safe_relpath


class SelectionPanel(ctk.CTkFrame):
    """Right-hand pane of the main window."""

    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=10, **kwargs)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self.label_summary = ctk.CTkLabel(self, text="0 files selected", anchor="w")
        self.label_summary.grid(row=0, column=0, columnspan=2, padx=10, pady=(10, 5), sticky="ew")

        self.textbox = ctk.CTkTextbox(self, state="disabled", font=("Consolas", 11), wrap="none")
        self.textbox.grid(row=1, column=0, columnspan=2, padx=10, pady=5, sticky="nsew")

        self.btn_export = ctk.CTkButton(self, text="Export…", state="disabled")
        self.btn_export.grid(row=2, column=0, padx=(10, 5), pady=10, sticky="ew")

        self.btn_copy = ctk.CTkButton(self, text="Copy to clipboard", state="disabled")
        self.btn_copy.grid(row=2, column=1, padx=(5, 10), pady=10, sticky="ew")

    def show(self, export_list: ExportList, root_dir: str) -> None:
        """Render the export list relative to the solution directory."""
        self.label_summary.configure(
            text=f"{len(export_list)} files selected ({export_list.size_text})"
        )

        self.textbox.configure(state="normal")
        self.textbox.delete("1.0", "end")
        if export_list.files:
            self.textbox.insert(
                "end",
                "\n".join(safe_relpath(root_dir, p) for p in export_list.files),
            )
        self.textbox.configure(state="disabled")

        state = "normal" if export_list.files else "disabled"
        self.btn_export.configure(state=state)
        self.btn_copy.configure(state=state)
