from __future__ import annotations

"""
Status and Log Bar.

Bottom row of the main window: the transient status message (colored by
kind) and the most recent log line forwarded from the logging queue.
"""

from typing import Any, Dict, Optional

import customtkinter as ctk

from solutiondumper.domain.models import StatusKind, StatusMessage

_STATUS_COLORS: Dict[StatusKind, str] = {
    StatusKind.INFO: "#3B8ED0",
    StatusKind.SUCCESS: "#2FA572",
    StatusKind.WARNING: "#D9A400",
    StatusKind.ERROR: "#D64545",
}


class StatusBar(ctk.CTkFrame):
    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=0, height=28, **kwargs)
        self.grid_columnconfigure(1, weight=1)

        self.label_status = ctk.CTkLabel(self, text="", anchor="w", width=320)
        self.label_status.grid(row=0, column=0, padx=10, pady=2, sticky="w")

        self.label_log = ctk.CTkLabel(self, text="", anchor="e", text_color="gray55")
        self.label_log.grid(row=0, column=1, padx=10, pady=2, sticky="ew")

    def show_status(self, message: Optional[StatusMessage]) -> None:
        if message is None:
            self.label_status.configure(text="")
            return
        self.label_status.configure(text=message.text, text_color=_STATUS_COLORS[message.kind])

    def show_log(self, line: str) -> None:
        self.label_log.configure(text=line)
