from __future__ import annotations

"""
Tk Event Loop Scheduler.

Adapts the cooperative scheduler contract to Tk: delayed callbacks map to
'after'/'after_cancel', and cross-thread posts are queued and pumped by a
short periodic 'after' on the main loop, because Tk widgets must never be
touched from a worker thread.
"""

import logging
import queue
from typing import Any

import customtkinter as ctk

from solutiondumper.core.engine.scheduler import Callback, Scheduler

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 25


class TkScheduler(Scheduler):
    """Scheduler bound to the main loop of a Tk root window."""

    def __init__(self, app: ctk.CTk, poll_interval_ms: int = POLL_INTERVAL_MS):
        self._app = app
        self._poll_interval_ms = poll_interval_ms
        self._posted: queue.Queue = queue.Queue()
        self._running = True
        self._app.after(self._poll_interval_ms, self._pump)

    def call_later(self, delay_ms: int, callback: Callback) -> Any:
        return self._app.after(max(0, int(delay_ms)), callback)

    def cancel(self, handle: Any) -> None:
        if handle is None:
            return
        self._app.after_cancel(handle)

    def post(self, callback: Callback) -> None:
        self._posted.put(callback)

    def stop(self) -> None:
        self._running = False
        logger.debug(f"Tk scheduler stopped ({self._posted.qsize()} posted callback(s) dropped).")

    def _pump(self) -> None:
        while True:
            try:
                callback = self._posted.get_nowait()
            except queue.Empty:
                break
            callback()

        if self._running:
            self._app.after(self._poll_interval_ms, self._pump)
