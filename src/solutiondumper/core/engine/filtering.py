from __future__ import annotations

"""
Incremental Tree Filter Engine.

Drives the Idle -> Scheduled -> Computing -> Applied lifecycle of a filter
request. Keystrokes are debounced on the owner scheduler; the substring
scan itself runs on a worker thread over the immutable FlatIndex and its
result is handed back through Scheduler.post(). A superseding request sets
the previous scan's cancellation event and bumps the request id, so a late
result is discarded instead of being applied.
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from typing import Callable, List, Optional

from solutiondumper.core.engine.scheduler import Debouncer, Scheduler
from solutiondumper.core.tree.index import (
    FlatIndex,
    apply_visibility,
    normalize_term,
    scan_visibility,
    show_all_and_collapse_to_checked,
)
from solutiondumper.domain import constants as const
from solutiondumper.domain.errors import FilterCancelled

logger = logging.getLogger(__name__)


class FilterState(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    COMPUTING = "computing"
    APPLIED = "applied"


class FilterEngine:
    """
    Owner-thread controller for tree filtering.

    Args:
        scheduler: Owner scheduler used for the debounce and result delivery.
        executor: Pool running the scan. A private single-worker pool is
                  created (and shut down with the engine) when omitted.
        delay_ms: Debounce interval restarted by every keystroke.
        on_applied: Called with the applied term after visibility changed.
    """

    def __init__(
            self,
            scheduler: Scheduler,
            executor: Optional[Executor] = None,
            delay_ms: int = const.FILTER_DEBOUNCE_MS,
            on_applied: Optional[Callable[[str], None]] = None,
    ):
        self._scheduler = scheduler
        self._executor = executor
        self._owns_executor = executor is None
        self._on_applied = on_applied
        self._debouncer = Debouncer(scheduler, delay_ms, self._start, restart=True)

        self._index: Optional[FlatIndex] = None
        self._term = ""
        self._state = FilterState.IDLE
        self._request_id = 0
        self._cancel_event: Optional[threading.Event] = None
        self._in_flight: Optional[Future] = None

    # -------------------------------------------------------------------------
    # PROPERTIES
    # -------------------------------------------------------------------------

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def term(self) -> str:
        return self._term

    @property
    def in_flight(self) -> Optional[Future]:
        """Future of the running scan, if any (tests wait on it)."""
        return self._in_flight

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def bind(self, index: FlatIndex) -> None:
        """
        Attach a freshly built index, invalidating any scan of the old one.

        The active term is kept; callers re-apply it with apply_now().
        """
        self._debouncer.cancel()
        self._cancel_in_flight()
        self._index = index
        self._state = FilterState.IDLE
        logger.debug(f"Filter index bound: version={index.version}, nodes={len(index)}")

    def set_term(self, term: Optional[str]) -> None:
        """Register a keystroke. Re-arms the debounce and cancels a running scan."""
        normalized = normalize_term(term)
        if normalized == self._term and self._state is not FilterState.IDLE:
            return

        self._term = normalized
        self._cancel_in_flight()
        self._state = FilterState.SCHEDULED
        self._debouncer.trigger()

    def apply_now(self) -> None:
        """Skip the remaining debounce and start the active request immediately."""
        self._debouncer.cancel()
        self._cancel_in_flight()
        self._start()

    def apply_sync(self, term: Optional[str]) -> int:
        """
        Filter on the calling thread, bypassing debounce and the worker pool.

        Used by headless front ends that have no interaction loop.

        Returns:
            int: Number of visible nodes after the filter.
        """
        if self._index is None:
            raise RuntimeError("No index bound to the filter engine.")

        self._debouncer.cancel()
        self._cancel_in_flight()
        self._term = normalize_term(term)

        if not self._term:
            show_all_and_collapse_to_checked(self._index)
            visible_count = len(self._index)
        else:
            visible = scan_visibility(self._index.keys, self._index.parents, self._term)
            apply_visibility(self._index, visible)
            visible_count = sum(visible)

        self._finish()
        return visible_count

    def shutdown(self) -> None:
        self._debouncer.cancel()
        self._cancel_in_flight()
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    # -------------------------------------------------------------------------
    # LIFECYCLE INTERNALS
    # -------------------------------------------------------------------------

    def _start(self) -> None:
        index = self._index
        if index is None:
            self._state = FilterState.IDLE
            return

        if not self._term:
            show_all_and_collapse_to_checked(index)
            logger.debug("Filter cleared: all nodes visible.")
            self._finish()
            return

        self._request_id += 1
        cancel_event = threading.Event()
        self._cancel_event = cancel_event
        self._state = FilterState.COMPUTING

        logger.debug(f"Filter scan #{self._request_id} started for '{self._term}'")
        self._in_flight = self._get_executor().submit(
            self._scan, self._request_id, index, self._term, cancel_event
        )

    def _scan(
            self,
            request_id: int,
            index: FlatIndex,
            term: str,
            cancel_event: threading.Event,
    ) -> None:
        """Worker-thread body. Posts the result to the owner; never touches live nodes."""
        try:
            visible = scan_visibility(index.keys, index.parents, term, cancel_event)
        except FilterCancelled:
            logger.debug(f"Filter scan #{request_id} cancelled.")
            return

        self._scheduler.post(lambda: self._complete(request_id, index, cancel_event, visible))

    def _complete(
            self,
            request_id: int,
            index: FlatIndex,
            cancel_event: threading.Event,
            visible: List[bool],
    ) -> None:
        if (
                cancel_event.is_set()
                or request_id != self._request_id
                or self._index is None
                or index.version != self._index.version
        ):
            logger.debug(f"Filter scan #{request_id} result discarded (stale).")
            return

        apply_visibility(index, visible)
        self._cancel_event = None
        self._in_flight = None
        logger.debug(f"Filter scan #{request_id} applied: {sum(visible)} visible node(s)")
        self._finish()

    def _finish(self) -> None:
        self._state = FilterState.APPLIED
        if self._on_applied is not None:
            self._on_applied(self._term)

    def _cancel_in_flight(self) -> None:
        if self._cancel_event is not None:
            self._cancel_event.set()
            self._cancel_event = None
        self._in_flight = None
        self._request_id += 1

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tree-filter")
        return self._executor
