from __future__ import annotations

"""
Cooperative Scheduling Primitives.

Every deferred action in the application (filter debounce, aggregation
debounce, status expiry, delivery of background results) runs through a
Scheduler owned by the thread that mutates the tree. The GUI adapts Tk's
'after' loop to this contract; headless callers and tests drive a
ManualScheduler with a virtual clock.
"""

import heapq
import itertools
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Set, Tuple


Callback = Callable[[], None]


class Scheduler(ABC):
    """
    Abstract single-owner scheduler.
    """

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callback) -> Any:
        """
        Run 'callback' on the owner thread after 'delay_ms' milliseconds.

        Returns:
            Any: Opaque handle accepted by cancel().
        """

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a pending callback. Unknown or fired handles are ignored."""

    @abstractmethod
    def post(self, callback: Callback) -> None:
        """Queue 'callback' for the owner thread. Safe to call from any thread."""


# -----------------------------------------------------------------------------
# VIRTUAL-CLOCK IMPLEMENTATION
# -----------------------------------------------------------------------------

class ManualScheduler(Scheduler):
    """
    Scheduler driven explicitly by its owner through advance()/run_pending().
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: List[Tuple[int, int, Callback]] = []
        self._cancelled: Set[int] = set()
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def call_later(self, delay_ms: int, callback: Callback) -> int:
        with self._lock:
            handle = next(self._counter)
            heapq.heappush(self._queue, (self.now_ms + max(0, int(delay_ms)), handle, callback))
            return handle

    def cancel(self, handle: Any) -> None:
        with self._lock:
            self._cancelled.add(handle)

    def post(self, callback: Callback) -> None:
        self.call_later(0, callback)

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for _, h, _ in self._queue if h not in self._cancelled)

    def advance(self, ms: int) -> int:
        """
        Move the clock forward, running every callback that falls due in order.

        Callbacks scheduled while advancing run too if they fall due before
        the target time.

        Returns:
            int: Number of callbacks executed.
        """
        target = self.now_ms + max(0, int(ms))
        executed = 0
        while True:
            task = self._pop_due(target)
            if task is None:
                break
            due, callback = task
            self.now_ms = max(self.now_ms, due)
            callback()
            executed += 1
        self.now_ms = target
        return executed

    def run_pending(self) -> int:
        """Run callbacks already due at the current time."""
        return self.advance(0)

    def _pop_due(self, target: int) -> Optional[Tuple[int, Callback]]:
        with self._lock:
            while self._queue and self._queue[0][0] <= target:
                due, handle, callback = heapq.heappop(self._queue)
                if handle in self._cancelled:
                    self._cancelled.discard(handle)
                    continue
                return due, callback
            return None


# -----------------------------------------------------------------------------
# DEBOUNCING
# -----------------------------------------------------------------------------

class Debouncer:
    """
    Single-shot deferred trigger.

    With restart=True every trigger re-arms the delay (keystroke debounce).
    With restart=False the first trigger arms it and later triggers inside
    the window are absorbed (burst coalescing).
    """

    def __init__(
            self,
            scheduler: Scheduler,
            delay_ms: int,
            callback: Callback,
            *,
            restart: bool = True,
    ):
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._callback = callback
        self._restart = restart
        self._handle: Any = None

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def trigger(self, delay_ms: Optional[int] = None) -> None:
        if delay_ms is not None:
            self.delay_ms = delay_ms

        if self._handle is not None:
            if not self._restart:
                return
            self._scheduler.cancel(self._handle)

        self._handle = self._scheduler.call_later(self.delay_ms, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
