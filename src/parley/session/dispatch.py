"""Dispatchers that move transport callbacks onto the control thread.

A dispatcher is any callable taking a zero-argument function. It must run
the functions on the control thread, in the order they were submitted.
"""

import queue
import time
from collections.abc import Callable

Dispatcher = Callable[[Callable[[], None]], None]


def call_inline(func: Callable[[], None]) -> None:
    """Run immediately on the calling thread (single-threaded hosts only)."""
    func()


class QueueDispatcher:
    """FIFO dispatcher drained by the thread that owns the session.

    Background threads submit work with ``dispatcher(func)``; the owning
    thread calls ``run_until`` to execute it.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[Callable[[], None]] = queue.Queue()

    def __call__(self, func: Callable[[], None]) -> None:
        self._queue.put(func)

    @property
    def pending(self) -> int:
        """Approximate number of queued functions."""
        return self._queue.qsize()

    def drain(self) -> int:
        """Run everything currently queued without blocking. Returns the count run."""
        count = 0
        while True:
            try:
                func = self._queue.get_nowait()
            except queue.Empty:
                return count
            func()
            count += 1

    def run_until(
        self,
        done: Callable[[], bool],
        timeout: float | None = None,
        poll_interval: float = 0.1,
    ) -> bool:
        """Run queued functions until done() is true.

        Args:
            done: Predicate checked after every function and poll
            timeout: Give up after this many seconds (None waits forever)
            poll_interval: Seconds to block on an empty queue between checks

        Returns:
            True if done() became true, False on timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while not done():
            if deadline is not None and time.monotonic() >= deadline:
                return False
            try:
                func = self._queue.get(timeout=poll_interval)
            except queue.Empty:
                continue
            func()
        return True
