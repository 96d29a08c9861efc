import heapq
import itertools
import logging
import time

logger = logging.getLogger(__name__)


class MonotonicClock:
    """Wall clock in milliseconds."""

    def now(self):
        return time.monotonic() * 1000.0


class VirtualClock:
    """Clock that only moves when told to. Used by tests and headless runs."""

    def __init__(self, start=0.0):
        self._now = float(start)

    def now(self):
        return self._now

    def advance(self, ms):
        if ms < 0:
            raise ValueError("cannot move a clock backwards")
        self._now += ms

    def advance_to(self, when):
        if when > self._now:
            self._now = float(when)


class Scheduler:
    """
    Single-threaded cooperative task queue.

    Tasks are plain callables queued with call_later(delay_ms, fn). Nothing
    runs until run_due() is called; it runs every task whose due time has
    passed on the injected clock, earliest first, equal due times in the
    order they were queued. A task may queue further tasks, which is how a
    runner re-enqueues its next step.

    The GUI pumps run_due() from tkinter's after() loop with a MonotonicClock;
    tests and batch runs call run_until_idle() with a VirtualClock, which jumps
    time straight to the next due task instead of sleeping.
    """
    def __init__(self, clock=None):
        self.clock = clock if clock is not None else MonotonicClock()
        self._queue = []
        self._counter = itertools.count()

    @property
    def pending(self):
        return len(self._queue)

    def call_later(self, delay_ms, fn, *args):
        due = self.clock.now() + max(0, delay_ms)
        heapq.heappush(self._queue, (due, next(self._counter), fn, args))
        return due

    def next_due(self):
        return self._queue[0][0] if self._queue else None

    def run_due(self):
        """Run every task that is due now. Returns how many ran."""
        ran = 0
        now = self.clock.now()
        while self._queue and self._queue[0][0] <= now:
            _, _, fn, args = heapq.heappop(self._queue)
            fn(*args)
            ran += 1
        return ran

    def run_until_idle(self, limit=None):
        """Drain the queue on a VirtualClock, advancing it to each due time.

        limit caps the number of tasks run, for callers guarding against a
        task that keeps re-queuing itself forever.
        """
        if not hasattr(self.clock, "advance_to"):
            raise TypeError("run_until_idle needs a clock with advance_to(), e.g. VirtualClock")
        ran = 0
        while self._queue and (limit is None or ran < limit):
            self.clock.advance_to(self._queue[0][0])
            _, _, fn, args = heapq.heappop(self._queue)
            fn(*args)
            ran += 1
        if self._queue:
            logger.debug("Stopped after %d tasks with %d still queued", ran, len(self._queue))
        return ran

    def clear(self):
        self._queue.clear()
