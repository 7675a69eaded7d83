"""Single-threaded timer queues that drive the simulation loop.

The loop only ever needs ``call_later`` and ``cancel``: it arms one timer per
tick and re-arms after the tick body returns, so ticks never overlap.
:class:`ManualScheduler` advances a virtual clock and is what tests use;
:class:`BlockingScheduler` sleeps on the wall clock and backs the CLI.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger("surface_descent")


@dataclass(order=True)
class TimerHandle:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class Scheduler(ABC):
    """Timer queue interface consumed by :class:`runtime.simulation.SimulationLoop`."""

    def __init__(self) -> None:
        self._queue: List[TimerHandle] = []
        self._seq = itertools.count()

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""

    @abstractmethod
    def run(self, max_calls: Optional[int] = None) -> int:
        """Fire due timers until the queue drains or ``max_calls`` have run."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now() + max(0.0, float(delay_ms)), next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancelled = True

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    def pending(self) -> int:
        """Number of live timers."""
        return sum(1 for h in self._queue if not h.cancelled)

    def next_due(self) -> Optional[float]:
        self._discard_cancelled()
        return self._queue[0].due if self._queue else None

    def _fire_next(self) -> None:
        handle = heapq.heappop(self._queue)
        handle.cancelled = True
        handle.callback()


class ManualScheduler(Scheduler):
    """Deterministic scheduler with a virtual clock."""

    def __init__(self, start_ms: float = 0.0) -> None:
        super().__init__()
        self._now = float(start_ms)

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> int:
        """Move the clock forward by ``ms`` firing every timer that comes due.

        Timers armed by a callback fire within the same call if they fall due
        before the new time. Returns the number of callbacks run.
        """
        target = self._now + float(ms)
        fired = 0
        while True:
            due = self.next_due()
            if due is None or due > target:
                break
            self._now = max(self._now, due)
            self._fire_next()
            fired += 1
        self._now = target
        return fired

    def run(self, max_calls: Optional[int] = 10_000) -> int:
        """Fire timers in due order until none remain or ``max_calls`` is hit."""
        fired = 0
        while max_calls is None or fired < max_calls:
            due = self.next_due()
            if due is None:
                break
            self._now = max(self._now, due)
            self._fire_next()
            fired += 1
        return fired


class BlockingScheduler(Scheduler):
    """Wall-clock scheduler that sleeps until the next timer is due."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__()
        self._clock = clock
        self._sleep = sleep

    def now(self) -> float:
        return self._clock() * 1000.0

    def run(self, max_calls: Optional[int] = None) -> int:
        """Block until no timers remain or ``max_calls`` callbacks have run."""
        fired = 0
        while max_calls is None or fired < max_calls:
            due = self.next_due()
            if due is None:
                break
            wait_ms = due - self.now()
            if wait_ms > 0:
                self._sleep(wait_ms / 1000.0)
            self._fire_next()
            fired += 1
        logger.debug("Scheduler ran %d callbacks.", fired)
        return fired


__all__ = ["BlockingScheduler", "ManualScheduler", "Scheduler", "TimerHandle"]
