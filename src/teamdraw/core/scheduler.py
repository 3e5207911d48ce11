"""Timed-task primitives used to drive the reveal sequence.

A scheduler hands out cancellable handles for ``schedule(delay, callback)``
and exposes its own monotonic ``now()`` so elapsed time is always measured on
the clock that fires the callbacks.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["AsyncioScheduler", "Handle", "ManualScheduler", "Scheduler"]


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now(self) -> float: ...

    def schedule(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class AsyncioScheduler:
    """Schedules on an asyncio loop; the running loop is used unless one is bound."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _active_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._active_loop().time()

    def schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._active_loop().call_later(max(0.0, delay), callback)


@dataclass(order=True)
class _ManualTask:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[_ManualTask] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def schedule(self, delay: float, callback: Callable[[], None]) -> _ManualTask:
        task = _ManualTask(due=self._now + max(0.0, delay), seq=next(self._counter), callback=callback)
        heapq.heappush(self._queue, task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every callback that falls due. Returns the number fired."""

        target = self._now + max(0.0, seconds)
        fired = 0
        while self._queue and self._queue[0].due <= target:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = max(self._now, task.due)
            task.callback()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, *, limit: int = 100_000) -> int:
        fired = 0
        while fired < limit:
            live = [task for task in self._queue if not task.cancelled]
            if not live:
                break
            task = min(live)
            fired += self.advance(task.due - self._now)
        return fired
