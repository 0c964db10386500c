"""
One-shot timers for cooperative playback.

A scheduler runs a callback once after a delay and hands back a handle whose
cancel() guarantees the callback will not run.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional

Callback = Callable[[], None]


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        ...


class Scheduler(ABC):
    """
    Abstract timer source.

    Implementations must never run a cancelled callback and must run
    callbacks on the thread that owns the engine.
    """

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle:
        """
        Schedule callback to run once after delay_ms milliseconds.
        """
        ...


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Uses the running loop when none is given, so it must be called from a
    coroutine or loop callback.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop.call_later(delay_ms / 1000.0, callback))


@dataclass(eq=False)
class _ManualTimer(TimerHandle):
    due: int
    callback: Callback
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by hand.

    Time only moves when advance() is called, so replay playback can be
    stepped exactly in tests and batch runs.
    """
    now: int = 0
    _timers: List[_ManualTimer] = field(default_factory=list)

    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle:
        timer = _ManualTimer(due=self.now + delay_ms, callback=callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, ms: int) -> int:
        """
        Move time forward by ms and run every callback that falls due.

        Callbacks scheduled by a running callback fire in the same call if
        they fall due before the new time.

        Returns:
            Number of callbacks run
        """
        target = self.now + ms
        ran = 0
        while True:
            due = [t for t in self._timers if not t.cancelled and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._timers.remove(timer)
            self.now = timer.due
            timer.callback()
            ran += 1
        self._timers = [t for t in self._timers if not t.cancelled]
        self.now = target
        return ran
