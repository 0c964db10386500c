"""
Player: timed playback of a ReplayEngine.

At most one forward step is pending at any time. Every control input
cancels the pending step before it changes anything.
"""

import logging
from typing import Callable, Optional

from ..core.errors import ReplayError
from ..core.state import ReplaySnapshot
from .engine import ReplayEngine
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

Listener = Callable[[ReplaySnapshot], None]


class Player:
    """
    Cooperative play/pause loop.

    While the engine is playing, one advance() is scheduled interval_ms
    ahead; after it runs, the next one is scheduled. Playback stops at the
    end of the trace or on the first firing error.

    Usage:
        player = Player(engine, AsyncioScheduler(), interval_ms=500)
        player.play()
    """

    def __init__(
        self,
        engine: ReplayEngine,
        scheduler: Scheduler,
        interval_ms: int,
        on_step: Optional[Listener] = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        self.engine = engine
        self.scheduler = scheduler
        self.interval_ms = interval_ms
        self.on_step = on_step
        self._pending: Optional[TimerHandle] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def cancel(self) -> None:
        """Drop the pending step, if any, without touching the engine."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule(self) -> None:
        self.cancel()
        self._pending = self.scheduler.call_later(self.interval_ms, self._tick)

    def play(self) -> ReplaySnapshot:
        """Start playback; a no-op stop when there is nothing left to replay."""
        self.cancel()
        if self.engine.trace is None or self.engine.finished:
            self.engine.playing = False
            return self.engine.snapshot()
        self.engine.playing = True
        logger.info("Playback started at step %d", self.engine.current_step)
        self._schedule()
        return self.engine.snapshot()

    def pause(self) -> ReplaySnapshot:
        self.cancel()
        if self.engine.playing:
            logger.info("Playback paused at step %d", self.engine.current_step)
        self.engine.playing = False
        return self.engine.snapshot()

    def toggle(self) -> ReplaySnapshot:
        return self.pause() if self.engine.playing else self.play()

    def set_interval(self, interval_ms: int) -> None:
        """Change the playback interval, restarting the pending countdown."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        self.cancel()
        self.interval_ms = interval_ms
        if self.engine.playing:
            self._schedule()

    def _tick(self) -> None:
        self._pending = None
        if not self.engine.playing:
            return
        try:
            snapshot = self.engine.advance()
        except ReplayError:
            # engine has already recorded the error and stopped
            snapshot = self.engine.snapshot()
        else:
            if self.engine.finished:
                self.engine.playing = False
                logger.info("Playback reached the end of the trace")
                snapshot = self.engine.snapshot()
            elif self.engine.playing:
                self._schedule()
        if self.on_step is not None:
            self.on_step(snapshot)
