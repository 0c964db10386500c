"""
Replay of traces against a net.

Forward and backward firing is done by ReplayEngine; Player drives timed
playback through a Scheduler.
"""

from .engine import ReplayEngine
from .playback import Player
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, TimerHandle

__all__ = [
    "ReplayEngine",
    "Player",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "TimerHandle",
]
