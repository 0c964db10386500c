"""
Token state and replay snapshots.

TokenState is a fixed table indexed by the place slots of an IOIndex.
Both types are immutable; every step produces a new instance.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class TokenState:
    """
    Immutable token table.

    Fields:
        slots: place id -> slot (shared with the IOIndex it was built from)
        counts: token count per slot

    Reading an unknown place id yields zero.
    """
    slots: Dict[str, int] = field(default_factory=dict)
    counts: Tuple[int, ...] = ()

    @staticmethod
    def from_counts(slots: Dict[str, int], counts: Dict[str, int]) -> "TokenState":
        table = [0] * len(slots)
        for place_id, slot in slots.items():
            table[slot] = counts.get(place_id, 0)
        return TokenState(slots=slots, counts=tuple(table))

    def get(self, place_id: str) -> int:
        slot = self.slots.get(place_id)
        if slot is None:
            return 0
        return self.counts[slot]

    def with_counts(self, counts: Iterable[int]) -> "TokenState":
        return TokenState(slots=self.slots, counts=tuple(counts))

    def total(self) -> int:
        return sum(self.counts)

    def to_dict(self) -> Dict[str, int]:
        return {place_id: self.counts[slot] for place_id, slot in self.slots.items()}


@dataclass(frozen=True)
class ReplaySnapshot:
    """
    What an observer sees of the replay engine between two steps.

    Fields:
        tokens: Current token table
        current_step: Number of events fired from the active trace
        trace_length: Length of the active trace (0 when none is loaded)
        playing: Whether playback is running
        last_error: Message of the current error, if any
        active_transition_id: Transition matched to the event at current_step
    """
    tokens: TokenState
    current_step: int
    trace_length: int
    playing: bool
    last_error: Optional[str] = None
    active_transition_id: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.current_step >= self.trace_length
