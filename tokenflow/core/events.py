"""
Trace event model.

Trace events are immutable once produced by the parser or the case filter.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class TraceEvent:
    """
    Immutable trace event.

    Fields:
        step: 0-based position in the timestamp-ordered trace
        activity: Activity name, matched against transition labels
        data: Every field of the log row/record as a string
              (always contains "activity" and "timestamp"). Stored as a
              read-only copy; full and filtered traces share it.
    """
    step: int
    activity: str
    data: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def timestamp(self) -> str:
        return self.data.get("timestamp", "")

    @property
    def case_id(self) -> Optional[str]:
        """Case identifier, or None when the field is absent or empty."""
        return self.data.get("case_id") or None
