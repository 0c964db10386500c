"""
Per-case trace partitioning.

Steps are never renumbered: a filtered trace keeps the step each event got
in the full trace, and consumers index it positionally.
"""

import logging
from typing import List, Sequence, Tuple

from ..config import ALL_CASES
from ..core.events import TraceEvent

logger = logging.getLogger(__name__)


def case_ids(trace: Sequence[TraceEvent]) -> List[str]:
    """Distinct non-empty case_id values in first-seen order."""
    seen = {}
    for event in trace:
        cid = event.case_id
        if cid is not None and cid not in seen:
            seen[cid] = None
    return list(seen)


def filter_trace(trace: Sequence[TraceEvent], case_id: str = ALL_CASES) -> Tuple[TraceEvent, ...]:
    """
    Subsequence of the trace belonging to one case.

    Args:
        trace: Full, timestamp-ordered trace
        case_id: Case to keep, or ALL_CASES for the whole trace

    Returns:
        Matching events in their original order
    """
    if case_id == ALL_CASES:
        return tuple(trace)
    selected = tuple(e for e in trace if e.data.get("case_id") == case_id)
    if not selected:
        logger.warning("No trace event belongs to case %r", case_id)
    return selected
