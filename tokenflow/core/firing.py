"""
Firing rule: pure token transitions.

These functions must be:
- Pure (no side effects, no I/O)
- Deterministic (same input -> same output)
- Exact inverses of each other on an enabled transition

Each occurrence of a place in the input/output slot tuples counts as one
unit arc, so parallel arcs consume and produce one token each.
"""

from collections import Counter
from typing import List, Tuple

from .index import TransitionIO
from .state import TokenState


def is_enabled(tokens: TokenState, io: TransitionIO) -> bool:
    """True iff every input place holds one token per arc entering the transition."""
    demand = Counter(io.input_slots)
    return all(tokens.counts[slot] >= n for slot, n in demand.items())


def missing_inputs(tokens: TokenState, io: TransitionIO) -> List[str]:
    """Input place ids lacking tokens, in arc order, each listed once."""
    demand = Counter(io.input_place_ids)
    return [pid for pid, n in demand.items() if tokens.get(pid) < n]


def fire(tokens: TokenState, io: TransitionIO) -> TokenState:
    """
    Consume one token per input arc and produce one per output arc.

    The caller checks enablement first.
    """
    counts = list(tokens.counts)
    for slot in io.input_slots:
        counts[slot] -= 1
    for slot in io.output_slots:
        counts[slot] += 1
    return tokens.with_counts(counts)


def unfire(tokens: TokenState, io: TransitionIO, clamp: bool = False) -> Tuple[TokenState, List[str]]:
    """
    Inverse of fire(): take back one token per output arc, return one per input arc.

    Args:
        tokens: Current token table
        io: Transition to reverse
        clamp: Floor output places at zero instead of going negative

    Returns:
        (new token table, ids of output places that lacked a token)
    """
    counts = list(tokens.counts)
    short: List[str] = []
    for pid, slot in zip(io.output_place_ids, io.output_slots):
        if counts[slot] < 1:
            if pid not in short:
                short.append(pid)
            if clamp:
                continue
        counts[slot] -= 1
    for slot in io.input_slots:
        counts[slot] += 1
    return tokens.with_counts(counts), short
