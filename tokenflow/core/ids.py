"""
Fresh identifier generation.

Identifiers are deterministic: the same net always yields the same next id.
"""

from typing import Iterable


def next_id(prefix: str, count: int, taken: Iterable[str]) -> str:
    """
    Return the first "<prefix><n>" with n >= count + 1 that is not taken.

    Args:
        prefix: "p", "t" or "a"
        count: Number of existing nodes/arcs of that kind
        taken: Every id already used in the net

    Example:
        next_id("p", 2, ["p1", "p2", "p3"]) -> "p4"
    """
    used = set(taken)
    n = count + 1
    while f"{prefix}{n}" in used:
        n += 1
    return f"{prefix}{n}"
