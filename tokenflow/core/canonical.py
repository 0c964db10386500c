"""
Canonical JSON serialization.

Model documents and snapshots are written through these functions so the
same net always produces the same text.
"""

import json
from typing import Any, Optional


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested dict/list to canonical form.

    Rules:
    - dict keys sorted alphabetically
    - tuples converted to lists
    - list order preserved (places/transitions/arcs keep declaration order)
    """
    if isinstance(obj, dict):
        return {k: canonicalize(obj[k]) for k in sorted(obj.keys())}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def canonical_json_str(obj: Any, indent: Optional[int] = None) -> str:
    """
    Deterministic JSON string.

    Compact by default; pass indent for a human-readable export.
    """
    canon = canonicalize(obj)
    if indent is None:
        return json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(canon, sort_keys=True, indent=indent, ensure_ascii=False)
