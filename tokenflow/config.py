"""
Engine configuration.

Environment Variables:
    TOKENFLOW_INTERVAL_MS: Playback interval in milliseconds - default: 500
    TOKENFLOW_CLAMP_REVERSE: Floor places at zero on backward steps (true/false) - default: false
    TOKENFLOW_START_LABEL: Label of the start place, case-insensitive - default: start
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional

ALL_CASES = "all"

# Playback presets: speed name -> interval in milliseconds
SPEEDS: Dict[str, int] = {
    "0.25x": 2000,
    "0.5x": 1000,
    "1x": 500,
    "2x": 250,
    "4x": 125,
}
DEFAULT_SPEED = "1x"


def speed_interval(name: str) -> int:
    """
    Resolve a speed preset to its interval.

    Raises:
        ValueError: If name is not a preset
    """
    try:
        return SPEEDS[name]
    except KeyError:
        raise ValueError(f"Unknown speed {name!r} (choose from {', '.join(SPEEDS)})") from None


def _env_int(key: str) -> Optional[int]:
    val = os.getenv(key)
    if not val:
        return None
    try:
        parsed = int(val)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _env_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineConfig:
    """
    Replay engine settings.

    Fields:
        interval_ms: Delay between two scheduled forward steps while playing
        clamp_reverse_underflow: On a backward step, floor an output place at
            zero (with a warning) instead of raising TokenUnderflowError
        start_label: Label marking the place seeded from the trace's cases
    """
    interval_ms: int = SPEEDS[DEFAULT_SPEED]
    clamp_reverse_underflow: bool = False
    start_label: str = "start"

    @staticmethod
    def from_env() -> "EngineConfig":
        return EngineConfig(
            interval_ms=_env_int("TOKENFLOW_INTERVAL_MS") or SPEEDS[DEFAULT_SPEED],
            clamp_reverse_underflow=_env_bool("TOKENFLOW_CLAMP_REVERSE", False),
            start_label=os.getenv("TOKENFLOW_START_LABEL", "start").strip() or "start",
        )
