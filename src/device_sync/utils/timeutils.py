"""Time helpers shared across the sync engine."""

from __future__ import annotations

import time


def now_millis() -> int:
    """Return the current wall-clock time in milliseconds since the epoch.

    Sync messages carry millisecond timestamps (verified notices, identity
    trust changes), so this is the unit used throughout the engine.
    """
    return time.time_ns() // 1_000_000
