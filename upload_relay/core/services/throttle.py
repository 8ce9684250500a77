"""
Time-based admission policy for progress notifications.
"""

import time
from typing import Callable

Clock = Callable[[], float]
"""Returns the current time in milliseconds."""

DEFAULT_RATE_LIMIT_INTERVAL_MS = 200


def now_ms() -> float:
    """Wall-clock time in milliseconds."""
    return time.time() * 1000.0


def can_execute(now: float, last_execution: float, interval_ms: float) -> bool:
    """
    Decide whether enough time has elapsed since the last execution.

    Args:
        now: Current time in milliseconds
        last_execution: Time of the last execution in milliseconds
        interval_ms: Minimum interval between executions

    Returns:
        True if ``now - last_execution >= interval_ms``
    """
    return (now - last_execution) >= interval_ms
