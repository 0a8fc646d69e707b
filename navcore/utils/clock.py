"""
Injectable monotonic time source used by followers and PID controllers.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Returns seconds since an arbitrary but consistent origin."""

    def seconds(self) -> float: ...


class SystemClock:
    """Clock backed by time.monotonic()."""

    def seconds(self) -> float:
        return time.monotonic()


SYSTEM_CLOCK = SystemClock()
