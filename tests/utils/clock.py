"""
Deterministic clock for follower and PID tests.
"""


class ManualClock:
    """Clock whose time only moves when advance() is called."""

    def __init__(self, start: float = 0.0):
        self.current_time = start

    def seconds(self) -> float:
        return self.current_time

    def advance(self, seconds: float) -> None:
        """Advance the clock by the specified number of seconds."""
        self.current_time += seconds
