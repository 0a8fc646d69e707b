"""
Kinematic state and constant-jerk segment primitives.
"""

from __future__ import annotations

from dataclasses import dataclass

from navcore.utils.mathutil import epsilon_equals


@dataclass(frozen=True)
class MotionState:
    """
    Position, velocity, acceleration and jerk on a single scalar axis.

    Evaluating at a forward time offset uses the closed-form constant-jerk
    polynomial.
    """

    x: float
    v: float
    a: float = 0.0
    j: float = 0.0

    def at(self, t: float) -> MotionState:
        """Returns the state t seconds later, assuming constant jerk."""
        return MotionState(
            self.x + self.v * t + self.a / 2 * t**2 + self.j / 6 * t**3,
            self.v + self.a * t + self.j / 2 * t**2,
            self.a + self.j * t,
            self.j,
        )

    def __getitem__(self, t: float) -> MotionState:
        return self.at(t)

    def flipped(self) -> MotionState:
        """Negated copy of the state."""
        return MotionState(-self.x, -self.v, -self.a, -self.j)

    def stationary(self) -> MotionState:
        """Same position with velocity, acceleration and jerk zeroed."""
        return MotionState(self.x, 0.0, 0.0, 0.0)

    def is_close(self, other: MotionState, eps: float = 1e-6) -> bool:
        return (
            epsilon_equals(self.x, other.x, eps)
            and epsilon_equals(self.v, other.v, eps)
            and epsilon_equals(self.a, other.a, eps)
        )

    def __repr__(self) -> str:
        return f"(x={self.x:.3f}, v={self.v:.3f}, a={self.a:.3f}, j={self.j:.3f})"


@dataclass(frozen=True)
class MotionSegment:
    """
    Segment of a motion profile with constant jerk.

    Args:
        start: start motion state
        dt: segment duration
    """

    start: MotionState
    dt: float

    def at(self, t: float) -> MotionState:
        return self.start.at(t)

    def __getitem__(self, t: float) -> MotionState:
        return self.start.at(t)

    def end(self) -> MotionState:
        return self.start.at(self.dt)

    def reversed(self) -> MotionSegment:
        """
        Time-reversed segment: starts where this one ends and retraces it.

        Velocity and jerk change sign under time reversal, acceleration does not.
        """
        end = self.end()
        return MotionSegment(MotionState(end.x, -end.v, end.a, -end.j), self.dt)

    def flipped(self) -> MotionSegment:
        return MotionSegment(self.start.flipped(), self.dt)

    def __repr__(self) -> str:
        return f"({self.start!r}, {self.dt:.3f})"
