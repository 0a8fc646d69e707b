"""
Motion profile composed of constant-jerk segments, plus the builder used to
assemble profiles while keeping them continuous.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from navcore.config import DISTANCE_SEARCH_ITERATIONS
from navcore.profile.motion_state import MotionSegment, MotionState
from navcore.utils.mathutil import epsilon_equals


class MotionProfile:
    """
    Ordered, non-empty sequence of motion segments.

    Adjacent segments are continuous: segment i's end state matches segment
    i+1's start state in position and velocity.
    """

    def __init__(self, segments: Iterable[MotionSegment]):
        self.segments: list[MotionSegment] = list(segments)
        if not self.segments:
            raise ValueError("A MotionProfile cannot be constructed without any MotionSegments.")

    def get(self, t: float) -> MotionState:
        """Returns the motion state at time t (clamped to the profile span)."""
        if t < 0.0:
            return self.segments[0].start
        remaining = t
        for segment in self.segments:
            if remaining <= segment.dt:
                return segment.at(remaining)
            remaining -= segment.dt
        return self.segments[-1].end()

    def __getitem__(self, t: float) -> MotionState:
        return self.get(t)

    def get_by_distance(self, s: float) -> MotionState:
        """
        Bisection search for the state whose position is s. Only correct when
        position is monotonically increasing.
        """
        t_lo = 0.0
        t_hi = self.duration()
        for _ in range(DISTANCE_SEARCH_ITERATIONS):
            t_mid = 0.5 * (t_lo + t_hi)
            if self.get(t_mid).x > s:
                t_hi = t_mid
            else:
                t_lo = t_mid
            if epsilon_equals(t_lo, t_hi):
                break
        return self.get(0.5 * (t_lo + t_hi))

    def duration(self) -> float:
        return sum(segment.dt for segment in self.segments)

    def start(self) -> MotionState:
        return self.segments[0].start

    def end(self) -> MotionState:
        return self.segments[-1].end()

    def reversed(self) -> MotionProfile:
        """Time-reversed profile: starts at this profile's end and retraces it."""
        return MotionProfile(segment.reversed() for segment in reversed(self.segments))

    def flipped(self) -> MotionProfile:
        """Sign-negated profile."""
        return MotionProfile(segment.flipped() for segment in self.segments)

    def __add__(self, other: MotionProfile) -> MotionProfile:
        """Concatenates other onto this profile, continuing from this profile's end."""
        return MotionProfileBuilder(self.start()).append_profile(self).append_profile(other).build()

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[MotionSegment]:
        return iter(self.segments)

    def __repr__(self) -> str:
        return "[" + ",".join(repr(segment) for segment in self.segments) + "]"


class MotionProfileBuilder:
    """
    Easy-to-use builder for motion profiles composed of constant jerk or
    constant acceleration segments. Each appended segment starts from the
    previous segment's end state.
    """

    def __init__(self, start: MotionState):
        self.current_state = start
        self.segments: list[MotionSegment] = []

    def append_jerk_control(self, jerk: float, dt: float) -> MotionProfileBuilder:
        """Appends a constant-jerk segment of duration dt."""
        state = self.current_state
        segment = MotionSegment(MotionState(state.x, state.v, state.a, jerk), dt)
        self.segments.append(segment)
        self.current_state = segment.end()
        return self

    def append_acceleration_control(self, accel: float, dt: float) -> MotionProfileBuilder:
        """Appends a constant-acceleration segment of duration dt."""
        state = self.current_state
        segment = MotionSegment(MotionState(state.x, state.v, accel, 0.0), dt)
        self.segments.append(segment)
        self.current_state = segment.end()
        return self

    def append_profile(self, profile: MotionProfile) -> MotionProfileBuilder:
        """Re-walks the controls of profile from the current state."""
        for segment in profile.segments:
            if epsilon_equals(segment.start.j, 0.0):
                self.append_acceleration_control(segment.start.a, segment.dt)
            else:
                self.append_jerk_control(segment.start.j, segment.dt)
        return self

    def build(self) -> MotionProfile:
        return MotionProfile(self.segments)
