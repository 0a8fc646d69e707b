"""
Time-parameterized trajectory: a path driven along by a displacement profile.
"""

from dataclasses import dataclass

from navcore.geometry import Pose2d
from navcore.path.base import Path
from navcore.profile.motion_profile import MotionProfile


@dataclass(frozen=True)
class Trajectory:
    """
    Pairs a path with a motion profile over its displacement.

    Args:
        path: the geometric path
        profile: displacement profile, expected to run from 0 to path.length()
    """

    path: Path
    profile: MotionProfile

    def duration(self) -> float:
        return self.profile.duration()

    def length(self) -> float:
        return self.path.length()

    def distance(self, t: float) -> float:
        """Displacement along the path at time t."""
        return self.profile[t].x

    def get(self, t: float) -> Pose2d:
        return self.path.get(self.profile[t].x)

    def __getitem__(self, t: float) -> Pose2d:
        return self.get(t)

    def velocity(self, t: float) -> Pose2d:
        """Field-frame pose velocity at time t."""
        state = self.profile[t]
        return self.path.deriv(state.x) * state.v

    def acceleration(self, t: float) -> Pose2d:
        """Field-frame pose acceleration at time t."""
        state = self.profile[t]
        return self.path.second_deriv(state.x) * (state.v * state.v) + self.path.deriv(state.x) * state.a

    def start(self) -> Pose2d:
        return self.get(0.0)

    def end(self) -> Pose2d:
        return self.get(self.duration())
