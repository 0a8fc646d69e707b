"""
navcore: motion profiling, guiding vector fields and path/trajectory
followers for mobile robots.

Key components:
- generate_simple_motion_profile / generate_motion_profile: 1-D profiles with
  constant (trapezoidal, S-curve) or displacement-dependent limits
- PathGVF, CompositeGVF, GVFObstacle: guiding vector fields with obstacle avoidance
- HolonomicGVFFollower, GVFFollower, HolonomicPIDVAFollower, TankPIDVAFollower,
  RamseteFollower: per-tick controllers producing a DriveSignal
"""

from ._version import __version__
from .followers import (
    DriveSignal,
    GVFFollower,
    HolonomicGVFFollower,
    HolonomicPIDVAFollower,
    PathFollower,
    RamseteFollower,
    TankPIDVAFollower,
    TrajectoryFollower,
)
from .geometry import Pose2d
from .gvf import CircularGVF, ClosedPathGVF, CompositeGVF, GuidingVectorField, GVFObstacle, PathGVF
from .path import ArcPath, CompositePath, LinePath, Path, create_recticircle
from .profile import (
    MotionProfile,
    MotionProfileBuilder,
    MotionSegment,
    MotionState,
    generate_motion_profile,
    generate_simple_motion_profile,
)
from .trajectory import Trajectory

__all__ = [
    "__version__",
    "Pose2d",
    "MotionState",
    "MotionSegment",
    "MotionProfile",
    "MotionProfileBuilder",
    "generate_simple_motion_profile",
    "generate_motion_profile",
    "Path",
    "LinePath",
    "ArcPath",
    "CompositePath",
    "create_recticircle",
    "Trajectory",
    "GuidingVectorField",
    "PathGVF",
    "CircularGVF",
    "ClosedPathGVF",
    "GVFObstacle",
    "CompositeGVF",
    "DriveSignal",
    "PathFollower",
    "TrajectoryFollower",
    "HolonomicPIDVAFollower",
    "TankPIDVAFollower",
    "RamseteFollower",
    "HolonomicGVFFollower",
    "GVFFollower",
]
