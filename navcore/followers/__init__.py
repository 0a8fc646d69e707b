from .base import DriveSignal, PathFollower, TrajectoryFollower
from .gvf import GVFFollower, HolonomicGVFFollower
from .pidva import HolonomicPIDVAFollower, TankPIDVAFollower
from .ramsete import RamseteFollower

__all__ = [
    "DriveSignal",
    "PathFollower",
    "TrajectoryFollower",
    "HolonomicPIDVAFollower",
    "TankPIDVAFollower",
    "RamseteFollower",
    "HolonomicGVFFollower",
    "GVFFollower",
]
