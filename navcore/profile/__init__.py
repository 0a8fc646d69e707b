from .constraints import (
    AccelerationConstraint,
    ConstantAccelerationConstraint,
    ConstantVelocityConstraint,
    MinAccelerationConstraint,
    MinVelocityConstraint,
    VelocityConstraint,
)
from .generator import generate_motion_profile, generate_simple_motion_profile
from .motion_profile import MotionProfile, MotionProfileBuilder
from .motion_state import MotionSegment, MotionState

__all__ = [
    "MotionState",
    "MotionSegment",
    "MotionProfile",
    "MotionProfileBuilder",
    "VelocityConstraint",
    "AccelerationConstraint",
    "ConstantVelocityConstraint",
    "ConstantAccelerationConstraint",
    "MinVelocityConstraint",
    "MinAccelerationConstraint",
    "generate_simple_motion_profile",
    "generate_motion_profile",
]
