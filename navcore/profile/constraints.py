"""
Velocity and acceleration constraint contracts for dynamic motion profiles.

Constraints are pure functions of the sampled displacement; any callable with
the matching signature is accepted wherever a constraint is expected.
"""

import math
from collections.abc import Iterable
from typing import Protocol

from navcore.utils.errors import UnsatisfiableConstraintError


class VelocityConstraint(Protocol):
    def __call__(self, s: float, ds: float) -> float:
        """Returns the maximum profile velocity at displacement s with step ds."""
        ...


class AccelerationConstraint(Protocol):
    def __call__(self, s: float, ds: float, last_vel: float) -> float:
        """
        Returns the maximum profile velocity reachable at displacement s.

        Args:
            s: the current displacement
            ds: the change in displacement from the last profile velocity
            last_vel: the last profile velocity
        """
        ...


class ConstantVelocityConstraint:
    """Constant velocity ceiling."""

    def __init__(self, max_vel: float):
        if max_vel < 0.0:
            raise ValueError(f"max_vel must be non-negative, got {max_vel}")
        self.max_vel = float(max_vel)

    def __call__(self, s: float, ds: float) -> float:
        return self.max_vel


class ConstantAccelerationConstraint:
    """Constant acceleration limit: v_next = sqrt(v^2 + 2*a*|ds|)."""

    def __init__(self, max_accel: float):
        if max_accel <= 0.0:
            raise ValueError(f"max_accel must be positive, got {max_accel}")
        self.max_accel = float(max_accel)

    def __call__(self, s: float, ds: float, last_vel: float) -> float:
        return math.sqrt(last_vel * last_vel + 2 * self.max_accel * abs(ds))


class MinVelocityConstraint:
    """Composite constraint representing the minimum of its constituent velocity constraints."""

    def __init__(self, constraints: Iterable[VelocityConstraint]):
        self.constraints = list(constraints)
        if not self.constraints:
            raise ValueError("MinVelocityConstraint requires at least one constraint")

    def __call__(self, s: float, ds: float) -> float:
        return min(constraint(s, ds) for constraint in self.constraints)


class MinAccelerationConstraint:
    """Composite constraint representing the minimum of its constituent acceleration constraints."""

    def __init__(self, constraints: Iterable[AccelerationConstraint]):
        self.constraints = list(constraints)
        if not self.constraints:
            raise ValueError("MinAccelerationConstraint requires at least one constraint")

    def __call__(self, s: float, ds: float, last_vel: float) -> float:
        result = min(constraint(s, ds, last_vel) for constraint in self.constraints)
        if math.isnan(result) or result < 0.0:
            raise UnsatisfiableConstraintError(
                f"acceleration constraints have no common bound at s={s:.4f}", displacement=s
            )
        return result
