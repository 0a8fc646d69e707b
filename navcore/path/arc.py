"""
Circular arc path traversed counter-clockwise.
"""

import math

from numpy.typing import NDArray

from navcore.geometry import Pose2d, from_angle, norm_delta, perpendicular
from navcore.path.base import Path


class ArcPath(Path):
    """
    Arc of a circle, counter-clockwise from start_angle through sweep radians.

    Heading follows the tangent. A sweep of 2*pi gives a closed circle.

    Args:
        center: circle center
        radius: circle radius (positive)
        start_angle: angle of the first point, measured from the center
        sweep: swept angle (positive)
    """

    def __init__(self, center: NDArray, radius: float, start_angle: float, sweep: float):
        if radius <= 0.0:
            raise ValueError(f"radius must be positive, got {radius}")
        if sweep <= 0.0:
            raise ValueError(f"sweep must be positive, got {sweep}")
        self.center = center
        self.radius = radius
        self.start_angle = start_angle
        self.sweep = sweep

    def _angle(self, s: float) -> float:
        return self.start_angle + s / self.radius

    def length(self) -> float:
        return self.radius * self.sweep

    def get(self, s: float) -> Pose2d:
        theta = self._angle(s)
        return Pose2d.from_vec(self.center + from_angle(theta) * self.radius, norm_delta(theta + math.pi / 2))

    def deriv(self, s: float) -> Pose2d:
        return Pose2d.from_vec(perpendicular(from_angle(self._angle(s))), 1.0 / self.radius)

    def second_deriv(self, s: float) -> Pose2d:
        return Pose2d.from_vec(-from_angle(self._angle(s)) / self.radius, 0.0)

    def curvature(self, s: float) -> float:
        return 1.0 / self.radius
