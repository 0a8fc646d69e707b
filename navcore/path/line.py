"""
Straight-line path with linearly interpolated heading.
"""

from navcore.geometry import Pose2d, norm, norm_delta, normalized, vec
from navcore.path.base import Path


class LinePath(Path):
    """
    Path from start to end along a straight line.

    Heading is interpolated linearly (shortest way round) so that holonomic
    followers can turn while translating.
    """

    def __init__(self, start: Pose2d, end: Pose2d):
        delta = end.vec() - start.vec()
        self._length = norm(delta)
        if self._length <= 0.0:
            raise ValueError("LinePath requires distinct start and end points")
        self._start = start
        self._tangent = normalized(delta)
        self._heading_delta = norm_delta(end.heading - start.heading)

    def length(self) -> float:
        return self._length

    def get(self, s: float) -> Pose2d:
        fraction = s / self._length
        point = self._start.vec() + self._tangent * s
        return Pose2d.from_vec(point, self._start.heading + self._heading_delta * fraction)

    def deriv(self, s: float) -> Pose2d:
        return Pose2d.from_vec(self._tangent, self._heading_delta / self._length)

    def second_deriv(self, s: float) -> Pose2d:
        return Pose2d.from_vec(vec(), 0.0)

    def curvature(self, s: float) -> float:
        return 0.0
