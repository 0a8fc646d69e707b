"""
Paths chained end to end, and the rounded-rectangle loop used for obstacles.
"""

import math
from bisect import bisect_right
from collections.abc import Iterable

from numpy.typing import NDArray

from navcore.geometry import Pose2d, angle_of, norm, vec
from navcore.path.arc import ArcPath
from navcore.path.base import Path
from navcore.path.line import LinePath
from navcore.utils.mathutil import clamp


class CompositePath(Path):
    """
    Concatenation of paths, each assumed to start where the previous one ends.

    Displacement runs across the pieces in order; at a shared boundary the
    later piece wins.
    """

    def __init__(self, paths: Iterable[Path]):
        self.paths = list(paths)
        if not self.paths:
            raise ValueError("CompositePath requires at least one path")
        self._offsets: list[float] = []
        total = 0.0
        for path in self.paths:
            self._offsets.append(total)
            total += path.length()
        self._length = total

    def _locate(self, s: float) -> tuple[Path, float]:
        s = clamp(s, 0.0, self._length)
        index = min(bisect_right(self._offsets, s) - 1, len(self.paths) - 1)
        return self.paths[index], s - self._offsets[index]

    def length(self) -> float:
        return self._length

    def get(self, s: float) -> Pose2d:
        path, local = self._locate(s)
        return path.get(local)

    def deriv(self, s: float) -> Pose2d:
        path, local = self._locate(s)
        return path.deriv(local)

    def second_deriv(self, s: float) -> Pose2d:
        path, local = self._locate(s)
        return path.second_deriv(local)

    def curvature(self, s: float) -> float:
        path, local = self._locate(s)
        return path.curvature(local)


def _edge(start: NDArray, end: NDArray) -> LinePath:
    heading = angle_of(end - start)
    return LinePath(Pose2d.from_vec(start, heading), Pose2d.from_vec(end, heading))


def create_recticircle(center: NDArray, dimensions: NDArray, radius: float) -> CompositePath:
    """
    Closed counter-clockwise loop around a dimensions-sized rectangle at
    center, offset outwards by radius (so corners are quarter circles).

    Starts and ends at the bottom of the right edge. Zero dimensions drop the
    corresponding straight edges, so dimensions (0, 0) give a plain circle.
    """
    if radius <= 0.0:
        raise ValueError(f"radius must be positive, got {radius}")
    if dimensions[0] < 0.0 or dimensions[1] < 0.0:
        raise ValueError(f"dimensions must be non-negative, got {dimensions}")
    rx = dimensions[0] / 2
    ry = dimensions[1] / 2

    corners = [vec(rx, ry), vec(-rx, ry), vec(-rx, -ry), vec(rx, -ry)]
    edges = [
        (vec(rx + radius, -ry), vec(rx + radius, ry)),
        (vec(rx, ry + radius), vec(-rx, ry + radius)),
        (vec(-rx - radius, ry), vec(-rx - radius, -ry)),
        (vec(-rx, -ry - radius), vec(rx, -ry - radius)),
    ]

    pieces: list[Path] = []
    for i, ((start, end), corner) in enumerate(zip(edges, corners)):
        if norm(end - start) > 0.0:
            pieces.append(_edge(center + start, center + end))
        pieces.append(ArcPath(center + corner, radius, i * math.pi / 2, math.pi / 2))
    return CompositePath(pieces)
