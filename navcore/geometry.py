"""
Planar geometry primitives.

Points and free vectors are plain numpy arrays of shape (2,). Poses carry a
heading in radians and are immutable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from spatialmath.base import rot2, wrap_mpi_pi

from navcore.config import EPSILON


def vec(x: float = 0.0, y: float = 0.0) -> NDArray:
    return np.array([x, y], dtype=float)


def norm(v: NDArray) -> float:
    return float(np.hypot(v[0], v[1]))


def angle_of(v: NDArray) -> float:
    """Direction of v in radians, in (-pi, pi]."""
    return math.atan2(v[1], v[0])


def from_angle(theta: float) -> NDArray:
    """Unit vector pointing along theta."""
    return vec(math.cos(theta), math.sin(theta))


def rotated(v: NDArray, theta: float) -> NDArray:
    return rot2(theta) @ np.asarray(v, dtype=float)


def cross(a: NDArray, b: NDArray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def dot(a: NDArray, b: NDArray) -> float:
    return float(a[0] * b[0] + a[1] * b[1])


def perpendicular(v: NDArray) -> NDArray:
    """v rotated a quarter turn counter-clockwise."""
    return vec(-v[1], v[0])


def normalized(v: NDArray) -> NDArray:
    n = norm(v)
    if n < EPSILON:
        return vec()
    return np.asarray(v, dtype=float) / n


def vectors_close(a: NDArray, b: NDArray, eps: float = EPSILON) -> bool:
    return abs(a[0] - b[0]) < eps and abs(a[1] - b[1]) < eps


def norm_delta(theta: float) -> float:
    """Normalizes an angle difference to [-pi, pi)."""
    return float(wrap_mpi_pi(theta))


def norm_angle(theta: float) -> float:
    """Normalizes an angle to [0, 2*pi)."""
    return theta % (2 * math.pi)


@dataclass(frozen=True)
class Pose2d:
    """Position and heading (radians) in a planar frame."""

    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    @classmethod
    def from_vec(cls, v: NDArray, heading: float = 0.0) -> Pose2d:
        return cls(float(v[0]), float(v[1]), float(heading))

    def vec(self) -> NDArray:
        return vec(self.x, self.y)

    def heading_vec(self) -> NDArray:
        return from_angle(self.heading)

    def __add__(self, other: Pose2d) -> Pose2d:
        return Pose2d(self.x + other.x, self.y + other.y, self.heading + other.heading)

    def __sub__(self, other: Pose2d) -> Pose2d:
        return Pose2d(self.x - other.x, self.y - other.y, self.heading - other.heading)

    def __mul__(self, scalar: float) -> Pose2d:
        return Pose2d(self.x * scalar, self.y * scalar, self.heading * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Pose2d:
        return Pose2d(self.x / scalar, self.y / scalar, self.heading / scalar)

    def __neg__(self) -> Pose2d:
        return Pose2d(-self.x, -self.y, -self.heading)

    def is_close(self, other: Pose2d, eps: float = EPSILON) -> bool:
        return (
            abs(self.x - other.x) < eps
            and abs(self.y - other.y) < eps
            and abs(norm_delta(self.heading - other.heading)) < eps
        )

    def __repr__(self) -> str:
        return f"Pose2d(x={self.x:.3f}, y={self.y:.3f}, heading={math.degrees(self.heading):.3f}°)"
