"""
Guiding vector fields for path following.

Implements the field of Yao et al., "Singularity-free guiding vector field
for robot navigation" (arXiv:1610.04391), eq. (9): the field at a point is the
path tangent at the nearest path point, minus the path normal scaled by the
(remapped) signed distance to the path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray

from navcore.geometry import cross, norm, normalized, vec, vectors_close
from navcore.path.base import Path
from navcore.utils.mathutil import epsilon_equals, sign

ErrorMap = Callable[[float], float]


def _identity(error: float) -> float:
    return error


class Query:
    """A point at which a vector field is evaluated."""

    def __init__(self, point: NDArray):
        self.point = np.asarray(point, dtype=float)

    def phi(self, target: NDArray, tangent: NDArray) -> Phi:
        return Phi(self, target, tangent)

    def __repr__(self) -> str:
        return f"GVFQuery({self.point[0]:.3f}, {self.point[1]:.3f})"


class Phi:
    """
    Result of projecting a query onto a reference curve.

    Attributes:
        query: the query this result belongs to
        target: the nearest point on the curve
        tangent: unit tangent to the curve at target
        path_to_point: vector from target to the query point
        orientation: +1 when the point is left of the tangent, -1 when right
        error: distance from the curve
        normal: tangent rotated a quarter turn counter-clockwise
    """

    def __init__(self, query: Query, target: NDArray, tangent: NDArray):
        self.query = query
        self.target = np.asarray(target, dtype=float)
        self.tangent = np.asarray(tangent, dtype=float)
        self.path_to_point = query.point - self.target
        self.orientation = -sign(cross(self.path_to_point, self.tangent))
        self.error = norm(self.path_to_point)
        self.normal = vec(-self.tangent[1], self.tangent[0])

    @property
    def point(self) -> NDArray:
        return self.query.point


class VectorField(ABC):
    @abstractmethod
    def get(self, x: float, y: float) -> NDArray:
        """Value of the field at (x, y)."""

    def __call__(self, point: NDArray) -> NDArray:
        return self.get(float(point[0]), float(point[1]))


class GuidingVectorField(VectorField):
    """
    Convergence field around a reference curve.

    Subclasses provide internal_get (projection onto their curve) and may set
    start_position / end_position anchors. Near an anchor the field points
    straight at it instead of along the curve, so a follower closes in on
    the endpoint rather than orbiting it.

    Args:
        kN: path normal weight; higher values converge more aggressively
        error_map_func: remap of the signed error (identity by default)
    """

    start_position: NDArray | None = None
    end_position: NDArray | None = None

    def __init__(self, kN: float, error_map_func: ErrorMap = _identity):
        self.kN = kN
        self.error_map_func = error_map_func

    @abstractmethod
    def internal_get(self, query: Query) -> Phi: ...

    def is_following_path(self, phi: Phi) -> bool:
        at_start = (
            self.start_position is not None
            and vectors_close(phi.target, self.start_position)
            and not epsilon_equals(phi.error, 0.0)
        )
        at_end = self.end_position is not None and vectors_close(phi.target, self.end_position)
        return not (at_start or at_end)

    def compute(self, phi: Phi) -> NDArray:
        if self.is_following_path(phi):
            signed_error = phi.orientation * phi.error
            return phi.tangent - phi.normal * self.kN * self.error_map_func(signed_error)
        if epsilon_equals(phi.error, 0.0):
            direction = vec()
        else:
            direction = phi.path_to_point / phi.error
        return direction * self.kN * self.error_map_func(-phi.error)

    def get(self, x: float, y: float) -> NDArray:
        return self.compute(self.internal_get(Query(vec(x, y))))


class FollowableGVF(GuidingVectorField):
    """Guiding vector field tied to a path, usable by GVF followers."""

    path: Path

    @property
    @abstractmethod
    def last_project_displacement(self) -> float:
        """Displacement of the last projection onto path."""

    @abstractmethod
    def reset(self) -> None:
        """Clears projection state before another follower uses this field."""


class PathGVF(FollowableGVF):
    """
    Guiding vector field that follows path.

    Projection is warm-started from the previous query, so call reset()
    before reusing the field from a different starting pose.
    """

    def __init__(self, path: Path, kN: float, error_map_func: ErrorMap = _identity):
        super().__init__(kN, error_map_func)
        self.path = path
        self.start_position = path.start().vec()
        self.end_position = path.end().vec()
        self._last_project_displacement = 0.0

    @property
    def last_project_displacement(self) -> float:
        return self._last_project_displacement

    def internal_get(self, query: Query) -> Phi:
        displacement = self.path.project(query.point, warm_start=self._last_project_displacement)
        self._last_project_displacement = displacement
        return query.phi(self.path.position(displacement), normalized(self.path.derivative(displacement)))

    def reset(self) -> None:
        self._last_project_displacement = 0.0


class CircularGVF(GuidingVectorField):
    """Counter-clockwise circular field with no anchors, the building block for round obstacles."""

    def __init__(self, center: NDArray, radius: float, kN: float, error_map_func: ErrorMap = _identity):
        super().__init__(kN, error_map_func)
        if radius <= 0.0:
            raise ValueError(f"radius must be positive, got {radius}")
        self.center = np.asarray(center, dtype=float)
        self.radius = radius

    def internal_get(self, query: Query) -> Phi:
        center_to_point = query.point - self.center
        distance = norm(center_to_point)
        if epsilon_equals(distance, 0.0):
            # every boundary point is nearest from the center; pick angle 0
            direction = vec(1.0, 0.0)
        else:
            direction = center_to_point / distance
        return query.phi(direction * self.radius + self.center, vec(-direction[1], direction[0]))

    def __repr__(self) -> str:
        return f"CircularGVF(center={self.center.tolist()}, radius={self.radius})"


class ClosedPathGVF(GuidingVectorField):
    """
    Field around a closed path, such as create_recticircle(), with no anchors.

    Every query is projected cold. Obstacle lookups jump between unrelated
    points, so a warm start from the previous query would be meaningless.
    """

    def __init__(self, path: Path, kN: float, error_map_func: ErrorMap = _identity):
        super().__init__(kN, error_map_func)
        self.path = path

    def internal_get(self, query: Query) -> Phi:
        displacement = self.path.project(query.point)
        return query.phi(self.path.position(displacement), normalized(self.path.derivative(displacement)))
