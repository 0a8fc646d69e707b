"""
Obstacle avoidance by composing guiding vector fields.

Obstacles follow the composite field construction of arXiv:2205.12760,
eq. (4): each obstacle is a closed counter-clockwise loop field bounding its
reactive region, inset by a fixed distance to define the region where the
obstacle field fully takes over. Between the two, the path and obstacle
vectors are blended with smooth bump functions.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from navcore.config import CORRECTION_DISTANCE, TRACE
from navcore.geometry import angle_of, cross, dot, from_angle, norm, perpendicular, vec, vectors_close
from navcore.gvf.field import FollowableGVF, GuidingVectorField, PathGVF, Phi, Query
from navcore.utils.mathutil import epsilon_equals, sign

logger = logging.getLogger(__name__)

MapFunction = Callable[[float], float]


def default_map_function(x: float, l1: float = 1.0, l2: float = 1.0) -> float:
    """
    Smooth tanh bump from 0 to 1 on [0, 1].

    Args:
        x: input in [0, 1]
        l1: weight towards 0 (l1 > 0)
        l2: weight towards 1 (l2 > 0)
    """
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    x2 = x - 1.0
    return (1.0 - math.tanh((l1 * x + l2 * x2) / (x * x2) * 0.5)) * 0.5


class GVFObstacle:
    """
    Obstacle vector field wrapping a closed loop field.

    For both map functions an input of 0 means the query point is on the
    reactive boundary and an input of 1 means it is at the inset boundary.

    Args:
        gvf: closed loop field whose tangent runs counter-clockwise
        inset_distance: depth of the blending band inside the loop
        zero_in_map_func: weight of the path vector, maps [0, 1] onto [0, 1]
        zero_out_map_func: weight of the obstacle vector, maps [0, 1] onto [0, 1]
    """

    def __init__(
        self,
        gvf: GuidingVectorField,
        inset_distance: float,
        zero_in_map_func: MapFunction = default_map_function,
        zero_out_map_func: MapFunction = default_map_function,
    ):
        if inset_distance <= 0.0:
            raise ValueError(f"inset_distance must be positive, got {inset_distance}")
        self.gvf = gvf
        self.inset_distance = inset_distance
        self.zero_in_map_func = zero_in_map_func
        self.zero_out_map_func = zero_out_map_func

    def phi(self, query: Query) -> Phi:
        return self.gvf.internal_get(query)

    def combine_with(self, path_phi: Phi, path_vec: NDArray, phi: Phi | None = None) -> NDArray | None:
        """
        Blends path_vec with this obstacle's field at the point of path_phi.

        Returns None when the obstacle is not engaged at that point.
        """
        if phi is None:
            phi = self.phi(path_phi.query)
        if phi.orientation <= 0:
            return None
        if phi.error > self.inset_distance:
            return self.gvf.compute(phi)

        t = phi.error / self.inset_distance
        path_norm = norm(path_vec)

        # orbit the obstacle in whichever direction agrees with the path
        if dot(phi.tangent, path_phi.tangent) > 0.0:
            obstacle_vec = self.gvf.compute(phi)
        else:
            obstacle_vec = self.gvf.compute(phi.query.phi(phi.target, -phi.tangent))
        obstacle_norm = norm(obstacle_vec)

        vec_dot = dot(path_vec, obstacle_vec)
        if path_norm * obstacle_norm > 0.0 and epsilon_equals(abs(vec_dot / (path_norm * obstacle_norm)), 1.0):
            # (anti)parallel vectors have no usable bisector
            mid_vec = perpendicular(path_vec)
        else:
            mid_vec = path_norm * obstacle_vec + obstacle_norm * path_vec

        angle = math.atan2(cross(path_vec, obstacle_vec), vec_dot)
        if dot(mid_vec, path_phi.tangent) <= 0.0:
            # turn the long way round so the bisector keeps moving along the path
            angle = -sign(angle) * 2 * math.pi + angle

        zero_in = self.zero_in_map_func(1.0 - t)
        zero_out = self.zero_out_map_func(t)
        target = angle * zero_out + angle_of(path_vec)
        return from_angle(target) * (path_norm * zero_in + obstacle_norm * zero_out)

    def combine_with_field(self, other: GuidingVectorField, point: NDArray) -> NDArray | None:
        """Blends the value of other at point with this obstacle."""
        query = Query(point)
        other_phi = other.internal_get(query)
        return self.combine_with(other_phi, other.compute(other_phi))


@dataclass
class _ObstacleResult:
    vector: NDArray
    weight: float
    zero_out_map_func: MapFunction


class CompositeGVF(FollowableGVF):
    """
    Follows path_gvf while avoiding obstacles.

    Args:
        path_gvf: the field being followed
        obstacles: obstacles to avoid
        correction_radius: within this distance of the path end all obstacles are ignored
    """

    def __init__(
        self,
        path_gvf: PathGVF,
        obstacles: Iterable[GVFObstacle] = (),
        correction_radius: float = CORRECTION_DISTANCE,
    ):
        super().__init__(path_gvf.kN, path_gvf.error_map_func)
        self.path_gvf = path_gvf
        self.obstacles = list(obstacles)
        self.correction_radius = correction_radius
        self.path = path_gvf.path
        self.start_position = path_gvf.start_position
        self.end_position = path_gvf.end_position

    @property
    def last_project_displacement(self) -> float:
        return self.path_gvf.last_project_displacement

    def internal_get(self, query: Query) -> Phi:
        return self.path_gvf.internal_get(query)

    def reset(self) -> None:
        self.path_gvf.reset()

    def compute(self, phi: Phi) -> NDArray:
        path_vec = self.path_gvf.compute(phi)
        if vectors_close(phi.target, self.path_gvf.end_position) and phi.error < self.correction_radius:
            return path_vec

        max_weight = 0.0
        active: list[_ObstacleResult] = []
        for obstacle in self.obstacles:
            obstacle_phi = obstacle.phi(phi.query)
            if obstacle_phi.orientation <= 0:
                continue
            vector = obstacle.combine_with(phi, path_vec, obstacle_phi)
            if obstacle_phi.error > obstacle.inset_distance:
                # fully inside an obstacle's inset region; it alone decides
                return vector
            weight = obstacle_phi.error / obstacle.inset_distance
            max_weight = max(max_weight, weight)
            active.append(_ObstacleResult(vector, weight, obstacle.zero_out_map_func))

        if not active:
            return path_vec
        if len(active) == 1 or epsilon_equals(max_weight, 0.0):
            return active[0].vector

        # sum unit directions and rescale by the weighted mean magnitude so
        # opposing obstacles do not cancel each other out
        vector_sum = vec()
        mag_sum = 0.0
        weight_sum = 0.0
        for result in active:
            actual_weight = result.zero_out_map_func(result.weight)
            logger.log(TRACE, "obstacle_blend weight=%.4f mapped=%.4f", result.weight, actual_weight)
            mag = norm(result.vector)
            weight_sum += actual_weight
            mag_sum += mag * actual_weight
            if mag > 0.0:
                vector_sum = vector_sum + result.vector / mag * actual_weight
        if epsilon_equals(weight_sum, 0.0):
            return active[0].vector
        if vectors_close(vector_sum, vec()):
            vector_sum = vector_sum + vec(1e-6, 1e-6)
        return np.asarray(vector_sum / norm(vector_sum) * mag_sum / weight_sum, dtype=float)
