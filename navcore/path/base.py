"""
Arc-length parameterized path capability consumed by trajectories, vector
fields and followers.

Concrete curve construction (splines, arc-length reparameterization) lives
outside navcore; implementations only need the abstract methods below.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from navcore.config import PROJECT_GUESS_SPACING, PROJECT_ITERATIONS, TRACE
from navcore.geometry import Pose2d, dot, norm
from navcore.utils.mathutil import clamp

logger = logging.getLogger(__name__)


class Path(ABC):
    """Planar path parameterized by displacement s in [0, length()]."""

    @abstractmethod
    def length(self) -> float: ...

    @abstractmethod
    def get(self, s: float) -> Pose2d:
        """Pose at displacement s."""

    @abstractmethod
    def deriv(self, s: float) -> Pose2d:
        """Pose derivative with respect to displacement at s."""

    @abstractmethod
    def second_deriv(self, s: float) -> Pose2d: ...

    @abstractmethod
    def curvature(self, s: float) -> float: ...

    def __getitem__(self, s: float) -> Pose2d:
        return self.get(s)

    def position(self, s: float) -> NDArray:
        return self.get(s).vec()

    def derivative(self, s: float) -> NDArray:
        """Unit tangent at s (the positional part of deriv)."""
        return self.deriv(s).vec()

    def start(self) -> Pose2d:
        return self.get(0.0)

    def end(self) -> Pose2d:
        return self.get(self.length())

    def fast_project(
        self,
        point: NDArray,
        guess: float,
        iterations: int = PROJECT_ITERATIONS,
    ) -> float:
        """
        First-order projection of point onto the path starting from guess.

        Each step moves s by the component of (point - position(s)) along the
        tangent, clamped to the path.
        """
        point = np.asarray(point, dtype=float)
        length = self.length()
        s = clamp(guess, 0.0, length)
        for _ in range(iterations):
            ds = dot(point - self.position(s), self.derivative(s))
            s = clamp(s + ds, 0.0, length)
        return s

    def project(self, point: NDArray, warm_start: float | None = None) -> float:
        """
        Displacement of the point on the path nearest to point.

        With warm_start, a single incremental search seeded from the previous
        result is run. Otherwise guesses spaced PROJECT_GUESS_SPACING apart
        are refined and the closest result wins.
        """
        if warm_start is not None:
            return self.fast_project(point, warm_start)

        point = np.asarray(point, dtype=float)
        length = self.length()
        samples = max(2, round(length / PROJECT_GUESS_SPACING) + 1)
        best_s = 0.0
        best_dist = float("inf")
        for guess in np.linspace(0.0, length, samples):
            s = self.fast_project(point, float(guess))
            dist = norm(point - self.position(s))
            if dist < best_dist:
                best_s, best_dist = s, dist
        logger.log(TRACE, "cold_project guesses=%d s=%.4f dist=%.4f", samples, best_s, best_dist)
        return best_s
