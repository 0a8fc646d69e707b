import math

import numpy as np
import pytest

from navcore.geometry import Pose2d, from_angle, perpendicular, vec
from navcore.gvf import CircularGVF, ClosedPathGVF, PathGVF, Query
from navcore.path import ArcPath, LinePath, create_recticircle


def test_on_path_field_is_tangent(line_path):
    gvf = PathGVF(line_path, kN=1.0)
    assert np.allclose(gvf.get(5.0, 0.0), [1.0, 0.0])
    assert gvf.last_project_displacement == pytest.approx(5.0)


def test_off_path_field_converges_from_both_sides(line_path):
    left = PathGVF(line_path, kN=1.0).get(5.0, 1.0)
    right = PathGVF(line_path, kN=1.0).get(5.0, -1.0)

    assert np.allclose(left, [1.0, -1.0])
    assert np.allclose(right, [1.0, 1.0])


def test_normal_weight_scales_correction(line_path):
    assert np.allclose(PathGVF(line_path, kN=3.0).get(5.0, 0.5), [1.0, -1.5])


def test_error_map_is_applied(line_path):
    gvf = PathGVF(line_path, kN=1.0, error_map_func=lambda e: e**3)
    assert np.allclose(gvf.get(5.0, 2.0), [1.0, -8.0])


def test_past_end_points_back_at_end(line_path):
    gvf = PathGVF(line_path, kN=1.0)
    assert np.allclose(gvf.get(12.0, 1.0), [-2.0, -1.0])


def test_before_start_points_at_start(line_path):
    gvf = PathGVF(line_path, kN=1.0)
    gvf.get(5.0, 0.0)
    gvf.reset()
    assert gvf.last_project_displacement == 0.0
    assert np.allclose(gvf.get(-2.0, 0.0), [2.0, 0.0])


def test_exactly_at_start_follows_path(line_path):
    gvf = PathGVF(line_path, kN=1.0)
    assert np.allclose(gvf.get(0.0, 0.0), [1.0, 0.0])


def test_callable_matches_get(line_path):
    first = PathGVF(line_path, kN=1.0)
    second = PathGVF(line_path, kN=1.0)
    assert np.allclose(first(vec(3.0, 0.5)), second.get(3.0, 0.5))


def test_phi_orientation_and_normal(line_path):
    gvf = PathGVF(line_path, kN=1.0)
    phi = gvf.internal_get(Query(vec(4.0, 2.0)))

    assert np.allclose(phi.target, [4.0, 0.0])
    assert phi.orientation == 1.0
    assert phi.error == pytest.approx(2.0)
    assert np.allclose(phi.normal, [0.0, 1.0])
    assert np.allclose(phi.point, [4.0, 2.0])


def test_diagonal_path_field():
    path = LinePath(Pose2d(0.0, 0.0), Pose2d(10.0, 10.0))
    result = PathGVF(path, kN=1.0).get(5.0, 5.0)
    assert np.allclose(result, np.array([1.0, 1.0]) / np.sqrt(2.0))


def test_circular_field_outside_converges_counter_clockwise():
    gvf = CircularGVF(vec(0.0, 0.0), 2.0, kN=1.0)
    assert np.allclose(gvf.get(3.0, 0.0), [-1.0, 1.0])


def test_circular_field_on_circle_is_tangent():
    gvf = CircularGVF(vec(1.0, 1.0), 2.0, kN=1.0)
    assert np.allclose(gvf.get(1.0, 3.0), [-1.0, 0.0])


def test_circular_field_at_center_is_defined():
    gvf = CircularGVF(vec(0.0, 0.0), 2.0, kN=1.0)
    result = gvf.get(0.0, 0.0)
    assert np.all(np.isfinite(result))


def test_circular_field_requires_positive_radius():
    with pytest.raises(ValueError):
        CircularGVF(vec(0.0, 0.0), 0.0, kN=1.0)


# ============================================================================
# CURVED AND CLOSED PATHS
# ============================================================================


def test_path_field_on_arc_uses_warm_projection():
    path = ArcPath(vec(0.0, 0.0), 10.0, -math.pi / 2, math.pi)
    gvf = PathGVF(path, kN=1.0)
    theta = -math.pi / 2 + 0.3
    radial = from_angle(theta)

    result = gvf.get(*(radial * 11.0))

    assert gvf.last_project_displacement == pytest.approx(3.0, abs=1e-6)
    # tangent plus a unit pull back towards the arc
    assert np.allclose(result, perpendicular(radial) - radial)


@pytest.mark.parametrize("point", [(8.0, 0.0), (5.0, 4.5), (2.0, 0.0), (5.0, -3.0)])
def test_closed_path_field_matches_circle(point):
    loop = ClosedPathGVF(ArcPath(vec(5.0, 0.0), 2.0, 0.0, 2.0 * math.pi), kN=1.0)
    circle = CircularGVF(vec(5.0, 0.0), 2.0, kN=1.0)
    assert np.allclose(loop.get(*point), circle.get(*point))


def test_closed_path_field_has_no_anchors():
    loop = ClosedPathGVF(ArcPath(vec(5.0, 0.0), 2.0, 0.0, 2.0 * math.pi), kN=1.0)
    # (7, 0) is both start and end of the loop; the field still circulates
    assert np.allclose(loop.get(8.0, 0.0), [-1.0, 1.0])
    assert np.allclose(loop.get(7.0, 0.0), [0.0, 1.0])


def test_closed_path_field_on_recticircle_edge():
    loop = ClosedPathGVF(create_recticircle(vec(5.0, 0.0), vec(2.0, 2.0), 1.0), kN=1.0)
    assert np.allclose(loop.get(5.0, 3.0), [-1.0, -1.0])
    assert np.allclose(loop.get(3.0, 0.0), [0.0, -1.0])
