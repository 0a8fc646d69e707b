import logging
import math

import numpy as np
import pytest

from navcore.profile import (
    ConstantAccelerationConstraint,
    ConstantVelocityConstraint,
    MotionState,
    generate_motion_profile,
    generate_simple_motion_profile,
)
from navcore.utils.errors import ProfileGenerationError, UnsatisfiableConstraintError

EPS = 1e-6


def approx_equal(a, b, tol=1e-6):
    return abs(a - b) <= tol


def _sample(profile, n=400):
    times = np.linspace(0.0, profile.duration(), n)
    return [profile[t] for t in times]


def _assert_continuous(profile, check_accel=False):
    for left, right in zip(profile.segments, profile.segments[1:]):
        end = left.end()
        assert approx_equal(end.x, right.start.x), (end, right.start)
        assert approx_equal(end.v, right.start.v), (end, right.start)
        if check_accel:
            assert approx_equal(end.a, right.start.a), (end, right.start)


SIMPLE_CASES = [
    # start, goal, max_vel, max_accel, max_jerk
    (MotionState(0.0, 0.0), MotionState(20.0, 0.0), 5.0, 2.0, 0.0),  # full trapezoid
    (MotionState(0.0, 0.0), MotionState(10.0, 0.0), 5.0, 2.0, 0.0),  # triangular
    (MotionState(0.0, 1.0), MotionState(15.0, 2.0), 5.0, 2.0, 0.0),  # moving boundaries
    (MotionState(0.0, 0.0), MotionState(20.0, 0.0), 5.0, 2.0, 4.0),  # S-curve with coast
    (MotionState(0.0, 0.0), MotionState(10.0, 0.0), 5.0, 2.0, 4.0),  # S-curve peak search
    (MotionState(0.0, 2.0), MotionState(30.0, 1.0), 5.0, 2.0, 3.0),  # S-curve moving boundaries
    (MotionState(5.0, 0.0), MotionState(-15.0, 0.0), 4.0, 1.5, 3.0),  # reverse direction
]


@pytest.mark.parametrize("start,goal,max_vel,max_accel,max_jerk", SIMPLE_CASES)
def test_simple_profile_reaches_goal(start, goal, max_vel, max_accel, max_jerk):
    profile = generate_simple_motion_profile(start, goal, max_vel, max_accel, max_jerk)
    assert approx_equal(profile.start().x, start.x)
    assert approx_equal(profile.start().v, start.v)
    assert profile.end().x == pytest.approx(goal.x, abs=1e-5)
    assert profile.end().v == pytest.approx(goal.v, abs=1e-5)


@pytest.mark.parametrize("start,goal,max_vel,max_accel,max_jerk", SIMPLE_CASES)
def test_simple_profile_is_continuous(start, goal, max_vel, max_accel, max_jerk):
    profile = generate_simple_motion_profile(start, goal, max_vel, max_accel, max_jerk)
    _assert_continuous(profile, check_accel=max_jerk > 0.0)


@pytest.mark.parametrize("start,goal,max_vel,max_accel,max_jerk", SIMPLE_CASES)
def test_simple_profile_obeys_limits(start, goal, max_vel, max_accel, max_jerk):
    profile = generate_simple_motion_profile(start, goal, max_vel, max_accel, max_jerk)
    for state in _sample(profile):
        assert abs(state.v) <= max_vel + EPS
        assert abs(state.a) <= max_accel + EPS
    if max_jerk > 0.0:
        for segment in profile:
            assert abs(segment.start.j) <= max_jerk + EPS


@pytest.mark.parametrize("start,goal,max_vel,max_accel,max_jerk", SIMPLE_CASES)
def test_direction_flip_is_mirror_image(start, goal, max_vel, max_accel, max_jerk):
    profile = generate_simple_motion_profile(start, goal, max_vel, max_accel, max_jerk)
    mirrored = generate_simple_motion_profile(start.flipped(), goal.flipped(), max_vel, max_accel, max_jerk)

    assert approx_equal(profile.duration(), mirrored.duration())
    for t in np.linspace(0.0, profile.duration(), 50):
        assert profile[t].is_close(mirrored[t].flipped())


def test_trapezoid_closed_form():
    profile = generate_simple_motion_profile(MotionState(0.0, 0.0), MotionState(20.0, 0.0), 5.0, 2.0)

    assert len(profile) == 3
    assert [segment.dt for segment in profile] == pytest.approx([2.5, 1.5, 2.5], abs=1e-6)
    assert profile.segments[0].start.is_close(MotionState(0.0, 0.0, 2.0))
    assert profile.segments[1].start.is_close(MotionState(6.25, 5.0, 0.0))
    assert profile.segments[2].start.is_close(MotionState(13.75, 5.0, -2.0))
    assert profile.end().is_close(MotionState(20.0, 0.0, -2.0))
    assert approx_equal(profile.duration(), 6.5)


def test_short_move_never_reaches_cruise():
    # 10 units at 5 u/s and 2 u/s^2: accel + decel alone need 12.5 units
    profile = generate_simple_motion_profile(MotionState(0.0, 0.0), MotionState(10.0, 0.0), 5.0, 2.0)

    t_peak = math.sqrt(5.0)
    assert len(profile) == 2
    assert [segment.dt for segment in profile] == pytest.approx([t_peak, t_peak], abs=1e-6)
    assert profile.segments[1].start.is_close(MotionState(5.0, 2.0 * t_peak, -2.0))
    assert approx_equal(profile.duration(), 2.0 * t_peak)


def test_s_curve_closed_form():
    profile = generate_simple_motion_profile(MotionState(0.0, 0.0), MotionState(20.0, 0.0), 5.0, 2.0, 4.0)

    # 0.5s jerk up, 2s constant accel, 0.5s jerk down, 1s coast, mirrored decel
    assert approx_equal(profile.duration(), 7.0)
    assert approx_equal(profile[3.0].x, 7.5)
    assert approx_equal(profile[3.0].v, 5.0)
    assert approx_equal(profile[3.0].a, 0.0)
    assert approx_equal(profile[4.0].x, 12.5)


def test_zero_length_profile():
    profile = generate_simple_motion_profile(MotionState(3.0, 0.0), MotionState(3.0, 0.0), 5.0, 2.0)
    assert approx_equal(profile.duration(), 0.0)
    assert approx_equal(profile.end().x, 3.0)
    assert approx_equal(profile.end().v, 0.0)


def test_zero_length_velocity_change_rejected():
    with pytest.raises(ProfileGenerationError, match="zero distance"):
        generate_simple_motion_profile(MotionState(3.0, 0.0), MotionState(3.0, 2.0), 5.0, 2.0)


def test_zero_length_velocity_change_overshoots_when_allowed():
    profile = generate_simple_motion_profile(
        MotionState(3.0, 0.0), MotionState(3.0, 1.0), 5.0, 2.0, overshoot=True
    )

    assert profile.duration() > 0.0
    assert profile.end().x == pytest.approx(3.0, abs=1e-5)
    assert profile.end().v == pytest.approx(1.0, abs=1e-5)
    _assert_continuous(profile)


def test_violating_acceleration_when_not_overshooting(caplog):
    with caplog.at_level(logging.WARNING, logger="navcore.profile.generator"):
        profile = generate_simple_motion_profile(MotionState(0.0, 5.0), MotionState(1.0, 0.0), 5.0, 2.0)

    assert len(profile) == 1
    assert approx_equal(profile.segments[0].start.a, -12.5)
    assert approx_equal(profile.duration(), 0.4)
    assert profile.end().x == pytest.approx(1.0, abs=1e-6)
    assert profile.end().v == pytest.approx(0.0, abs=1e-6)
    assert any("Violating max acceleration" in record.getMessage() for record in caplog.records)


def test_overshoot_comes_back_to_goal():
    profile = generate_simple_motion_profile(
        MotionState(0.0, 5.0), MotionState(1.0, 0.0), 5.0, 2.0, overshoot=True
    )

    assert profile.end().x == pytest.approx(1.0, abs=1e-5)
    assert profile.end().v == pytest.approx(0.0, abs=1e-5)
    assert max(state.x for state in _sample(profile)) == pytest.approx(6.25, abs=1e-3)
    for state in _sample(profile):
        assert abs(state.a) <= 2.0 + EPS
    _assert_continuous(profile)


def test_jerk_limit_dropped_before_acceleration():
    profile = generate_simple_motion_profile(MotionState(0.0, 5.0), MotionState(1.0, 0.0), 5.0, 2.0, 4.0)

    assert all(segment.start.j == 0.0 for segment in profile)
    assert profile.end().x == pytest.approx(1.0, abs=1e-6)


@pytest.mark.parametrize(
    "max_vel,max_accel,max_jerk",
    [(0.0, 1.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, -1.0)],
)
def test_invalid_limits_rejected(max_vel, max_accel, max_jerk):
    with pytest.raises(ValueError):
        generate_simple_motion_profile(MotionState(0.0, 0.0), MotionState(1.0, 0.0), max_vel, max_accel, max_jerk)


# ============================================================================
# DYNAMIC CONSTRAINTS
# ============================================================================


def test_dynamic_profile_matches_constant_trapezoid():
    profile = generate_motion_profile(
        MotionState(0.0, 0.0),
        MotionState(20.0, 0.0),
        ConstantVelocityConstraint(5.0),
        ConstantAccelerationConstraint(2.0),
    )

    assert profile.duration() == pytest.approx(6.5, abs=1e-3)
    assert profile.end().x == pytest.approx(20.0, abs=1e-6)
    assert profile.end().v == pytest.approx(0.0, abs=1e-6)
    _assert_continuous(profile)
    for state in _sample(profile):
        assert state.v <= 5.0 + EPS
        assert abs(state.a) <= 2.0 + EPS


def test_dynamic_profile_respects_slow_zone():
    def velocity_constraint(s, ds):
        return 2.0 if 8.0 <= s <= 12.0 else 5.0

    profile = generate_motion_profile(
        MotionState(0.0, 0.0),
        MotionState(20.0, 0.0),
        velocity_constraint,
        ConstantAccelerationConstraint(2.0),
    )

    _assert_continuous(profile)
    assert profile.end().x == pytest.approx(20.0, abs=1e-6)
    for state in _sample(profile, 800):
        assert state.v <= 5.0 + EPS
        if 8.3 <= state.x <= 11.7:
            assert state.v <= 2.0 + EPS
    # slower than the unconstrained move
    assert profile.duration() > 6.5


def test_dynamic_profile_separate_deceleration():
    profile = generate_motion_profile(
        MotionState(0.0, 0.0),
        MotionState(20.0, 0.0),
        ConstantVelocityConstraint(5.0),
        ConstantAccelerationConstraint(2.0),
        ConstantAccelerationConstraint(1.0),
    )
    # 2.5s accel, 12.5s decel, coast for the remaining 1.25 units
    assert profile.duration() == pytest.approx(2.5 + 5.0 + 1.25 / 5.0, abs=1e-3)
    for state in _sample(profile):
        assert -1.0 - EPS <= state.a <= 2.0 + EPS


def test_dynamic_profile_reverse_direction():
    forward = generate_motion_profile(
        MotionState(0.0, 0.0),
        MotionState(20.0, 0.0),
        ConstantVelocityConstraint(5.0),
        ConstantAccelerationConstraint(2.0),
    )
    backward = generate_motion_profile(
        MotionState(0.0, 0.0),
        MotionState(-20.0, 0.0),
        ConstantVelocityConstraint(5.0),
        ConstantAccelerationConstraint(2.0),
    )
    assert backward.end().x == pytest.approx(-20.0, abs=1e-6)
    assert backward.duration() == pytest.approx(forward.duration(), abs=1e-9)


def test_dynamic_profile_rejects_boundary_over_limit():
    with pytest.raises(UnsatisfiableConstraintError) as excinfo:
        generate_motion_profile(
            MotionState(0.0, 3.0),
            MotionState(20.0, 0.0),
            ConstantVelocityConstraint(2.0),
            ConstantAccelerationConstraint(2.0),
        )
    assert excinfo.value.displacement == 0.0
    assert "start velocity" in str(excinfo.value)


def test_dynamic_profile_zero_ceiling_is_unsatisfiable():
    with pytest.raises(UnsatisfiableConstraintError):
        generate_motion_profile(
            MotionState(0.0, 0.0),
            MotionState(5.0, 0.0),
            ConstantVelocityConstraint(0.0),
            ConstantAccelerationConstraint(2.0),
        )


def test_dynamic_profile_rejects_bad_resolution():
    with pytest.raises(ValueError):
        generate_motion_profile(
            MotionState(0.0, 0.0),
            MotionState(5.0, 0.0),
            ConstantVelocityConstraint(1.0),
            ConstantAccelerationConstraint(1.0),
            resolution=0.0,
        )
