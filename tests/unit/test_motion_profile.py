import pytest

from navcore.profile import MotionProfile, MotionProfileBuilder, MotionSegment, MotionState


def approx_equal(a, b, tol=1e-6):
    return abs(a - b) <= tol


def test_motion_state_jerk_polynomial():
    state = MotionState(1.0, 2.0, 3.0, 6.0).at(1.0)
    assert approx_equal(state.x, 5.5)
    assert approx_equal(state.v, 8.0)
    assert approx_equal(state.a, 9.0)
    assert state.j == 6.0


def test_motion_state_flipped_and_stationary():
    state = MotionState(1.0, -2.0, 3.0, -4.0)
    assert state.flipped() == MotionState(-1.0, 2.0, -3.0, 4.0)
    assert state.stationary() == MotionState(1.0, 0.0, 0.0, 0.0)
    assert state[0.0] == state.at(0.0)


def test_segment_reversed_retraces_path():
    segment = MotionSegment(MotionState(0.0, 0.0, 1.0), 2.0)
    reversed_segment = segment.reversed()

    assert reversed_segment.start.is_close(MotionState(2.0, -2.0, 1.0))
    assert reversed_segment.dt == 2.0
    # time-reversed segment ends where the original started
    assert reversed_segment.end().is_close(MotionState(0.0, 0.0, 1.0))


def test_profile_requires_segments():
    with pytest.raises(ValueError):
        MotionProfile([])


def test_profile_get_clamps_to_span():
    profile = MotionProfileBuilder(MotionState(0.0, 0.0)).append_acceleration_control(1.0, 2.0).build()
    assert profile.get(-1.0) == profile.start()
    assert profile.get(10.0).is_close(profile.end())
    assert approx_equal(profile[1.0].x, 0.5)
    assert approx_equal(profile.duration(), 2.0)


def test_builder_keeps_segments_continuous():
    profile = (
        MotionProfileBuilder(MotionState(0.0, 0.0))
        .append_jerk_control(2.0, 1.0)
        .append_acceleration_control(2.0, 1.0)
        .append_jerk_control(-2.0, 1.0)
        .build()
    )
    assert len(profile) == 3
    for left, right in zip(profile.segments, profile.segments[1:]):
        assert left.end().is_close(right.start)
    assert approx_equal(profile.end().a, 0.0)
    assert approx_equal(profile.end().v, 4.0)


def test_concatenation_continues_from_end():
    first = MotionProfileBuilder(MotionState(0.0, 0.0)).append_acceleration_control(1.0, 1.0).build()
    second = MotionProfileBuilder(MotionState(100.0, 0.0)).append_acceleration_control(-1.0, 1.0).build()

    combined = first + second
    assert len(combined) == 2
    # second profile's controls are replayed from first's end, not its own start
    assert combined.segments[1].start.is_close(MotionState(0.5, 1.0, -1.0))
    assert approx_equal(combined.end().x, 1.0)
    assert approx_equal(combined.end().v, 0.0)


def test_get_by_distance():
    profile = MotionProfileBuilder(MotionState(0.0, 0.0)).append_acceleration_control(1.0, 4.0).build()
    state = profile.get_by_distance(2.0)
    assert state.x == pytest.approx(2.0, abs=1e-4)
    assert state.v == pytest.approx(2.0, abs=1e-4)


def test_double_reversal_matches_original():
    profile = (
        MotionProfileBuilder(MotionState(1.0, 0.5))
        .append_jerk_control(1.5, 1.0)
        .append_acceleration_control(-0.5, 2.0)
        .build()
    )
    twice = profile.reversed().reversed()
    for i in range(31):
        t = profile.duration() * i / 30
        assert profile[t].is_close(twice[t])


def test_reversed_profile_runs_backwards_in_time():
    profile = MotionProfileBuilder(MotionState(0.0, 0.0)).append_acceleration_control(2.0, 1.0).build()
    reversed_profile = profile.reversed()
    assert reversed_profile.start().is_close(MotionState(1.0, -2.0, 2.0))
    assert approx_equal(reversed_profile[0.25].x, profile[0.75].x)
    assert approx_equal(reversed_profile[0.25].v, -profile[0.75].v)


def test_flipped_profile_negates_states():
    profile = MotionProfileBuilder(MotionState(1.0, 1.0)).append_acceleration_control(1.0, 1.0).build()
    flipped = profile.flipped()
    assert flipped[0.5].is_close(profile[0.5].flipped())
