"""
Motion profile generator with arbitrary start and goal motion states and
either constant limits (trapezoidal / jerk-limited S-curve) or dynamic,
displacement-dependent constraints.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from navcore.config import PEAK_VELOCITY_SEARCH_ITERATIONS, PROFILE_RESOLUTION, TRACE
from navcore.profile.constraints import AccelerationConstraint, VelocityConstraint
from navcore.profile.motion_profile import MotionProfile, MotionProfileBuilder
from navcore.profile.motion_state import MotionSegment, MotionState
from navcore.utils.errors import ProfileGenerationError, UnsatisfiableConstraintError
from navcore.utils.mathutil import epsilon_equals, smallest_nonnegative_root, solve_quadratic

logger = logging.getLogger(__name__)

# (state, displacement covered from that state)
_StateStep = tuple[MotionState, float]


def _plan_forward(
    start: MotionState,
    goal: MotionState,
    solve: Callable[[MotionState, MotionState, bool], MotionProfile],
) -> MotionProfile:
    """
    Ensures the goal is never behind the start. Backward problems are solved
    on the sign-negated states and the result is negated back; solve receives
    True in that case so it can mirror anything else it depends on.
    """
    if goal.x < start.x:
        return solve(start.flipped(), goal.flipped(), True).flipped()
    return solve(start, goal, False)


def _validate_limits(max_vel: float, max_accel: float, max_jerk: float) -> None:
    if max_vel <= 0.0:
        raise ValueError(f"max_vel must be positive, got {max_vel}")
    if max_accel <= 0.0:
        raise ValueError(f"max_accel must be positive, got {max_accel}")
    if max_jerk < 0.0:
        raise ValueError(f"max_jerk must be non-negative, got {max_jerk}")


def generate_simple_motion_profile(
    start: MotionState,
    goal: MotionState,
    max_vel: float,
    max_accel: float,
    max_jerk: float = 0.0,
    overshoot: bool = False,
) -> MotionProfile:
    """
    Generates a simple motion profile with constant max_vel, max_accel and max_jerk.

    If max_jerk is zero an acceleration-limited (trapezoidal) profile is
    generated instead of a jerk-limited one. When the constraints cannot be
    obeyed there are two fallbacks: with overshoot, two profiles are
    concatenated (the first overshoots the goal and the second comes back to
    it); otherwise the highest order constraint is violated, jerk limiting
    first and then acceleration.

    Args:
        start: start motion state
        goal: goal motion state
        max_vel: maximum velocity
        max_accel: maximum acceleration
        max_jerk: maximum jerk (0 for a trapezoidal profile)
        overshoot: overshoot instead of violating constraints
    """
    _validate_limits(max_vel, max_accel, max_jerk)

    def solve(s: MotionState, g: MotionState, _mirrored: bool) -> MotionProfile:
        if epsilon_equals(max_jerk, 0.0):
            return _trapezoidal_profile(s, g, max_vel, max_accel, overshoot)
        return _s_curve_profile(s, g, max_vel, max_accel, max_jerk, overshoot)

    return _plan_forward(start, goal, solve)


def _trapezoidal_profile(
    start: MotionState,
    goal: MotionState,
    max_vel: float,
    max_accel: float,
    overshoot: bool,
) -> MotionProfile:
    length = goal.x - start.x
    if epsilon_equals(length, 0.0):
        required_accel = 0.0 if epsilon_equals(goal.v, start.v) else math.inf
    else:
        required_accel = (goal.v * goal.v - start.v * start.v) / (2 * length)

    accel_profile = _accel_profile(start, max_vel, max_accel)
    decel_profile = _decel_profile(goal, max_vel, max_accel)

    no_coast_profile = accel_profile + decel_profile
    remaining_distance = goal.x - no_coast_profile.end().x

    if remaining_distance >= 0.0:
        # accelerate, coast at max velocity, decelerate
        return (
            MotionProfileBuilder(start)
            .append_profile(accel_profile)
            .append_acceleration_control(0.0, remaining_distance / max_vel)
            .append_profile(decel_profile)
            .build()
        )

    if abs(required_accel) > max_accel:
        if overshoot:
            logger.debug("Trapezoidal profile overshoots goal x=%.4f; appending return leg", goal.x)
            return no_coast_profile + generate_simple_motion_profile(
                no_coast_profile.end(), goal, max_vel, max_accel, overshoot=True
            )
        if math.isinf(required_accel):
            raise ProfileGenerationError(
                f"Cannot change velocity from {start.v:.4f} to {goal.v:.4f} over zero distance at x={goal.x:.4f}"
            )
        logger.warning(
            "Violating max acceleration %.4f with %.4f to reach goal x=%.4f",
            max_accel,
            required_accel,
            goal.x,
        )
        dt = (goal.v - start.v) / required_accel if not epsilon_equals(required_accel, 0.0) else 0.0
        return MotionProfileBuilder(start).append_acceleration_control(required_accel, dt).build()

    if start.v > max_vel and goal.v > max_vel:
        # decelerate, then accelerate
        dt1 = smallest_nonnegative_root(
            -max_accel,
            2 * start.v,
            (goal.v * goal.v - start.v * start.v) / (2 * max_accel) - length,
        )
        dt3 = max(0.0, (goal.v - start.v) / max_accel + dt1)
        return (
            MotionProfileBuilder(start)
            .append_acceleration_control(-max_accel, dt1)
            .append_acceleration_control(max_accel, dt3)
            .build()
        )

    # accelerate, then decelerate
    dt1 = _peak_root(
        max_accel,
        2 * start.v,
        (start.v * start.v - goal.v * goal.v) / (2 * max_accel) - length,
    )
    dt3 = max(0.0, (start.v - goal.v) / max_accel + dt1)
    return (
        MotionProfileBuilder(start)
        .append_acceleration_control(max_accel, dt1)
        .append_acceleration_control(-max_accel, dt3)
        .build()
    )


def _s_curve_profile(
    start: MotionState,
    goal: MotionState,
    max_vel: float,
    max_accel: float,
    max_jerk: float,
    overshoot: bool,
) -> MotionProfile:
    acceleration_profile = _accel_profile(start, max_vel, max_accel, max_jerk)
    # deceleration profiles are mirrored acceleration profiles built from the goal
    deceleration_profile = _decel_profile(goal, max_vel, max_accel, max_jerk)

    no_coast_profile = acceleration_profile + deceleration_profile
    remaining_distance = goal.x - no_coast_profile.end().x

    if remaining_distance >= 0.0:
        return (
            MotionProfileBuilder(start)
            .append_profile(acceleration_profile)
            .append_jerk_control(0.0, remaining_distance / max_vel)
            .append_profile(deceleration_profile)
            .build()
        )

    # The profile never reaches max_vel, so search for the peak velocity
    # (0 < peak < max_vel). The end position is monotonic in the peak, which
    # makes bisection sufficient and keeps the iteration count fixed.
    lower_bound = 0.0
    upper_bound = max_vel
    for iteration in range(PEAK_VELOCITY_SEARCH_ITERATIONS):
        peak_vel = 0.5 * (upper_bound + lower_bound)
        search_profile = _accel_profile(start, peak_vel, max_accel, max_jerk) + _decel_profile(
            goal, peak_vel, max_accel, max_jerk
        )
        error = goal.x - search_profile.end().x
        logger.log(TRACE, "peak search %d: peak_vel=%.6f error=%.3e", iteration, peak_vel, error)

        if epsilon_equals(error, 0.0):
            return search_profile

        if error > 0.0:
            # undershot, shift the lower bound up
            lower_bound = peak_vel
        else:
            upper_bound = peak_vel

        if upper_bound - lower_bound <= 1e-12:
            break

    # constraints are not satisfiable
    if overshoot:
        logger.debug("S-curve peak search did not converge; overshooting goal x=%.4f", goal.x)
        return no_coast_profile + generate_simple_motion_profile(
            no_coast_profile.end(), goal, max_vel, max_accel, max_jerk, overshoot=True
        )
    logger.warning("S-curve peak search did not converge; dropping jerk limit for goal x=%.4f", goal.x)
    return generate_simple_motion_profile(start, goal, max_vel, max_accel, overshoot=False)


def _peak_root(a: float, b: float, c: float) -> float:
    """Root of the ramp-time quadratic whose peak lies ahead of the start (largest root, >= 0)."""
    roots = solve_quadratic(a, b, c)
    if not roots:
        return smallest_nonnegative_root(a, b, c)
    return max(0.0, max(roots))


def _accel_profile(
    start: MotionState,
    max_vel: float,
    max_accel: float,
    max_jerk: float = 0.0,
) -> MotionProfile:
    """Profile that takes start to velocity max_vel (and zero acceleration when jerk-limited)."""
    if epsilon_equals(max_jerk, 0.0):
        dt = abs(start.v - max_vel) / max_accel
        accel = -max_accel if start.v > max_vel else max_accel
        return MotionProfileBuilder(start).append_acceleration_control(accel, dt).build()

    # Velocity reached if acceleration were ramped to zero right away decides
    # whether we need to speed up or slow down. Solve the speed-up case and
    # mirror the jerk signs for slowing down.
    stop_vel = start.v + start.a * abs(start.a) / (2 * max_jerk)
    direction = -1.0 if stop_vel > max_vel else 1.0
    v0 = direction * start.v
    a0 = direction * start.a
    target = direction * max_vel

    if a0 > max_accel:
        # already over the acceleration limit; ramp down to it first
        dt1 = (a0 - max_accel) / max_jerk
        jerk1 = -max_jerk
        dv1 = (a0 * a0 - max_accel * max_accel) / (2 * max_jerk)
    else:
        dt1 = (max_accel - a0) / max_jerk
        jerk1 = max_jerk
        dv1 = (max_accel * max_accel - a0 * a0) / (2 * max_jerk)

    dt3 = max_accel / max_jerk
    dv3 = max_accel * max_accel / (2 * max_jerk)

    # velocity change required in the constant-acceleration phase
    dv2 = target - v0 - dv1 - dv3

    if dv2 >= 0.0:
        controls = [(jerk1, dt1), (0.0, dv2 / max_accel), (-max_jerk, dt3)]
    else:
        # no constant acceleration phase; shorten both ramps
        new_dt1 = _peak_root(
            max_jerk,
            2 * a0,
            a0 * a0 / (2 * max_jerk) - (target - v0),
        )
        peak_accel = max(0.0, a0 + max_jerk * new_dt1)
        controls = [(max_jerk, new_dt1), (-max_jerk, peak_accel / max_jerk)]

    builder = MotionProfileBuilder(start)
    for jerk, dt in controls:
        builder.append_jerk_control(direction * jerk, dt)
    return builder.build()


def _decel_profile(
    goal: MotionState,
    max_vel: float,
    max_accel: float,
    max_jerk: float = 0.0,
) -> MotionProfile:
    """
    Profile that starts at max_vel (zero acceleration) and ends exactly at goal.

    Built as the acceleration profile of the mirrored goal, negated and then
    time-reversed.
    """
    mirrored = MotionState(-goal.x, goal.v, -goal.a, goal.j)
    return _accel_profile(mirrored, max_vel, max_accel, max_jerk).flipped().reversed()


def generate_motion_profile(
    start: MotionState,
    goal: MotionState,
    velocity_constraint: VelocityConstraint,
    acceleration_constraint: AccelerationConstraint,
    deceleration_constraint: AccelerationConstraint | None = None,
    resolution: float = PROFILE_RESOLUTION,
) -> MotionProfile:
    """
    Generates a motion profile with dynamic maximum velocity and acceleration.

    Uses the forward/backward pass and merge algorithm from section 3.2 of
    Sprunk, "Planning Motion Trajectories for Mobile Robots Using Splines"
    (2008). Boundary velocities above the sampled velocity ceiling raise
    UnsatisfiableConstraintError; boundary accelerations are not checked, so
    keep them at zero unless the profile's continuity is verified.

    Args:
        start: start motion state
        goal: goal motion state
        velocity_constraint: velocity constraint
        acceleration_constraint: acceleration constraint
        deceleration_constraint: deceleration constraint (defaults to acceleration_constraint)
        resolution: separation between constraint samples
    """
    if resolution <= 0.0:
        raise ValueError(f"resolution must be positive, got {resolution}")
    if deceleration_constraint is None:
        deceleration_constraint = acceleration_constraint

    def solve(s: MotionState, g: MotionState, mirrored: bool) -> MotionProfile:
        if mirrored:
            return _dynamic_profile(
                s,
                g,
                lambda x, ds: velocity_constraint(-x, -ds),
                lambda x, ds, last_vel: acceleration_constraint(-x, -ds, -last_vel),
                lambda x, ds, last_vel: deceleration_constraint(-x, -ds, -last_vel),
                resolution,
            )
        return _dynamic_profile(
            s, g, velocity_constraint, acceleration_constraint, deceleration_constraint, resolution
        )

    return _plan_forward(start, goal, solve)


def _dynamic_profile(
    start: MotionState,
    goal: MotionState,
    velocity_constraint: VelocityConstraint,
    acceleration_constraint: AccelerationConstraint,
    deceleration_constraint: AccelerationConstraint,
    resolution: float,
) -> MotionProfile:
    length = goal.x - start.x
    if epsilon_equals(length, 0.0):
        return MotionProfile([MotionSegment(start, 0.0)])

    # ds is an adjusted resolution that fits nicely within length
    samples = max(2, math.ceil(length / resolution))
    ds = length / (samples - 1)
    offsets = [i * ds for i in range(samples)]

    velocity_ceilings = [velocity_constraint(start.x + offset, ds) for offset in offsets]
    _check_boundaries(start, goal, velocity_ceilings)

    forward_states = _forward_pass(
        start,
        [start.x + offset for offset in offsets],
        ds,
        velocity_ceilings,
        acceleration_constraint,
    )

    # the backward pass walks from the goal toward the start with a negative
    # step; each state is then moved to the near end of its interval so that
    # both lists describe intervals in increasing displacement
    backward_pass = _forward_pass(
        goal,
        [goal.x - offset for offset in offsets],
        -ds,
        velocity_ceilings[::-1],
        deceleration_constraint,
    )
    backward_states = [(_after_displacement(state, dx), -dx) for state, dx in backward_pass]
    backward_states.reverse()

    forward_states.append((goal, 0.0))
    backward_states.append((goal, 0.0))

    final_states = _merge(forward_states, backward_states)
    return _materialize(start, final_states[:-1])


def _check_boundaries(start: MotionState, goal: MotionState, velocity_ceilings: list[float]) -> None:
    for index, ceiling in enumerate(velocity_ceilings):
        if math.isnan(ceiling) or ceiling < 0.0:
            raise UnsatisfiableConstraintError(
                f"velocity constraint returned {ceiling} at sample {index}"
            )
    if abs(start.v) > velocity_ceilings[0] + 1e-6:
        raise UnsatisfiableConstraintError(
            f"start velocity {start.v:.4f} exceeds velocity limit {velocity_ceilings[0]:.4f}",
            displacement=start.x,
        )
    if abs(goal.v) > velocity_ceilings[-1] + 1e-6:
        raise UnsatisfiableConstraintError(
            f"goal velocity {goal.v:.4f} exceeds velocity limit {velocity_ceilings[-1]:.4f}",
            displacement=goal.x,
        )


def _forward_pass(
    start: MotionState,
    displacements: list[float],
    ds: float,
    velocity_ceilings: list[float],
    acceleration_constraint: AccelerationConstraint,
) -> list[_StateStep]:
    """
    Applies maximum acceleration starting at min(last velocity, max velocity)
    on a sample-by-sample basis. ds may be negative for the backward pass.
    """
    states: list[_StateStep] = []

    last_state = start
    for displacement, max_vel in zip(displacements[:-1], velocity_ceilings[:-1]):
        if last_state.v >= max_vel:
            # the last velocity meets or exceeds max vel so we just coast
            state = MotionState(displacement, max_vel, 0.0)
            states.append((state, ds))
            last_state = _after_displacement(state, ds)
            continue

        # compute the final velocity assuming max accel
        final_vel = acceleration_constraint(displacement, abs(ds), last_state.v)
        if math.isnan(final_vel) or final_vel < 0.0:
            raise UnsatisfiableConstraintError(
                f"acceleration constraint returned {final_vel} at s={displacement:.4f}",
                displacement=displacement,
            )
        accel = (final_vel * final_vel - last_state.v * last_state.v) / (2 * ds)

        if final_vel <= max_vel:
            state = MotionState(displacement, last_state.v, accel)
            states.append((state, ds))
            last_state = _after_displacement(state, ds)
        else:
            # we went over max vel so split the sample
            accel_dx = (max_vel * max_vel - last_state.v * last_state.v) / (2 * accel)
            accel_state = MotionState(displacement, last_state.v, accel)
            coast_state = MotionState(displacement + accel_dx, max_vel, 0.0)
            states.append((accel_state, accel_dx))
            states.append((coast_state, ds - accel_dx))
            last_state = _after_displacement(coast_state, ds - accel_dx)

    return states


def _merge(forward_states: list[_StateStep], backward_states: list[_StateStep]) -> list[_StateStep]:
    """Keeps the lower of the forward and backward velocity curves over every interval."""
    final_states: list[_StateStep] = []

    i = 0
    while i < len(forward_states) and i < len(backward_states):
        forward_start, forward_dx = forward_states[i]
        backward_start, backward_dx = backward_states[i]

        # if the displacements disagree, split the longer chunk in two and
        # insert the remainder so both lists stay aligned
        if not epsilon_equals(forward_dx, backward_dx):
            if forward_dx > backward_dx:
                forward_states.insert(
                    i + 1,
                    (_after_displacement(forward_start, backward_dx), forward_dx - backward_dx),
                )
                forward_dx = backward_dx
            else:
                backward_states.insert(
                    i + 1,
                    (_after_displacement(backward_start, forward_dx), backward_dx - forward_dx),
                )
                backward_dx = forward_dx

        forward_end = _after_displacement(forward_start, forward_dx)
        backward_end = _after_displacement(backward_start, backward_dx)

        if forward_start.v <= backward_start.v:
            if forward_end.v <= backward_end.v:
                final_states.append((forward_start, forward_dx))
            else:
                crossing = _intersection(forward_start, backward_start, forward_dx)
                final_states.append((forward_start, crossing))
                final_states.append(
                    (_after_displacement(backward_start, crossing), backward_dx - crossing)
                )
        else:
            if forward_end.v >= backward_end.v:
                final_states.append((backward_start, backward_dx))
            else:
                crossing = _intersection(forward_start, backward_start, forward_dx)
                final_states.append((backward_start, crossing))
                final_states.append(
                    (_after_displacement(forward_start, crossing), forward_dx - crossing)
                )
        i += 1

    return final_states


def _materialize(start: MotionState, states: list[_StateStep]) -> MotionProfile:
    """Turns (state, dx) pairs into time-parameterized segments."""
    segments: list[MotionSegment] = []
    for state, dx in states:
        if dx <= 0.0:
            continue
        if epsilon_equals(state.a, 0.0):
            if epsilon_equals(state.v, 0.0):
                raise UnsatisfiableConstraintError(
                    f"profile stalls at s={state.x:.4f} (zero velocity and acceleration)",
                    displacement=state.x,
                )
            dt = dx / state.v
        else:
            discriminant = state.v * state.v + 2 * state.a * dx
            if epsilon_equals(discriminant, 0.0) or discriminant < 0.0:
                dt = max(0.0, -state.v / state.a)
            else:
                positive = (math.sqrt(discriminant) - state.v) / state.a
                negative = (-math.sqrt(discriminant) - state.v) / state.a
                dt = positive if positive >= 0.0 else negative
        segments.append(MotionSegment(MotionState(state.x, state.v, state.a), dt))

    if not segments:
        return MotionProfile([MotionSegment(start, 0.0)])
    return MotionProfile(segments)


def _after_displacement(state: MotionState, ds: float) -> MotionState:
    discriminant = state.v * state.v + 2 * state.a * ds
    if epsilon_equals(discriminant, 0.0) or discriminant < 0.0:
        return MotionState(state.x + ds, 0.0, state.a)
    return MotionState(state.x + ds, math.sqrt(discriminant), state.a)


def _intersection(state1: MotionState, state2: MotionState, dx: float) -> float:
    """Displacement from the common start where the two constant-acceleration velocity curves cross."""
    if epsilon_equals(state1.a, state2.a):
        return dx
    crossing = (state1.v * state1.v - state2.v * state2.v) / (2 * state2.a - 2 * state1.a)
    return min(max(crossing, 0.0), dx)
