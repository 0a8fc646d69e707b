"""
Path followers driven by guiding vector fields.

Both followers run a simple online velocity profile each tick instead of
following a precomputed trajectory: forward speed is the minimum of an
acceleration ramp from the last tick, the speed from which the robot can
still stop at the path end, the absolute maximum, and optionally a
curvature cap. Angular rate feedforward comes from differentiating the
field direction between ticks (ref. eqs. (18), (23) and (24) of
arXiv:1610.04391).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from numpy.typing import NDArray

from navcore.config import CORRECTION_DISTANCE, CURVATURE_CONTROL_MIN_SPEED
from navcore.control.pid import PIDCoefficients, PIDController
from navcore.followers.base import DriveSignal, PathFollower
from navcore.geometry import Pose2d, angle_of, norm, norm_delta, normalized, rotated, vec, vectors_close
from navcore.gvf.field import ErrorMap, FollowableGVF, PathGVF, Phi, Query, _identity
from navcore.kinematics import calculate_robot_pose_error
from navcore.path.base import Path
from navcore.utils.clock import SYSTEM_CLOCK, Clock
from navcore.utils.errors import FollowerStateError
from navcore.utils.mathutil import clamp, epsilon_equals

logger = logging.getLogger(__name__)

_FIFTEEN_DEGREES = math.radians(15.0)


@dataclass
class GVFSession:
    """Per-path cursor state of a GVF follower."""

    gvf: FollowableGVF
    last_update_timestamp: float
    last_vel: float = 0.0
    last_ang_vel: float = 0.0
    last_position: NDArray | None = None
    last_desired_heading: float | None = None


class _GVFFollowerBase(PathFollower):
    def __init__(
        self,
        max_vel: float,
        max_accel: float,
        max_decel: float,
        max_ang_vel: float,
        max_ang_accel: float,
        admissible_error: Pose2d,
        kN: float,
        kOmega: float,
        pid_coeffs: PIDCoefficients,
        correction_distance: float = CORRECTION_DISTANCE,
        use_curvature_control: bool = False,
        error_map_func: ErrorMap = _identity,
        clock: Clock = SYSTEM_CLOCK,
    ):
        super().__init__(admissible_error, clock)
        self.max_vel = max_vel
        self.max_accel = max_accel
        self.max_decel = max_decel
        self.max_ang_vel = max_ang_vel
        self.max_ang_accel = max_ang_accel
        self.kN = kN
        self.kOmega = kOmega
        self.correction_distance = correction_distance
        self.use_curvature_control = use_curvature_control
        self.error_map_func = error_map_func
        self.heading_controller = PIDController(pid_coeffs, clock)
        self.heading_controller.set_input_bounds(-math.pi, math.pi)
        self._gvf_session: GVFSession | None = None

    @property
    def gvf(self) -> FollowableGVF | None:
        return self._gvf_session.gvf if self._gvf_session is not None else None

    def follow_path(self, path: Path) -> None:
        self._start(PathGVF(path, self.kN, self.error_map_func))

    def follow_gvf(self, gvf: FollowableGVF) -> None:
        """Follows gvf (for example a CompositeGVF with obstacles) along its path."""
        gvf.reset()
        self._start(gvf)

    def _start(self, gvf: FollowableGVF) -> None:
        self._gvf_session = GVFSession(gvf, self.clock.seconds())
        logger.debug("%s using %s (kN=%.3f)", type(self).__name__, type(gvf).__name__, gvf.kN)
        self.heading_controller.reset()
        super().follow_path(gvf.path)

    def _limit_ang_vel(self, session: GVFSession, desired: float, dt: float) -> float:
        """Rate limits desired angular velocity from the last tick, then clamps it to max_ang_vel."""
        step = self.max_ang_accel * dt
        ang_vel = session.last_ang_vel + clamp(desired - session.last_ang_vel, -step, step)
        return clamp(ang_vel, -self.max_ang_vel, self.max_ang_vel)

    def _forward_speed(
        self, session: GVFSession, phi: Phi, remaining_distance: float, dt: float, displacement: float
    ) -> float:
        # cap order: accel ramp, stopping distance, absolute max, curvature
        velocity = session.last_vel + self.max_accel * dt
        velocity = min(velocity, math.sqrt(2 * self.max_decel * remaining_distance))
        velocity = min(velocity, self.max_vel)
        if (
            self.use_curvature_control
            and phi.error < self.correction_distance
            and session.last_vel > CURVATURE_CONTROL_MIN_SPEED
            and session.last_desired_heading is not None
        ):
            curvature = self.path.curvature(displacement)
            if not epsilon_equals(curvature, 0.0):
                reachable_ang_vel = min(self.max_ang_vel, abs(session.last_ang_vel) + self.max_ang_accel * dt)
                velocity = min(velocity, abs(reachable_ang_vel / curvature))
        return max(velocity, 0.0)

    def _current_session(self) -> GVFSession:
        if self._gvf_session is None:
            raise FollowerStateError("update called before follow_path or follow_gvf")
        return self._gvf_session


class HolonomicGVFFollower(_GVFFollowerBase):
    """
    GVF path follower for holonomic drives.

    Translation follows the field; heading tracks the path heading at the
    projected displacement with a PID controller, so path heading
    interpolation is honored.

    Args:
        max_vel: maximum velocity
        max_accel: maximum acceleration
        max_decel: maximum deceleration
        max_ang_vel: maximum angular velocity (rad/s)
        max_ang_accel: maximum angular acceleration (rad/s^2)
        admissible_error: admissible/satisfactory pose error at the end of the path
        kN: normal vector weight of the field
        kOmega: proportional direction velocity gain
        kX: robot X velocity feedback gain
        kY: robot Y velocity feedback gain
        pid_coeffs: heading PID coefficients
        correction_distance: distance from the end below which feedforward turning stops
        use_curvature_control: cap forward speed by path curvature
        error_map_func: error map function of the field
        clock: monotonic time source
    """

    def __init__(
        self,
        max_vel: float,
        max_accel: float,
        max_decel: float,
        max_ang_vel: float,
        max_ang_accel: float,
        admissible_error: Pose2d,
        kN: float,
        kOmega: float,
        kX: float,
        kY: float,
        pid_coeffs: PIDCoefficients,
        correction_distance: float = CORRECTION_DISTANCE,
        use_curvature_control: bool = False,
        error_map_func: ErrorMap = _identity,
        clock: Clock = SYSTEM_CLOCK,
    ):
        super().__init__(
            max_vel,
            max_accel,
            max_decel,
            max_ang_vel,
            max_ang_accel,
            admissible_error,
            kN,
            kOmega,
            pid_coeffs,
            correction_distance,
            use_curvature_control,
            error_map_func,
            clock,
        )
        self.kX = kX
        self.kY = kY

    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal:
        session = self._current_session()
        gvf = session.gvf
        position = current_pose.vec()

        phi = gvf.internal_get(Query(position))
        gvf_result = gvf.compute(phi)
        desired_heading = angle_of(gvf_result)

        displacement = gvf.last_project_displacement
        path_target = self.path.get(displacement)
        remaining_distance = norm(position - self.path.end().vec())
        self.heading_controller.target_position = path_target.heading

        timestamp = self.clock.seconds()
        dt = timestamp - session.last_update_timestamp

        if session.last_desired_heading is not None and dt > 0.0:
            desired_omega = norm_delta(desired_heading - session.last_desired_heading) / dt
            omega = desired_omega * self.kOmega if remaining_distance > self.correction_distance else 0.0
            ang_vel = self._limit_ang_vel(session, omega, dt)
        else:
            ang_vel = 0.0

        velocity = self._forward_speed(session, phi, remaining_distance, dt, displacement)

        target_vel = rotated(normalized(gvf_result), -current_pose.heading) * velocity

        if current_robot_vel is not None:
            current_vel = current_robot_vel.vec()
        elif session.last_position is not None and dt > 0.0:
            current_vel = rotated((position - session.last_position) / dt, -current_pose.heading)
        else:
            current_vel = None

        if current_vel is not None:
            vel_error = target_vel - current_vel
            vel_feedback = vec(vel_error[0] * self.kX, vel_error[1] * self.kY)
        else:
            vel_feedback = vec()

        session.last_update_timestamp = timestamp
        session.last_vel = velocity
        session.last_ang_vel = ang_vel
        session.last_position = position
        session.last_desired_heading = desired_heading
        self.last_error = calculate_robot_pose_error(path_target, current_pose)

        heading_correction = self.heading_controller.update(current_pose.heading)
        return DriveSignal(Pose2d.from_vec(rotated(target_vel, ang_vel * dt) + vel_feedback, heading_correction))


class GVFFollower(_GVFFollowerBase):
    """
    GVF path follower for nonholonomic drives. Path heading interpolation is
    ignored; the robot always faces along the field.

    Near the end of the path the robot drives backwards into the endpoint when
    it is facing away from it, and stops translating while it still needs to
    turn.

    Args:
        max_vel: maximum velocity
        max_accel: maximum acceleration
        max_decel: maximum deceleration
        max_ang_vel: maximum angular velocity (rad/s)
        max_ang_accel: maximum angular acceleration (rad/s^2)
        admissible_error: admissible/satisfactory pose error at the end of the path
        kN: normal vector weight of the field
        kOmega: proportional heading velocity gain
        pid_coeffs: heading PID coefficients
        correction_distance: distance from the end below which the endpoint is approached directly
        use_curvature_control: cap forward speed by path curvature
        error_map_func: error map function of the field
        clock: monotonic time source
    """

    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal:
        session = self._current_session()
        gvf = session.gvf
        position = current_pose.vec()

        phi = gvf.internal_get(Query(position))
        gvf_result = gvf.compute(phi)
        displacement = gvf.last_project_displacement

        initial_desired_heading = angle_of(gvf_result)
        initial_heading_error = norm_delta(initial_desired_heading - current_pose.heading)
        at_target = gvf.end_position is not None and vectors_close(phi.target, gvf.end_position)
        remaining_distance = norm(position - self.path.end().vec())
        reversed_ = (
            at_target and phi.error < self.correction_distance and abs(initial_heading_error) > math.pi / 2
        )
        desired_heading = initial_desired_heading + (math.pi if reversed_ else 0.0)
        heading_error = norm_delta(desired_heading - current_pose.heading)
        self.heading_controller.target_position = desired_heading

        timestamp = self.clock.seconds()
        dt = timestamp - session.last_update_timestamp

        if session.last_desired_heading is not None and dt > 0.0:
            desired_omega = norm_delta(desired_heading - session.last_desired_heading) / dt
            feedforward = desired_omega * self.kOmega if remaining_distance > self.correction_distance else 0.0
            omega = self._limit_ang_vel(
                session, feedforward + self.heading_controller.update(current_pose.heading), dt
            )
        else:
            omega = 0.0

        velocity = self._forward_speed(session, phi, remaining_distance, dt, displacement)

        session.last_update_timestamp = timestamp
        session.last_vel = velocity
        session.last_ang_vel = omega
        session.last_position = position
        session.last_desired_heading = desired_heading
        self.last_error = calculate_robot_pose_error(Pose2d.from_vec(phi.target, angle_of(phi.tangent)), current_pose)

        admissible_distance = norm(self.admissible_error.vec())
        turning_in_place = (remaining_distance < self.correction_distance and abs(heading_error) > _FIFTEEN_DEGREES) or (
            remaining_distance < admissible_distance and abs(heading_error) > self.admissible_error.heading
        )
        forward = 0.0 if turning_in_place else velocity * (-1.0 if reversed_ else 1.0)
        return DriveSignal(Pose2d(forward, 0.0, omega))
