"""
Time-based PID followers with velocity and acceleration feedforward.

Feedback is applied to the robot-frame pose error; the feedforward terms are
returned in the DriveSignal and applied at the wheel level by the drive.
"""

import math

from navcore.control.pid import PIDCoefficients, PIDController
from navcore.followers.base import DriveSignal, TrajectoryFollower
from navcore.geometry import Pose2d, dot
from navcore.kinematics import (
    calculate_robot_pose_error,
    field_to_robot_acceleration,
    field_to_robot_velocity,
)
from navcore.trajectory import Trajectory
from navcore.utils.clock import SYSTEM_CLOCK, Clock
from navcore.utils.mathutil import sign


class HolonomicPIDVAFollower(TrajectoryFollower):
    """
    PID on each component of the robot pose (axial, lateral, heading) plus
    feedforward velocity and acceleration.

    Args:
        axial_coeffs: PID coefficients for the robot axial controller (robot X)
        lateral_coeffs: PID coefficients for the robot lateral controller (robot Y)
        heading_coeffs: PID coefficients for the robot heading controller
        admissible_error: admissible/satisfactory pose error at the end of each move
        timeout: max time to wait for the error to be admissible
        clock: monotonic time source
    """

    def __init__(
        self,
        axial_coeffs: PIDCoefficients,
        lateral_coeffs: PIDCoefficients,
        heading_coeffs: PIDCoefficients,
        admissible_error: Pose2d | None = None,
        timeout: float = 0.0,
        clock: Clock = SYSTEM_CLOCK,
    ):
        super().__init__(admissible_error, timeout, clock)
        self.axial_controller = PIDController(axial_coeffs, clock)
        self.lateral_controller = PIDController(lateral_coeffs, clock)
        self.heading_controller = PIDController(heading_coeffs, clock)
        self.heading_controller.set_input_bounds(-math.pi, math.pi)

    def follow_trajectory(self, trajectory: Trajectory) -> None:
        self.axial_controller.reset()
        self.lateral_controller.reset()
        self.heading_controller.reset()
        super().follow_trajectory(trajectory)

    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal:
        t = self.elapsed_time()
        trajectory = self.trajectory

        target_pose = trajectory[t]
        target_vel = trajectory.velocity(t)
        target_accel = trajectory.acceleration(t)

        target_robot_vel = field_to_robot_velocity(target_pose, target_vel)
        target_robot_accel = field_to_robot_acceleration(target_pose, target_vel, target_accel)

        pose_error = calculate_robot_pose_error(target_pose, current_pose)

        # the error is the setpoint and the measurement is zero
        self.axial_controller.set_target(pose_error.x, target_robot_vel.x)
        self.lateral_controller.set_target(pose_error.y, target_robot_vel.y)
        self.heading_controller.set_target(pose_error.heading, target_robot_vel.heading)

        measured = current_robot_vel
        axial_correction = self.axial_controller.update(0.0, measured.x if measured else None)
        lateral_correction = self.lateral_controller.update(0.0, measured.y if measured else None)
        heading_correction = self.heading_controller.update(0.0, measured.heading if measured else None)

        corrected_velocity = target_robot_vel + Pose2d(axial_correction, lateral_correction, heading_correction)
        self.last_error = pose_error
        return DriveSignal(corrected_velocity, target_robot_accel)


class TankPIDVAFollower(TrajectoryFollower):
    """
    PID follower for nonholonomic (tank) drives.

    One loop controls the path displacement (robot X) and another reduces
    cross track (robot Y) error through heading correction.

    Args:
        axial_coeffs: PID coefficients for the robot axial (robot X) controller
        cross_track_coeffs: PID coefficients for the heading controller based on cross track error
        admissible_error: admissible/satisfactory pose error at the end of each move
        timeout: max time to wait for the error to be admissible
        clock: monotonic time source
    """

    def __init__(
        self,
        axial_coeffs: PIDCoefficients,
        cross_track_coeffs: PIDCoefficients,
        admissible_error: Pose2d | None = None,
        timeout: float = 0.0,
        clock: Clock = SYSTEM_CLOCK,
    ):
        super().__init__(admissible_error, timeout, clock)
        self.axial_controller = PIDController(axial_coeffs, clock)
        self.cross_track_controller = PIDController(cross_track_coeffs, clock)

    def follow_trajectory(self, trajectory: Trajectory) -> None:
        self.axial_controller.reset()
        self.cross_track_controller.reset()
        super().follow_trajectory(trajectory)

    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal:
        t = self.elapsed_time()
        trajectory = self.trajectory

        target_pose = trajectory[t]
        target_vel = trajectory.velocity(t)
        target_accel = trajectory.acceleration(t)

        target_robot_vel = field_to_robot_velocity(target_pose, target_vel)
        target_robot_accel = field_to_robot_acceleration(target_pose, target_vel, target_accel)

        pose_error = calculate_robot_pose_error(target_pose, current_pose)

        self.axial_controller.set_target(pose_error.x, target_robot_vel.x)
        self.cross_track_controller.set_target(pose_error.y, target_robot_vel.y)

        measured = current_robot_vel
        axial_correction = self.axial_controller.update(0.0, measured.x if measured else None)
        # steer toward the path in the direction of travel
        heading_correction = sign(dot(target_vel.vec(), current_pose.heading_vec())) * self.cross_track_controller.update(
            0.0, measured.y if measured else None
        )

        corrected_velocity = target_robot_vel + Pose2d(axial_correction, 0.0, heading_correction)
        self.last_error = pose_error
        return DriveSignal(corrected_velocity, target_robot_accel)
