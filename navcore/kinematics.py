"""
Frame conversions and pose-error helpers shared by the followers.

Drive-specific conversions (mecanum/swerve/tank wheel outputs) live with the
drive layer; followers here only produce robot-frame velocity and
acceleration.
"""

import math

from navcore.geometry import Pose2d, norm_delta, rotated


def field_to_robot_velocity(field_pose: Pose2d, field_vel: Pose2d) -> Pose2d:
    """Robot pose velocity corresponding to field_pose and field_vel."""
    return Pose2d.from_vec(rotated(field_vel.vec(), -field_pose.heading), field_vel.heading)


def field_to_robot_acceleration(field_pose: Pose2d, field_vel: Pose2d, field_accel: Pose2d) -> Pose2d:
    """Robot pose acceleration corresponding to field_pose, field_vel and field_accel."""
    s = math.sin(field_pose.heading)
    c = math.cos(field_pose.heading)
    rotating_frame = Pose2d(
        -field_vel.x * s + field_vel.y * c,
        -field_vel.x * c - field_vel.y * s,
        0.0,
    )
    base = Pose2d.from_vec(rotated(field_accel.vec(), -field_pose.heading), field_accel.heading)
    return base + rotating_frame * field_vel.heading


def calculate_field_pose_error(target: Pose2d, current: Pose2d) -> Pose2d:
    """Error between target and current in the field frame."""
    delta = target - current
    return Pose2d(delta.x, delta.y, norm_delta(target.heading - current.heading))


def calculate_robot_pose_error(target: Pose2d, current: Pose2d) -> Pose2d:
    """Error between target and current in the robot frame."""
    error = calculate_field_pose_error(target, current)
    return Pose2d.from_vec(rotated(error.vec(), -current.heading), error.heading)
