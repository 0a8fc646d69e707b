"""
Ramsete follower: time-varying nonlinear feedback for nonholonomic drives.

See eq. 5.12 of Ramsete01.pdf (https://www.dis.uniroma1.it/~labrob/pub/papers/Ramsete01.pdf).
"""

import math

from navcore.followers.base import DriveSignal, TrajectoryFollower
from navcore.geometry import Pose2d
from navcore.kinematics import calculate_field_pose_error, calculate_robot_pose_error, field_to_robot_velocity
from navcore.utils.clock import SYSTEM_CLOCK, Clock
from navcore.utils.mathutil import sinc


class RamseteFollower(TrajectoryFollower):
    """
    Args:
        b: b parameter (non-negative)
        zeta: zeta parameter (on (0, 1))
        admissible_error: admissible/satisfactory pose error at the end of each move
        timeout: max time to wait for the error to be admissible
        clock: monotonic time source
    """

    def __init__(
        self,
        b: float = 0.051,
        zeta: float = 0.018,
        admissible_error: Pose2d | None = None,
        timeout: float = 0.0,
        clock: Clock = SYSTEM_CLOCK,
    ):
        if b < 0.0:
            raise ValueError(f"b must be non-negative, got {b}")
        if not 0.0 < zeta < 1.0:
            raise ValueError(f"zeta must be in (0, 1), got {zeta}")
        super().__init__(admissible_error, timeout, clock)
        self.b = b
        self.zeta = zeta

    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal:
        t = self.elapsed_time()
        trajectory = self.trajectory

        target_pose = trajectory[t]
        target_vel = trajectory.velocity(t)
        target_robot_vel = field_to_robot_velocity(target_pose, target_vel)

        target_v = target_robot_vel.x
        target_omega = target_robot_vel.heading

        error = calculate_field_pose_error(target_pose, current_pose)

        k1 = 2 * self.zeta * math.sqrt(target_omega * target_omega + self.b * target_v * target_v)
        k3 = k1
        k2 = self.b

        cos_h = math.cos(current_pose.heading)
        sin_h = math.sin(current_pose.heading)
        v = target_v * math.cos(error.heading) + k1 * (cos_h * error.x + sin_h * error.y)
        omega = (
            target_omega
            + k2 * target_v * sinc(error.heading) * (cos_h * error.y - sin_h * error.x)
            + k3 * error.heading
        )

        self.last_error = calculate_robot_pose_error(target_pose, current_pose)
        return DriveSignal(Pose2d(v, 0.0, omega))
