"""
Follower base classes: per-tick controllers that track a path or trajectory.

A follower is owned by a single control loop. follow_path/follow_trajectory
start a new follow session, replacing any previous session wholesale; update()
is called once per tick with the latest pose (and optionally velocity) and
returns the commanded DriveSignal.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from navcore.geometry import Pose2d, norm_delta
from navcore.path.base import Path
from navcore.trajectory import Trajectory
from navcore.utils.clock import SYSTEM_CLOCK, Clock
from navcore.utils.errors import FollowerStateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriveSignal:
    """
    Commanded kinematic state of a drive.

    Args:
        vel: robot frame velocity
        accel: robot frame acceleration
    """

    vel: Pose2d = field(default_factory=Pose2d)
    accel: Pose2d = field(default_factory=Pose2d)


def within_admissible_error(target: Pose2d, current: Pose2d, admissible_error: Pose2d) -> bool:
    error = target - current
    return (
        abs(error.x) < admissible_error.x
        and abs(error.y) < admissible_error.y
        and abs(norm_delta(error.heading)) < admissible_error.heading
    )


@dataclass
class PathSession:
    path: Path
    start_timestamp: float
    admissible: bool = False


@dataclass
class TrajectorySession:
    trajectory: Trajectory
    start_timestamp: float
    admissible: bool = False
    executed_final_update: bool = False


class PathFollower(ABC):
    """
    Generic path follower for time-independent pose reference tracking.

    Args:
        admissible_error: admissible/satisfactory pose error at the end of the path
        clock: monotonic time source
    """

    def __init__(self, admissible_error: Pose2d, clock: Clock = SYSTEM_CLOCK):
        self.admissible_error = admissible_error
        self.clock = clock
        self.last_error = Pose2d()
        self._session: PathSession | None = None

    @property
    def path(self) -> Path:
        if self._session is None:
            raise FollowerStateError("no path is being followed; call follow_path first")
        return self._session.path

    def follow_path(self, path: Path) -> None:
        self._session = PathSession(path, self.clock.seconds())
        logger.debug("%s following path of length %.3f", type(self).__name__, path.length())

    def is_following(self) -> bool:
        """Returns False once the current path has finished executing."""
        return self._session is not None and not self._session.admissible

    def update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None = None) -> DriveSignal:
        """
        Run a single iteration of the path follower.

        Args:
            current_pose: current field frame pose
            current_robot_vel: current robot frame velocity, if measured
        """
        session = self._session
        if session is None:
            raise FollowerStateError("update called before follow_path")

        was_admissible = session.admissible
        session.admissible = within_admissible_error(session.path.end(), current_pose, self.admissible_error)
        if session.admissible:
            if not was_admissible:
                logger.info("%s reached path end at %s", type(self).__name__, current_pose)
            return DriveSignal()
        return self.internal_update(current_pose, current_robot_vel)

    @abstractmethod
    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal: ...


class TrajectoryFollower(ABC):
    """
    Generic trajectory follower for time-based pose reference tracking.

    Args:
        admissible_error: admissible/satisfactory pose error at the end of each move
        timeout: max time past the trajectory duration to wait for the error to be admissible
        clock: monotonic time source
    """

    def __init__(
        self,
        admissible_error: Pose2d | None = None,
        timeout: float = 0.0,
        clock: Clock = SYSTEM_CLOCK,
    ):
        self.admissible_error = admissible_error if admissible_error is not None else Pose2d()
        self.timeout = timeout
        self.clock = clock
        self.last_error = Pose2d()
        self._session: TrajectorySession | None = None

    @property
    def trajectory(self) -> Trajectory:
        if self._session is None:
            raise FollowerStateError("no trajectory is being followed; call follow_trajectory first")
        return self._session.trajectory

    def follow_trajectory(self, trajectory: Trajectory) -> None:
        self._session = TrajectorySession(trajectory, self.clock.seconds())
        logger.debug("%s following trajectory of duration %.3f", type(self).__name__, trajectory.duration())

    def elapsed_time(self) -> float:
        """Seconds since the last follow_trajectory call."""
        if self._session is None:
            raise FollowerStateError("no trajectory is being followed; call follow_trajectory first")
        return self.clock.seconds() - self._session.start_timestamp

    def _internal_is_following(self, session: TrajectorySession) -> bool:
        time_remaining = session.trajectory.duration() - self.elapsed_time()
        return time_remaining > 0.0 or (not session.admissible and time_remaining > -self.timeout)

    def is_following(self) -> bool:
        """Returns True while the current trajectory is executing."""
        session = self._session
        if session is None:
            return False
        return not session.executed_final_update or self._internal_is_following(session)

    def update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None = None) -> DriveSignal:
        """
        Run a single iteration of the trajectory follower.

        Once the trajectory duration (plus timeout while the end error is not
        admissible) has elapsed, a single zero signal is returned and the
        follower stops following.
        """
        session = self._session
        if session is None:
            raise FollowerStateError("update called before follow_trajectory")

        session.admissible = within_admissible_error(
            session.trajectory.end(), current_pose, self.admissible_error
        )
        if self._internal_is_following(session):
            return self.internal_update(current_pose, current_robot_vel)

        if not session.executed_final_update:
            logger.info(
                "%s finished trajectory after %.3fs (admissible=%s)",
                type(self).__name__,
                self.elapsed_time(),
                session.admissible,
            )
        session.executed_final_update = True
        return DriveSignal()

    @abstractmethod
    def internal_update(self, current_pose: Pose2d, current_robot_vel: Pose2d | None) -> DriveSignal: ...
