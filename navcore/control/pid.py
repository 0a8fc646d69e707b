"""
PID controller with optional input wrapping and output saturation.
"""

import logging
import math
from dataclasses import dataclass

from navcore.config import TRACE
from navcore.utils.clock import SYSTEM_CLOCK, Clock
from navcore.utils.mathutil import clamp, wrap

logger = logging.getLogger(__name__)


@dataclass
class PIDCoefficients:
    """Proportional, integral, and derivative gains used by PIDController."""

    kP: float = 0.0
    kI: float = 0.0
    kD: float = 0.0


class PIDController:
    """
    PID controller.

    The first update after construction or reset() only records the error and
    timestamp and returns 0.0, since there is no interval to differentiate or
    integrate over yet.

    Args:
        pid: traditional PID coefficients
        clock: monotonic time source
    """

    def __init__(self, pid: PIDCoefficients, clock: Clock = SYSTEM_CLOCK):
        self._pid = pid
        self.clock = clock

        self.target_position: float = 0.0
        self.target_velocity: float = 0.0
        self.tolerance: float = 0.05

        self.input_bounded = False
        self._min_input = 0.0
        self._max_input = 0.0

        self.output_bounded = False
        self._min_output = 0.0
        self._max_output = 0.0

        self._error_sum = 0.0
        self._is_integrating = True
        self._last_update_timestamp = math.nan
        self.last_error: float = 0.0

    @property
    def pid(self) -> PIDCoefficients:
        return self._pid

    @pid.setter
    def pid(self, value: PIDCoefficients) -> None:
        if value != self._pid:
            self.reset()
        self._pid = value

    def set_target(self, target_position: float, target_velocity: float | None = None) -> None:
        self.target_position = target_position
        if target_velocity is not None:
            self.target_velocity = target_velocity

    def set_input_bounds(self, min_input: float, max_input: float) -> None:
        """Bounds the input; min and max are treated as modularly equivalent (the input wraps)."""
        if min_input < max_input:
            self.input_bounded = True
            self._min_input = min_input
            self._max_input = max_input

    def set_output_bounds(self, min_output: float, max_output: float) -> None:
        if min_output < max_output:
            self.output_bounded = True
            self._min_output = min_output
            self._max_output = max_output

    def is_at_set_point(self) -> bool:
        return abs(self.last_error) <= self.tolerance

    def _position_error(self, measured_position: float) -> float:
        error = self.target_position - measured_position
        if self.input_bounded:
            error = wrap(error, self._min_input, self._max_input)
        return error

    def update(self, measured_position: float, measured_velocity: float | None = None) -> float:
        """
        Run a single iteration of the controller.

        Args:
            measured_position: measured position (feedback)
            measured_velocity: measured velocity; when given the derivative term
                uses target_velocity - measured_velocity instead of the finite
                difference of the error
        """
        now = self.clock.seconds()
        error = self._position_error(measured_position)

        if math.isnan(self._last_update_timestamp):
            self.last_error = error
            self._last_update_timestamp = now
            return 0.0

        dt = now - self._last_update_timestamp
        if self._is_integrating:
            self._error_sum += 0.5 * (error + self.last_error) * dt

        if measured_velocity is not None:
            error_deriv = self.target_velocity - measured_velocity
        elif dt > 0.0:
            error_deriv = (error - self.last_error) / dt
        else:
            error_deriv = 0.0

        self.last_error = error
        self._last_update_timestamp = now

        pid = self._pid
        output = pid.kP * error + pid.kI * self._error_sum + pid.kD * error_deriv

        if not self.output_bounded:
            self._is_integrating = True
            return output

        clamped = clamp(output, self._min_output, self._max_output)
        if (
            self._is_integrating
            and output != clamped
            and pid.kI != 0.0
            and self._min_output <= output - pid.kI * self._error_sum <= self._max_output
        ):
            # the integral term alone saturates the output; unwind it
            self._error_sum -= (output - clamped) / pid.kI
            logger.log(TRACE, "pid_integral_unwound sum=%.4f", self._error_sum)
        self._is_integrating = output == clamped
        return clamped

    def reset(self) -> None:
        """Clears the integral sum and the first-update latch."""
        self._error_sum = 0.0
        self._is_integrating = True
        self.last_error = 0.0
        self._last_update_timestamp = math.nan
