"""PID controller and the cascaded angle/velocity balance controller."""

from __future__ import annotations


def _clamp(value: float, minimum: float, maximum: float) -> float:
    if value > maximum:
        return maximum
    if value < minimum:
        return minimum
    return value


class PIDController:
    """Textbook PID with integral clamping and derivative-kick suppression."""

    def __init__(self, kp: float, ki: float, kd: float) -> None:
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.setpoint = 0.0
        self.integral = 0.0
        self.previous_error = 0.0
        self.output = 0.0
        self.output_min = -255.0
        self.output_max = 255.0
        self.first_run = True

    def set_tunings(self, kp: float, ki: float, kd: float) -> None:
        """Change the gains, keeping the accumulated state."""
        self.kp = kp
        self.ki = ki
        self.kd = kd

    def set_output_limits(self, minimum: float, maximum: float) -> None:
        """Set output bounds and clamp current output and integral to them."""
        self.output_min = minimum
        self.output_max = maximum
        self.output = _clamp(self.output, minimum, maximum)
        self.integral = _clamp(self.integral, minimum, maximum)

    def compute(self, measurement: float, dt: float) -> float:
        """Return the control output for ``measurement`` after ``dt`` seconds.

        The first call only records the error and returns 0.0; a
        non-positive ``dt`` returns the previous output unchanged.
        """
        if self.first_run:
            self.previous_error = self.setpoint - measurement
            self.first_run = False
            return 0.0

        if dt <= 0.0:
            return self.output

        error = self.setpoint - measurement

        self.integral = _clamp(
            self.integral + error * dt, self.output_min, self.output_max
        )
        derivative = (error - self.previous_error) / dt

        raw = self.kp * error + self.ki * self.integral + self.kd * derivative
        self.output = _clamp(raw, self.output_min, self.output_max)
        self.previous_error = error
        return self.output

    def reset(self) -> None:
        """Clear the accumulated state so the next call starts fresh."""
        self.integral = 0.0
        self.previous_error = 0.0
        self.output = 0.0
        self.first_run = True


class BalancePID:
    """Velocity loop feeding a target tilt into a pitch-angle loop."""

    def __init__(self) -> None:
        self.pitch_pid = PIDController(50.0, 0.0, 2.0)
        self.velocity_pid = PIDController(1.0, 0.1, 0.0)
        self.target_velocity = 0.0
        self.max_tilt_angle = 45.0
        self.pitch_pid.set_output_limits(-255.0, 255.0)
        self.velocity_pid.set_output_limits(-10.0, 10.0)

    def set_balance_tunings(self, kp: float, ki: float, kd: float) -> None:
        """Set the pitch-angle loop gains."""
        self.pitch_pid.set_tunings(kp, ki, kd)

    def set_velocity_tunings(self, kp: float, ki: float, kd: float) -> None:
        """Set the velocity loop gains."""
        self.velocity_pid.set_tunings(kp, ki, kd)

    def set_target_velocity(self, velocity: float) -> None:
        """Set the desired travel speed in cm/s."""
        self.target_velocity = velocity
        self.velocity_pid.setpoint = velocity

    def compute_balance(
        self,
        current_angle: float,
        gyro_rate: float,
        current_velocity: float,
        dt: float,
    ) -> float:
        """Return the motor command; 0.0 once the tilt exceeds the limit.

        ``gyro_rate`` is accepted for interface completeness and unused.
        """
        if abs(current_angle) > self.max_tilt_angle:
            return 0.0

        tilt_target = self.velocity_pid.compute(current_velocity, dt)
        self.pitch_pid.setpoint = tilt_target
        return self.pitch_pid.compute(current_angle, dt)

    def reset(self) -> None:
        """Reset both loops."""
        self.pitch_pid.reset()
        self.velocity_pid.reset()