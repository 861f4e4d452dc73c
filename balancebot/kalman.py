"""One-dimensional Kalman filter fusing accelerometer angle and gyro rate."""

from __future__ import annotations

from dataclasses import dataclass, field


def _zero_covariance() -> list[list[float]]:
    return [[0.0, 0.0], [0.0, 0.0]]


@dataclass
class KalmanFilter:
    """Angle estimator whose state vector is ``[angle, gyro bias]``.

    The noise defaults suit a typical MPU6050-class IMU.
    """

    q_angle: float = 0.001
    q_bias: float = 0.003
    r_measure: float = 0.03
    angle: float = 0.0
    bias: float = 0.0
    rate: float = 0.0
    p: list[list[float]] = field(default_factory=_zero_covariance)
    k: list[float] = field(default_factory=lambda: [0.0, 0.0])
    y: float = 0.0
    s: float = 0.0

    def set_angle(self, angle: float) -> None:
        """Seed the angle estimate, usually from the accelerometer."""
        self.angle = angle

    def update(self, new_angle: float, new_rate: float, dt: float) -> float:
        """Run one predict/correct step and return the estimated angle.

        ``new_angle`` is the accelerometer angle in degrees, ``new_rate``
        the gyro rate in degrees per second and ``dt`` the step in seconds.
        """
        p = self.p

        # Predict using the bias-corrected gyro rate.
        self.rate = new_rate - self.bias
        self.angle += dt * self.rate

        p[0][0] += dt * (dt * p[1][1] - p[0][1] - p[1][0] + self.q_angle)
        p[0][1] -= dt * p[1][1]
        p[1][0] -= dt * p[1][1]
        p[1][1] += self.q_bias * dt

        # Correct with the accelerometer measurement.
        self.s = p[0][0] + self.r_measure
        self.k = [p[0][0] / self.s, p[1][0] / self.s]

        self.y = new_angle - self.angle
        self.angle += self.k[0] * self.y
        self.bias += self.k[1] * self.y

        p00, p01 = p[0][0], p[0][1]
        p[0][0] -= self.k[0] * p00
        p[0][1] -= self.k[0] * p01
        p[1][0] -= self.k[1] * p00
        p[1][1] -= self.k[1] * p01

        return self.angle