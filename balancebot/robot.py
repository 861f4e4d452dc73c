"""The robot's control loop: state transitions, balancing and remote commands."""

from __future__ import annotations

import logging
from typing import Optional

from balancebot import settings
from balancebot.ble_controller import BleController, RemoteCommand
from balancebot.config_manager import TuningParams
from balancebot.drive import drive_motors
from balancebot.kalman import KalmanFilter
from balancebot.motor import MotorControl
from balancebot.pid import BalancePID
from balancebot.servo import ServoStandup
from balancebot.state_machine import RobotState, next_state, state_name

_log = logging.getLogger(__name__)

_DIRECTION_SCALE = 10.0


class Robot:
    """Ties motors, stand-up servo, remote link and controllers together.

    ``params`` supplies tuned gains; without it the built-in defaults apply.
    """

    def __init__(
        self,
        left_motor: MotorControl,
        right_motor: MotorControl,
        servo: ServoStandup,
        ble: Optional[BleController] = None,
        params: Optional[TuningParams] = None,
    ) -> None:
        self.left_motor = left_motor
        self.right_motor = right_motor
        self.servo = servo
        self.ble = ble
        self.dt = settings.BALANCE_UPDATE_RATE_MS / 1000.0
        self.balancing_enabled = True

        self.kalman = KalmanFilter()
        self.kalman.set_angle(0.0)
        if params is not None:
            self.kalman.q_angle = params.kalman_q_angle
            self.kalman.q_bias = params.kalman_q_bias
            self.kalman.r_measure = params.kalman_r_measure

        self.balance_pid = BalancePID()
        if params is not None:
            self.balance_pid.set_balance_tunings(
                params.balance_kp, params.balance_ki, params.balance_kd
            )
            self.balance_pid.set_velocity_tunings(
                params.velocity_kp, params.velocity_ki, params.velocity_kd
            )
            self.balance_pid.max_tilt_angle = params.max_tilt_angle
        else:
            self.balance_pid.set_balance_tunings(
                settings.BALANCE_PID_KP, settings.BALANCE_PID_KI, settings.BALANCE_PID_KD
            )
            self.balance_pid.set_velocity_tunings(1.0, 0.1, 0.0)
            self.balance_pid.max_tilt_angle = settings.FALLEN_ANGLE_THRESHOLD
        self.balance_pid.set_target_velocity(0.0)

        self.state = RobotState.INIT
        self._set_state(RobotState.IDLE)

    def _set_state(self, new_state: RobotState) -> None:
        if new_state is not self.state:
            _log.info(
                "State change: %s -> %s", state_name(self.state), state_name(new_state)
            )
            self.state = new_state

    def _stop(self) -> tuple[int, int]:
        self.left_motor.stop()
        self.right_motor.stop()
        return 0, 0

    def update_state(self, angle: float, command: RemoteCommand) -> RobotState:
        """Apply the transition rules for this tick and return the new state."""
        self._set_state(
            next_state(
                self.state,
                angle,
                command.balance,
                command.standup,
                self.servo.is_standing_up(),
                self.servo.is_complete(),
            )
        )
        return self.state

    def balance_step(
        self,
        angle: float,
        gyro_rate: Optional[float],
        velocity: float,
        command: RemoteCommand,
    ) -> tuple[int, int]:
        """Run one control tick and return the ``(left, right)`` wheel speeds.

        ``gyro_rate`` of ``None`` means the IMU could not be read; the
        motors are then stopped.
        """
        state = self.update_state(angle, command)

        if state is RobotState.BALANCING:
            if gyro_rate is None:
                return self._stop()
            self.balance_pid.set_target_velocity(command.direction * _DIRECTION_SCALE)
            output = self.balance_pid.compute_balance(
                angle, gyro_rate, velocity, self.dt
            )
            return drive_motors(self.left_motor, self.right_motor, output, command)

        speeds = self._stop()
        self.balance_pid.reset()
        return speeds

    def handle_remote_command(
        self,
        command: RemoteCommand,
        angle: float,
        velocity: float,
        battery_voltage: float,
    ) -> bool:
        """React to a remote command; return whether a stand-up was requested."""
        requested = False
        if command.standup and not self.servo.is_standing_up():
            self.servo.request_standup()
            requested = True
            if self.ble is not None:
                try:
                    self.ble.send_status(angle, velocity, battery_voltage)
                except ConnectionError:
                    _log.debug("No client connected; status not sent")
        self.balancing_enabled = command.balance
        return requested