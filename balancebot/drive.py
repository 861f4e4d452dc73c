"""Turning the balance output and the remote turn command into wheel speeds."""

from __future__ import annotations

from balancebot.ble_controller import RemoteCommand
from balancebot.motor import MotorControl

_SPEED_LIMIT = 255.0
_TURN_SCALE = 0.5


def _clamp(value: float) -> float:
    return max(-_SPEED_LIMIT, min(_SPEED_LIMIT, value))


def motor_speeds(motor_output: float, command: RemoteCommand) -> tuple[int, int]:
    """Return ``(left, right)`` speeds in -255..255 for the given output and turn."""
    turn_adjustment = command.turn * _TURN_SCALE
    left = _clamp(motor_output - turn_adjustment)
    right = _clamp(motor_output + turn_adjustment)
    return int(left), int(right)


def drive_motors(
    left: MotorControl,
    right: MotorControl,
    motor_output: float,
    command: RemoteCommand,
) -> tuple[int, int]:
    """Apply the wheel speeds to both motors and return them."""
    left_speed, right_speed = motor_speeds(motor_output, command)
    left.set_speed(left_speed)
    right.set_speed(right_speed)
    return left_speed, right_speed