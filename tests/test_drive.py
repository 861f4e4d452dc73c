import pytest

from balancebot.ble_controller import RemoteCommand
from balancebot.drive import drive_motors, motor_speeds
from balancebot.motor import MotorControl, MotorOutput


def test_no_turn_gives_equal_speeds():
    left, right = motor_speeds(100.0, RemoteCommand())
    assert left == right == 100


@pytest.mark.parametrize("output,turn", [(100.0, 40), (-50.0, -20), (0.0, 100)])
def test_turn_splits_symmetrically(output, turn):
    left, right = motor_speeds(output, RemoteCommand(turn=turn))
    assert left + right == int(2 * output)
    assert right - left == turn


def test_speeds_are_clamped():
    left, right = motor_speeds(250.0, RemoteCommand(turn=100))
    assert right == 255
    assert left <= 255
    left, right = motor_speeds(-300.0, RemoteCommand())
    assert (left, right) == (-255, -255)


def test_fraction_truncates_toward_zero():
    assert motor_speeds(10.7, RemoteCommand()) == (10, 10)
    assert motor_speeds(-10.7, RemoteCommand()) == (-10, -10)


def test_drive_motors_applies_to_both():
    left = MotorControl(10, 11, 8, 0)
    right = MotorControl(20, 21, 18, 1)
    speeds = drive_motors(left, right, 0.0, RemoteCommand(turn=60))
    assert speeds == motor_speeds(0.0, RemoteCommand(turn=60))
    assert left.output == MotorOutput(0, 1, -speeds[0])
    assert right.output == MotorOutput(1, 0, speeds[1])


def test_drive_motors_zero_brakes():
    left = MotorControl(10, 11, 8, 0)
    right = MotorControl(20, 21, 18, 1)
    assert drive_motors(left, right, 0.0, RemoteCommand()) == (0, 0)
    assert left.output == MotorOutput(0, 0, 0)
    assert right.output == MotorOutput(0, 0, 0)