import pytest

from balancebot.motor import MotorControl, MotorOutput


def make_motor(driver=None):
    return MotorControl(pin_a=10, pin_b=11, enable_pin=8, channel=0, driver=driver)


def test_initial_output_is_idle():
    motor = make_motor()
    assert motor.output == MotorOutput(0, 0, 0)


def test_forward_sets_a_high():
    motor = make_motor()
    assert motor.set_speed(120) == MotorOutput(1, 0, 120)
    assert motor.output == MotorOutput(1, 0, 120)


def test_reverse_sets_b_high_with_magnitude():
    motor = make_motor()
    assert motor.set_speed(-80) == MotorOutput(0, 1, 80)


def test_zero_brakes():
    motor = make_motor()
    assert motor.set_speed(0) == MotorOutput(0, 0, 0)


@pytest.mark.parametrize(
    "speed, expected",
    [(300, MotorOutput(1, 0, 255)), (-1000, MotorOutput(0, 1, 255)), (255, MotorOutput(1, 0, 255))],
)
def test_speed_is_clamped(speed, expected):
    motor = make_motor()
    assert motor.set_speed(speed) == expected


def test_stop_after_motion():
    motor = make_motor()
    motor.set_speed(200)
    assert motor.stop() == MotorOutput(0, 0, 0)
    assert motor.output.duty == 0


def test_driver_receives_each_output():
    received = []
    motor = make_motor(driver=received.append)
    motor.set_speed(50)
    motor.set_speed(-50)
    motor.stop()
    assert received == [MotorOutput(1, 0, 50), MotorOutput(0, 1, 50), MotorOutput(0, 0, 0)]


def test_fractional_speed_truncates():
    motor = make_motor()
    assert motor.set_speed(42.9).duty == 42
    assert motor.set_speed(-42.9) == MotorOutput(0, 1, 42)


def test_direction_pins_never_both_high():
    motor = make_motor()
    for speed in range(-300, 301, 7):
        out = motor.set_speed(speed)
        assert not (out.a_level and out.b_level)
        assert 0 <= out.duty <= 255