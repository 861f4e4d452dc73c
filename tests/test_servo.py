import pytest

from balancebot.servo import (
    ServoStandup,
    StandupState,
    pulse_width_us,
    servo_duty,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def duties():
    return []


@pytest.fixture
def servo(clock, duties):
    return ServoStandup(
        19, 2, 90, 0, driver=lambda ch, duty: duties.append((ch, duty)), clock=clock
    )


def test_pulse_width_endpoints():
    assert pulse_width_us(0) == 500
    assert pulse_width_us(180) == 2500


def test_duty_clamps_angle():
    assert servo_duty(-30) == servo_duty(0)
    assert servo_duty(500) == servo_duty(180)


def test_duty_monotonic():
    values = [servo_duty(a) for a in range(0, 181, 10)]
    assert values == sorted(values)
    assert values[0] < values[-1]


def test_init_retracts(servo, duties):
    assert servo.current_angle == 0
    assert duties == [(2, servo_duty(0))]
    assert servo.state is StandupState.IDLE
    assert not servo.is_standing_up()


def test_update_without_request_does_nothing(servo, duties):
    assert servo.update() is StandupState.IDLE
    assert len(duties) == 1


def test_full_sequence(servo, clock, duties):
    servo.request_standup()
    assert servo.standup_requested
    assert servo.update() is StandupState.EXTENDING
    assert servo.is_standing_up()
    assert servo.current_angle == 90
    assert duties[-1] == (2, servo_duty(90))

    clock.now = 999
    assert servo.update() is StandupState.EXTENDING
    clock.now = 1000
    assert servo.update() is StandupState.PUSHING

    clock.now = 2999
    assert servo.update() is StandupState.PUSHING
    clock.now = 3000
    assert servo.update() is StandupState.RETRACTING
    assert servo.current_angle == 0

    clock.now = 4000
    assert servo.update() is StandupState.COMPLETE
    assert servo.is_complete()
    assert servo.is_standing_up()

    clock.now = 4499
    assert servo.update() is StandupState.COMPLETE
    clock.now = 4500
    assert servo.update() is StandupState.IDLE
    assert not servo.is_standing_up()
    assert not servo.is_complete()


def test_request_ignored_while_running(servo):
    servo.request_standup()
    servo.update()
    servo.request_standup()
    assert not servo.standup_requested


def test_custom_timings(servo, clock):
    servo.set_timings(10, 20, 30)
    servo.request_standup()
    servo.update()
    clock.now = 10
    assert servo.update() is StandupState.PUSHING
    clock.now = 30
    assert servo.update() is StandupState.RETRACTING
    clock.now = 60
    assert servo.update() is StandupState.COMPLETE


def test_reset_aborts(servo):
    servo.request_standup()
    servo.update()
    servo.reset()
    assert servo.state is StandupState.IDLE
    assert not servo.is_standing_up()
    assert not servo.standup_requested
    assert servo.current_angle == 0


def test_set_angles_moves_when_idle(servo):
    servo.set_angles(120, 30)
    assert servo.extended_angle == 120
    assert servo.current_angle == 30


def test_set_angles_waits_while_running(servo):
    servo.request_standup()
    servo.update()
    servo.set_angles(120, 30)
    assert servo.current_angle == 90
    assert servo.retracted_angle == 30


def test_clock_wraparound(clock, duties):
    clock.now = 0xFFFFFFFF
    s = ServoStandup(19, 2, 90, 0, clock=clock)
    s.request_standup()
    s.update()
    clock.now = 0xFFFFFFFF + 1000
    assert s.update() is StandupState.PUSHING