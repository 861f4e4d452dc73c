"""Servo arm that pushes a fallen robot back up."""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Optional

_log = logging.getLogger(__name__)

SERVO_MIN_PULSEWIDTH_US = 500
SERVO_MAX_PULSEWIDTH_US = 2500
SERVO_MAX_DEGREE = 180
SERVO_FREQ_HZ = 50
_DUTY_RESOLUTION_BITS = 14
_COMPLETE_HOLD_MS = 500
_TICK_MASK = 0xFFFFFFFF


class StandupState(enum.Enum):
    """Phase of the stand-up sequence."""

    IDLE = 0
    EXTENDING = 1
    PUSHING = 2
    RETRACTING = 3
    COMPLETE = 4


def _clamp_angle(angle: int) -> int:
    return max(0, min(SERVO_MAX_DEGREE, int(angle)))


def pulse_width_us(angle: int) -> int:
    """Return the pulse width in microseconds for ``angle`` degrees."""
    span = SERVO_MAX_PULSEWIDTH_US - SERVO_MIN_PULSEWIDTH_US
    return SERVO_MIN_PULSEWIDTH_US + (span * int(angle)) // SERVO_MAX_DEGREE


def servo_duty(angle: int) -> int:
    """Return the 14-bit PWM duty for ``angle``, clamped to 0..180 degrees."""
    width = pulse_width_us(_clamp_angle(angle))
    period_us = 1_000_000 // SERVO_FREQ_HZ
    return (width * ((1 << _DUTY_RESOLUTION_BITS) - 1)) // period_us


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class ServoStandup:
    """Extend, push, retract: the stand-up sequence driven by :meth:`update`.

    ``driver`` receives ``(channel, duty)`` whenever the servo moves and
    ``clock`` returns the current time in milliseconds.
    """

    def __init__(
        self,
        pin: int,
        channel: int,
        extend_angle: int,
        retract_angle: int,
        driver: Optional[Callable[[int, int], None]] = None,
        clock: Callable[[], int] = _monotonic_ms,
    ) -> None:
        self.pin = pin
        self.channel = channel
        self.extended_angle = extend_angle
        self.retracted_angle = retract_angle
        self.current_angle = retract_angle
        self.state = StandupState.IDLE
        self.state_start_time = 0
        self.extend_duration = 1000
        self.push_duration = 2000
        self.retract_duration = 1000
        self.standup_requested = False
        self.standup_in_progress = False
        self.duty = 0
        self._driver = driver
        self._clock = clock
        self._set_angle(retract_angle)
        _log.info("Servo standup initialized")

    def _now(self) -> int:
        return int(self._clock()) & _TICK_MASK

    def _set_angle(self, angle: int) -> None:
        angle = _clamp_angle(angle)
        self.duty = servo_duty(angle)
        if self._driver is not None:
            self._driver(self.channel, self.duty)
        self.current_angle = angle

    def request_standup(self) -> None:
        """Ask for a stand-up; ignored while one is running."""
        if not self.standup_in_progress:
            self.standup_requested = True

    def update(self) -> StandupState:
        """Advance the sequence and return the current phase."""
        if self.standup_requested and not self.standup_in_progress:
            self.standup_requested = False
            self.standup_in_progress = True
            self.state = StandupState.EXTENDING
            self.state_start_time = self._now()
            _log.info("Starting standup sequence")

        if not self.standup_in_progress:
            return self.state

        now = self._now()
        elapsed = (now - self.state_start_time) & _TICK_MASK

        if self.state is StandupState.EXTENDING:
            if elapsed == 0 or self.current_angle != self.extended_angle:
                self._set_angle(self.extended_angle)
                _log.info("Extending servo to %d degrees", self.extended_angle)
            if elapsed >= self.extend_duration:
                self.state = StandupState.PUSHING
                self.state_start_time = now
                _log.info("Holding position for push")
        elif self.state is StandupState.PUSHING:
            if elapsed >= self.push_duration:
                self.state = StandupState.RETRACTING
                self.state_start_time = now
                self._set_angle(self.retracted_angle)
                _log.info("Retracting servo to %d degrees", self.retracted_angle)
        elif self.state is StandupState.RETRACTING:
            if elapsed >= self.retract_duration:
                self.state = StandupState.COMPLETE
                self.state_start_time = now
                _log.info("Standup sequence complete")
        elif self.state is StandupState.COMPLETE:
            if elapsed >= _COMPLETE_HOLD_MS:
                self.state = StandupState.IDLE
                self.standup_in_progress = False
                _log.info("Ready for next standup")
        return self.state

    def is_standing_up(self) -> bool:
        """Whether a stand-up sequence is running."""
        return self.standup_in_progress

    def is_complete(self) -> bool:
        """Whether the sequence has just completed."""
        return self.state is StandupState.COMPLETE

    def reset(self) -> None:
        """Abort any sequence and retract the arm."""
        self.state = StandupState.IDLE
        self.standup_in_progress = False
        self.standup_requested = False
        self._set_angle(self.retracted_angle)
        _log.info("Servo standup reset")

    def set_timings(self, extend: int, push: int, retract: int) -> None:
        """Set the duration of each phase in milliseconds."""
        self.extend_duration = extend
        self.push_duration = push
        self.retract_duration = retract

    def set_angles(self, extend: int, retract: int) -> None:
        """Set the arm angles; retracts at once unless a sequence is running."""
        self.extended_angle = extend
        self.retracted_angle = retract
        if not self.standup_in_progress:
            self._set_angle(retract)