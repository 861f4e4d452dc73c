"""H-bridge DC motor command: direction pins plus PWM duty."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

MAX_DUTY = 255


@dataclass(frozen=True)
class MotorOutput:
    """Levels of the two direction pins and the PWM duty driving a motor."""

    a_level: int = 0
    b_level: int = 0
    duty: int = 0


@dataclass
class MotorControl:
    """One motor behind an H-bridge.

    ``driver``, when given, receives every new :class:`MotorOutput` so the
    command can be applied to real pins.
    """

    pin_a: int
    pin_b: int
    enable_pin: int
    channel: int
    driver: Optional[Callable[[MotorOutput], None]] = None
    output: MotorOutput = field(default_factory=MotorOutput)

    def set_speed(self, speed: int) -> MotorOutput:
        """Drive at ``speed`` in -255..255; positive is forward, 0 brakes."""
        speed = max(-MAX_DUTY, min(MAX_DUTY, int(speed)))
        if speed > 0:
            output = MotorOutput(1, 0, speed)
        elif speed < 0:
            output = MotorOutput(0, 1, -speed)
        else:
            output = MotorOutput(0, 0, 0)
        self.output = output
        if self.driver is not None:
            self.driver(output)
        return output

    def stop(self) -> MotorOutput:
        """Brake the motor."""
        return self.set_speed(0)