"""Robot operating states and the transition rules between them."""

from __future__ import annotations

import enum

from balancebot import settings


class RobotState(enum.Enum):
    """Operating mode of the robot."""

    INIT = 0
    IDLE = 1
    BALANCING = 2
    STANDING_UP = 3
    FALLEN = 4
    ERROR = 5


def state_name(state: object) -> str:
    """Return the display name of ``state``, or ``"UNKNOWN"``."""
    if isinstance(state, RobotState):
        return state.name
    return "UNKNOWN"


def next_state(
    current: RobotState,
    angle: float,
    balance: bool,
    standup: bool,
    servo_standing_up: bool,
    servo_complete: bool,
) -> RobotState:
    """Return the state that follows ``current`` for the given inputs."""
    fallen = abs(angle) > settings.FALLEN_ANGLE_THRESHOLD

    if current is RobotState.IDLE:
        new = current
        if balance and not servo_standing_up:
            new = RobotState.BALANCING
        elif standup:
            new = RobotState.STANDING_UP
        if fallen:
            new = RobotState.FALLEN
        return new

    if current is RobotState.BALANCING:
        if not balance:
            return RobotState.IDLE
        if standup:
            return RobotState.STANDING_UP
        if fallen:
            return RobotState.FALLEN
        return current

    if current is RobotState.STANDING_UP:
        if servo_complete or not servo_standing_up:
            return RobotState.IDLE
        return current

    if current is RobotState.FALLEN:
        return RobotState.STANDING_UP if standup else current

    if current is RobotState.ERROR:
        return current

    return RobotState.ERROR