"""Control logic for a two-wheeled self-balancing robot: filtering, PID control,
the BLE message protocol, the stand-up servo, tuning storage and the state machine."""

__version__ = "1.0.0"

__all__ = [
    "ble_controller",
    "config_manager",
    "drive",
    "error_recovery",
    "kalman",
    "motor",
    "pid",
    "protocol",
    "robot",
    "servo",
    "settings",
    "state_machine",
    "telemetry",
]