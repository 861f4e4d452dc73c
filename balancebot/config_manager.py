"""Runtime-tunable parameters kept in a key/value store.

Every parameter is persisted as a 4-byte little-endian float blob under
a short key, so a dictionary, a database-backed mapping or any other
``MutableMapping[str, bytes]`` can serve as the store.
"""

from __future__ import annotations

import enum
import logging
import re
import struct
from dataclasses import dataclass
from typing import MutableMapping, Optional

from balancebot import settings

_log = logging.getLogger(__name__)

_BLOB = struct.Struct("<f")
_COMMAND_TOKEN_LIMIT = 15

_INT = r"[+-]?\d+"
_FLOAT = (
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|(?i:inf(?:inity)?|nan))"
)
_SET_RE = re.compile(rf"SET\s*({_INT})\s*({_FLOAT})")
_GET_RE = re.compile(rf"GET\s*({_INT})")


class ConfigError(Exception):
    """Raised for an unknown parameter, a bad command or a store failure."""


class ParamId(enum.IntEnum):
    """Identifiers of the tunable parameters."""

    BALANCE_KP = 0
    BALANCE_KI = 1
    BALANCE_KD = 2
    VELOCITY_KP = 3
    VELOCITY_KI = 4
    VELOCITY_KD = 5
    KALMAN_Q_ANGLE = 6
    KALMAN_Q_BIAS = 7
    KALMAN_R_MEASURE = 8
    MAX_TILT_ANGLE = 9
    FALLEN_THRESHOLD = 10


PARAM_NAMES = {
    ParamId.BALANCE_KP: "Balance_Kp",
    ParamId.BALANCE_KI: "Balance_Ki",
    ParamId.BALANCE_KD: "Balance_Kd",
    ParamId.VELOCITY_KP: "Velocity_Kp",
    ParamId.VELOCITY_KI: "Velocity_Ki",
    ParamId.VELOCITY_KD: "Velocity_Kd",
    ParamId.KALMAN_Q_ANGLE: "Kalman_Q_Angle",
    ParamId.KALMAN_Q_BIAS: "Kalman_Q_Bias",
    ParamId.KALMAN_R_MEASURE: "Kalman_R_Measure",
    ParamId.MAX_TILT_ANGLE: "Max_Tilt_Angle",
    ParamId.FALLEN_THRESHOLD: "Fallen_Threshold",
}

STORE_KEYS = {
    ParamId.BALANCE_KP: "bal_kp",
    ParamId.BALANCE_KI: "bal_ki",
    ParamId.BALANCE_KD: "bal_kd",
    ParamId.VELOCITY_KP: "vel_kp",
    ParamId.VELOCITY_KI: "vel_ki",
    ParamId.VELOCITY_KD: "vel_kd",
    ParamId.KALMAN_Q_ANGLE: "kal_q_ang",
    ParamId.KALMAN_Q_BIAS: "kal_q_bias",
    ParamId.KALMAN_R_MEASURE: "kal_r_meas",
    ParamId.MAX_TILT_ANGLE: "max_tilt",
    ParamId.FALLEN_THRESHOLD: "fall_thresh",
}


@dataclass
class TuningParams:
    """Controller gains, filter noise and safety angles."""

    balance_kp: float = settings.BALANCE_PID_KP
    balance_ki: float = settings.BALANCE_PID_KI
    balance_kd: float = settings.BALANCE_PID_KD
    velocity_kp: float = 1.0
    velocity_ki: float = 0.1
    velocity_kd: float = 0.0
    kalman_q_angle: float = settings.KALMAN_Q_ANGLE
    kalman_q_bias: float = settings.KALMAN_Q_BIAS
    kalman_r_measure: float = settings.KALMAN_R_MEASURE
    max_tilt_angle: float = settings.FALLEN_ANGLE_THRESHOLD
    fallen_threshold: float = settings.FALLEN_ANGLE_THRESHOLD


def param_name(param_id: int) -> str:
    """Return the readable name of ``param_id``, or ``"Unknown"``."""
    try:
        return PARAM_NAMES[ParamId(param_id)]
    except ValueError:
        return "Unknown"


def _param_id(param_id: int) -> ParamId:
    try:
        return ParamId(param_id)
    except ValueError:
        raise ConfigError(f"Invalid parameter ID: {param_id}") from None


def _field(param_id: ParamId) -> str:
    return param_id.name.lower()


def _blob(value: float) -> bytes:
    try:
        return _BLOB.pack(value)
    except (struct.error, OverflowError) as exc:
        raise ConfigError(f"cannot store {value!r}: {exc}") from exc


class ConfigManager:
    """Holds the current tuning parameters and persists them to ``store``.

    On construction the defaults are set and then overridden by whatever
    the store holds. A store holding none of the parameters (nothing saved
    yet) or one that cannot be read gets the defaults written to it.
    """

    def __init__(self, store: Optional[MutableMapping[str, bytes]] = None) -> None:
        self.store: MutableMapping[str, bytes] = {} if store is None else store
        self.params = TuningParams()
        try:
            self.load_all()
        except ConfigError:
            _log.warning("Failed to load config from store, using defaults")
            try:
                self.save_all()
            except ConfigError as exc:
                _log.error("Failed to save default config: %s", exc)
        _log.info("Config manager initialized")

    def set_param(self, param_id: int, value: float, save: bool = False) -> None:
        """Set one parameter in memory and, if ``save``, in the store."""
        pid = _param_id(param_id)
        value = float(value)
        setattr(self.params, _field(pid), value)
        _log.info("Set %s = %.3f", PARAM_NAMES[pid], value)
        if save:
            self._write({STORE_KEYS[pid]: _blob(value)})

    def get_param(self, param_id: int) -> float:
        """Return the current value of one parameter."""
        return getattr(self.params, _field(_param_id(param_id)))

    def save_all(self) -> None:
        """Write every parameter to the store."""
        blobs = {
            STORE_KEYS[pid]: _blob(getattr(self.params, _field(pid)))
            for pid in ParamId
        }
        self._write(blobs)
        _log.info("All parameters saved to store")

    def load_all(self) -> None:
        """Read every stored parameter; missing or malformed ones keep their value.

        Raises :class:`ConfigError` if the store cannot be read or holds
        none of the parameters.
        """
        try:
            blobs = {pid: self.store.get(STORE_KEYS[pid]) for pid in ParamId}
        except OSError as exc:
            raise ConfigError(f"Failed to open store for reading: {exc}") from exc
        if all(blob is None for blob in blobs.values()):
            raise ConfigError("no saved parameters")
        for pid, blob in blobs.items():
            if blob is None or len(blob) != _BLOB.size:
                _log.warning("Failed to load %s, using default", PARAM_NAMES[pid])
                continue
            (value,) = _BLOB.unpack(bytes(blob))
            setattr(self.params, _field(pid), value)
        _log.info("Parameters loaded from store")

    def reset_defaults(self, save: bool = False) -> None:
        """Restore the default values and, if ``save``, store them."""
        self.params = TuningParams()
        _log.info("Parameters reset to defaults")
        if save:
            self.save_all()

    def handle_command(self, command: str) -> Optional[float]:
        """Run a text tuning command and return the value it reads, if any.

        Commands are ``SET <id> <value>`` (stored at once), ``GET <id>``,
        ``RESET`` (defaults, stored) and ``SAVE``.
        """
        if command is None:
            raise ConfigError("no command")
        tokens = command.split()
        if not tokens:
            raise ConfigError("empty command")
        verb = tokens[0][:_COMMAND_TOKEN_LIMIT]

        if verb == "SET":
            match = _SET_RE.match(command)
            if match and 0 <= int(match.group(1)) < len(ParamId):
                self.set_param(int(match.group(1)), float(match.group(2)), True)
                return None
        elif verb == "GET":
            match = _GET_RE.match(command)
            if match and 0 <= int(match.group(1)) < len(ParamId):
                pid = ParamId(int(match.group(1)))
                value = self.get_param(pid)
                _log.info("%s = %.3f", PARAM_NAMES[pid], value)
                return value
        elif verb == "RESET":
            self.reset_defaults(True)
            return None
        elif verb == "SAVE":
            self.save_all()
            return None

        raise ConfigError(f"invalid command: {command!r}")

    def status_string(self) -> str:
        """Return a one-line summary of all parameters."""
        p = self.params
        return (
            f"PID:Bal[{p.balance_kp:.2f},{p.balance_ki:.3f},{p.balance_kd:.2f}] "
            f"Vel[{p.velocity_kp:.2f},{p.velocity_ki:.3f},{p.velocity_kd:.2f}] "
            f"Kalman:[{p.kalman_q_angle:.3f},{p.kalman_q_bias:.3f},"
            f"{p.kalman_r_measure:.3f}] "
            f"Tilt:{p.max_tilt_angle:.1f} Fall:{p.fallen_threshold:.1f}"
        )

    def _write(self, blobs: dict[str, bytes]) -> None:
        try:
            for key, blob in blobs.items():
                self.store[key] = blob
        except OSError as exc:
            raise ConfigError(f"Failed to write store: {exc}") from exc