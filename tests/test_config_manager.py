import struct

import pytest

from balancebot import settings
from balancebot.config_manager import (
    STORE_KEYS,
    ConfigError,
    ConfigManager,
    ParamId,
    TuningParams,
    param_name,
)


class FailingStore(dict):
    def __setitem__(self, key, value):
        raise OSError("flash write failed")


def test_defaults_come_from_settings():
    manager = ConfigManager()
    assert manager.get_param(ParamId.BALANCE_KP) == settings.BALANCE_PID_KP
    assert manager.get_param(ParamId.KALMAN_R_MEASURE) == settings.KALMAN_R_MEASURE
    assert manager.get_param(ParamId.FALLEN_THRESHOLD) == settings.FALLEN_ANGLE_THRESHOLD
    assert manager.params == TuningParams()


def test_empty_store_receives_defaults():
    store = {}
    ConfigManager(store)
    assert set(store) == set(STORE_KEYS.values())
    assert store["bal_kp"] == struct.pack("<f", settings.BALANCE_PID_KP)
    assert all(len(blob) == 4 for blob in store.values())


def test_values_persist_across_managers():
    store = {}
    first = ConfigManager(store)
    first.set_param(ParamId.VELOCITY_KP, 12.5, save=True)
    second = ConfigManager(store)
    assert second.get_param(ParamId.VELOCITY_KP) == 12.5


def test_set_without_save_leaves_store_untouched():
    store = {}
    manager = ConfigManager(store)
    before = dict(store)
    manager.set_param(ParamId.BALANCE_KD, 7.25)
    assert manager.get_param(ParamId.BALANCE_KD) == 7.25
    assert store == before


def test_malformed_blob_keeps_default():
    store = {"bal_kp": b"\x01\x02", "max_tilt": struct.pack("<f", 30.0)}
    manager = ConfigManager(store)
    assert manager.get_param(ParamId.BALANCE_KP) == settings.BALANCE_PID_KP
    assert manager.get_param(ParamId.MAX_TILT_ANGLE) == 30.0


def test_invalid_param_id_raises():
    manager = ConfigManager()
    with pytest.raises(ConfigError):
        manager.set_param(11, 1.0)
    with pytest.raises(ConfigError):
        manager.get_param(-1)


def test_param_names():
    assert param_name(ParamId.BALANCE_KP) == "Balance_Kp"
    assert param_name(ParamId.FALLEN_THRESHOLD) == "Fallen_Threshold"
    assert param_name(99) == "Unknown"


def test_reset_defaults_restores_values():
    store = {}
    manager = ConfigManager(store)
    manager.set_param(ParamId.BALANCE_KI, 3.5, save=True)
    manager.reset_defaults(save=True)
    assert manager.get_param(ParamId.BALANCE_KI) == settings.BALANCE_PID_KI
    assert store["bal_ki"] == struct.pack("<f", settings.BALANCE_PID_KI)


def test_command_set_and_get():
    store = {}
    manager = ConfigManager(store)
    assert manager.handle_command("SET 3 2.5") is None
    assert manager.get_param(ParamId.VELOCITY_KP) == 2.5
    assert store["vel_kp"] == struct.pack("<f", 2.5)
    assert manager.handle_command("GET 3") == 2.5
    assert manager.handle_command("GET 0") == settings.BALANCE_PID_KP


def test_command_reset_and_save():
    store = {}
    manager = ConfigManager(store)
    manager.set_param(ParamId.MAX_TILT_ANGLE, 20.0)
    manager.handle_command("SAVE")
    assert store["max_tilt"] == struct.pack("<f", 20.0)
    manager.handle_command("RESET")
    assert manager.get_param(ParamId.MAX_TILT_ANGLE) == settings.FALLEN_ANGLE_THRESHOLD
    assert store["max_tilt"] == struct.pack("<f", settings.FALLEN_ANGLE_THRESHOLD)


@pytest.mark.parametrize(
    "command",
    ["", "   ", "FOO 1", "SET 11 1.0", "SET -1 1.0", "SET 2", "GET x", "  SET 1 2"],
)
def test_invalid_commands_raise(command):
    manager = ConfigManager()
    with pytest.raises(ConfigError):
        manager.handle_command(command)


def test_store_write_failure_raises():
    manager = ConfigManager(FailingStore())
    with pytest.raises(ConfigError):
        manager.set_param(ParamId.BALANCE_KP, 1.0, save=True)
    assert manager.get_param(ParamId.BALANCE_KP) == 1.0
    with pytest.raises(ConfigError):
        manager.save_all()


def test_status_string_defaults():
    manager = ConfigManager()
    assert manager.status_string() == (
        "PID:Bal[50.00,0.500,2.00] Vel[1.00,0.100,0.00] "
        "Kalman:[0.001,0.003,0.030] Tilt:45.0 Fall:45.0"
    )


def test_status_string_reflects_changes():
    manager = ConfigManager()
    manager.set_param(ParamId.FALLEN_THRESHOLD, 30.0)
    assert manager.status_string().endswith("Fall:30.0")