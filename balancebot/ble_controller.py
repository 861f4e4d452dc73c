"""Remote control link: incoming move commands and outgoing status reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from balancebot.protocol import (
    Message,
    MessageType,
    CommandFlag,
    ProtocolError,
    StatusResponse,
    decode_message,
    encode_message,
)

_log = logging.getLogger(__name__)

SERVICE_UUID = "0000ff00-0000-1000-8000-00805f9b34fb"
COMMAND_CHAR_UUID = "0000ff01-0000-1000-8000-00805f9b34fb"
STATUS_CHAR_UUID = "0000ff02-0000-1000-8000-00805f9b34fb"

_STATE_BALANCING = 0x02
_MAX_ENCODED_SIZE = 64

SendFunc = Callable[[int, int, bytes, bool], None]


@dataclass(frozen=True)
class RemoteCommand:
    """Drive command received from the remote app.

    ``direction`` is -1, 0 or 1, ``turn`` is -100..100 (left to right)
    and ``speed`` is 0..100.
    """

    direction: int = 0
    turn: int = 0
    speed: int = 0
    balance: bool = False
    standup: bool = False


def _clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def _battery_percentage(battery_voltage: float) -> int:
    percent = int((battery_voltage - 3.0) / 1.2 * 100.0)
    return _clamp(percent, 0, 100)


class BleController:
    """GATT-server side state of the remote control link.

    The radio stack reports events through :meth:`on_connected`,
    :meth:`on_disconnected` and :meth:`on_data_received`; ``send`` is
    called as ``send(conn_handle, char_handle, data, notify)`` to push a
    status notification and signals failure by raising.
    """

    def __init__(
        self,
        device_name: str,
        send: Optional[SendFunc] = None,
        command_char_handle: int = 1,
        status_char_handle: int = 2,
    ) -> None:
        if not device_name:
            raise ValueError("Invalid parameters: a device name is required")
        self.device_name = device_name
        self._send = send
        self.command_char_handle = command_char_handle
        self.status_char_handle = status_char_handle
        self.device_connected = False
        self.conn_handle = 0
        self.command = RemoteCommand(balance=True)
        self._seq_num = 0
        _log.info("BLE Controller initialized successfully")

    @property
    def is_connected(self) -> bool:
        """Whether a client is currently connected."""
        return self.device_connected

    def on_connected(self, conn_handle: int) -> None:
        """Record a new client connection."""
        _log.info("BLE Client connected")
        self.device_connected = True
        self.conn_handle = conn_handle

    def on_disconnected(self) -> None:
        """Record that the client went away."""
        _log.info("BLE Client disconnected")
        self.device_connected = False
        self.conn_handle = 0

    def on_data_received(self, char_handle: int, data: bytes) -> bool:
        """Handle a write; return whether it was a valid command packet.

        Writes to any characteristic other than the command one are ignored.
        """
        _log.info("BLE Data received, length: %d", len(data))
        if char_handle != self.command_char_handle:
            return False
        try:
            self.process_packet(data)
        except ProtocolError as exc:
            _log.warning("Failed to process command packet: %s", exc)
            return False
        return True

    def process_packet(self, data: bytes) -> RemoteCommand:
        """Decode one packet, apply it and return the current command.

        Raises :class:`ProtocolError` for undecodable packets and for
        message types the robot does not accept.
        """
        message = decode_message(data)
        msg_type = message.header.msg_type

        if msg_type == MessageType.MOVE_CMD:
            move = message.move_command
            flags = CommandFlag(move.flags & 0x07)
            self.command = replace(
                self.command,
                direction=_clamp(move.direction, -1, 1),
                turn=_clamp(move.turn, -100, 100),
                speed=min(move.speed, 100),
                balance=bool(flags & CommandFlag.BALANCE),
                standup=bool(flags & CommandFlag.STANDUP),
            )
            _log.debug("Move command: %s", self.command)
        elif msg_type == MessageType.CONFIG_SET:
            _log.info("Config set command received")
        else:
            raise ProtocolError(f"Unknown message type: 0x{msg_type:02X}")
        return self.command

    def send_status(
        self, angle: float, velocity: float, battery_voltage: float
    ) -> bytes:
        """Notify the client of the robot status and return the bytes sent.

        Raises :class:`ConnectionError` when no client is connected.
        """
        if not self.device_connected:
            raise ConnectionError("no BLE client connected")

        battery = _battery_percentage(battery_voltage)
        payload = StatusResponse(
            angle, velocity, _STATE_BALANCING, battery_level=battery
        ).pack()
        seq_num = self._seq_num
        self._seq_num = (self._seq_num + 1) & 0xFF
        data = encode_message(Message.build(MessageType.STATUS_RESP, payload, seq_num))
        if len(data) > _MAX_ENCODED_SIZE:
            raise ProtocolError("Failed to encode status message")

        if self._send is not None:
            self._send(self.conn_handle, self.status_char_handle, data, True)
        _log.debug(
            "Status sent: angle=%.2f, vel=%.2f, battery=%d%%", angle, velocity, battery
        )
        return data