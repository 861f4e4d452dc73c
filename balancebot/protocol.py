"""Binary message protocol shared with the remote control app.

Every message is an 8-byte little-endian header followed by up to
``MAX_PAYLOAD_SIZE`` payload bytes. The CRC16 checksum covers the
checksum field, taken as zero, followed by the payload.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import ClassVar

PROTOCOL_VERSION = 0x01
START_MARKER = 0xAA
MAX_PAYLOAD_SIZE = 64

_HEADER_STRUCT = struct.Struct("<BBBBHH")
HEADER_SIZE = _HEADER_STRUCT.size


class ProtocolError(ValueError):
    """Raised when a message cannot be built, encoded or decoded."""


class MessageType(enum.IntEnum):
    """Values of the header's message type byte."""

    MOVE_CMD = 0x01
    STATUS_REQ = 0x02
    STATUS_RESP = 0x03
    CONFIG_SET = 0x04
    CONFIG_GET = 0x05
    ERROR = 0xFF


class CommandFlag(enum.IntFlag):
    """Bits of a move command's ``flags`` byte."""

    BALANCE = 0x01
    STANDUP = 0x02
    EMERGENCY = 0x04


def _pack(layout: struct.Struct, *values: object) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ProtocolError(f"value out of range: {exc}") from exc


def _unpack_padded(layout: struct.Struct, data: bytes) -> tuple:
    # Short payloads leave the rest of the payload area zeroed.
    padded = bytes(data[: layout.size]).ljust(layout.size, b"\0")
    return layout.unpack(padded)


@dataclass(frozen=True)
class Header:
    """Fixed message header."""

    start_marker: int = START_MARKER
    version: int = PROTOCOL_VERSION
    msg_type: int = 0
    seq_num: int = 0
    payload_len: int = 0
    checksum: int = 0

    def pack(self) -> bytes:
        """Return the 8 wire bytes of the header."""
        return _pack(
            _HEADER_STRUCT,
            self.start_marker,
            self.version,
            self.msg_type,
            self.seq_num,
            self.payload_len,
            self.checksum,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Header":
        """Read a header from the first 8 bytes of ``data``."""
        if len(data) < HEADER_SIZE:
            raise ProtocolError("buffer shorter than a header")
        return cls(*_HEADER_STRUCT.unpack(bytes(data[:HEADER_SIZE])))


@dataclass(frozen=True)
class MoveCommand:
    """Drive command: direction, turn, speed, flags and a timestamp in ms."""

    direction: int
    turn: int
    speed: int
    flags: int
    timestamp: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<bbBBI")

    def pack(self) -> bytes:
        return _pack(
            self.STRUCT, self.direction, self.turn, self.speed, self.flags, self.timestamp
        )

    @classmethod
    def unpack(cls, data: bytes) -> "MoveCommand":
        return cls(*_unpack_padded(cls.STRUCT, data))


@dataclass(frozen=True)
class StatusResponse:
    """Robot status report."""

    angle: float
    velocity: float
    robot_state: int
    gps_status: int = 0
    latitude: float = 0.0
    longitude: float = 0.0
    battery_level: int = 100
    error_flags: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<ffBBffBB")

    def pack(self) -> bytes:
        return _pack(
            self.STRUCT,
            self.angle,
            self.velocity,
            self.robot_state,
            self.gps_status,
            self.latitude,
            self.longitude,
            self.battery_level,
            self.error_flags,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "StatusResponse":
        return cls(*_unpack_padded(cls.STRUCT, data))


@dataclass(frozen=True)
class ConfigPayload:
    """Setting identifier and value for config set/get messages."""

    config_id: int
    value: float

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<Bf")

    def pack(self) -> bytes:
        return _pack(self.STRUCT, self.config_id, self.value)

    @classmethod
    def unpack(cls, data: bytes) -> "ConfigPayload":
        return cls(*_unpack_padded(cls.STRUCT, data))


def _payload_checksum(payload: bytes) -> int:
    return calculate_checksum(b"\0\0" + bytes(payload))


@dataclass(frozen=True)
class Message:
    """A header with its raw payload bytes."""

    header: Header
    payload: bytes = b""

    @classmethod
    def build(cls, msg_type: int, payload: bytes, seq_num: int) -> "Message":
        """Return a message of ``msg_type`` carrying ``payload``, checksum filled in."""
        payload = bytes(payload)
        if len(payload) > MAX_PAYLOAD_SIZE:
            raise ProtocolError("payload too large")
        header = Header(
            msg_type=msg_type,
            seq_num=seq_num,
            payload_len=len(payload),
            checksum=_payload_checksum(payload),
        )
        header.pack()  # range-check every field now
        return cls(header, payload)

    @property
    def size(self) -> int:
        """Number of bytes the message takes on the wire."""
        return HEADER_SIZE + self.header.payload_len

    @property
    def body(self) -> bytes:
        """The payload as sent: exactly ``payload_len`` bytes."""
        return self.payload[: self.header.payload_len].ljust(
            self.header.payload_len, b"\0"
        )

    @property
    def move_command(self) -> MoveCommand:
        return MoveCommand.unpack(self.body)

    @property
    def status_response(self) -> StatusResponse:
        return StatusResponse.unpack(self.body)

    @property
    def config(self) -> ConfigPayload:
        return ConfigPayload.unpack(self.body)

    @property
    def error_code(self) -> int:
        body = self.body
        return body[0] if body else 0


def calculate_checksum(data: bytes) -> int:
    """Return the CRC16 (reflected 0xA001, initial 0xFFFF) of ``data``."""
    crc = 0xFFFF
    for byte in bytes(data):
        crc ^= byte
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ 0xA001
            else:
                crc >>= 1
    return crc


def validate_message(message: Message) -> bool:
    """Return whether marker, version, length and checksum are all correct."""
    if message is None:
        return False
    header = message.header
    if header.start_marker != START_MARKER:
        return False
    if header.version != PROTOCOL_VERSION:
        return False
    if header.payload_len > MAX_PAYLOAD_SIZE:
        return False
    if len(message.payload) < header.payload_len:
        return False
    return _payload_checksum(message.payload[: header.payload_len]) == header.checksum


def encode_message(message: Message) -> bytes:
    """Return the wire bytes of ``message``."""
    if message is None:
        raise ProtocolError("no message to encode")
    if message.header.payload_len > MAX_PAYLOAD_SIZE:
        raise ProtocolError("payload too large")
    return message.header.pack() + message.body


def decode_message(data: bytes) -> Message:
    """Parse and validate one message from the start of ``data``.

    Bytes after the message are ignored; ``Message.size`` tells how many
    were consumed.
    """
    if data is None:
        raise ProtocolError("no data to decode")
    data = bytes(data)
    header = Header.unpack(data)
    if header.start_marker != START_MARKER:
        raise ProtocolError("bad start marker")
    if header.payload_len > MAX_PAYLOAD_SIZE:
        raise ProtocolError("payload too large")
    total = HEADER_SIZE + header.payload_len
    if len(data) < total:
        raise ProtocolError("message truncated")
    message = Message(header, data[HEADER_SIZE:total])
    if not validate_message(message):
        raise ProtocolError("message failed validation")
    return message


def build_move_command(
    direction: int, turn: int, speed: int, flags: int, seq_num: int
) -> Message:
    """Return a move command message with a zero timestamp."""
    payload = MoveCommand(direction, turn, speed, int(flags), 0).pack()
    return Message.build(MessageType.MOVE_CMD, payload, seq_num)


def build_status_response(
    angle: float, velocity: float, state: int, seq_num: int
) -> Message:
    """Return a status response with no GPS fix and a full battery."""
    payload = StatusResponse(angle, velocity, state).pack()
    return Message.build(MessageType.STATUS_RESP, payload, seq_num)


def build_error_message(error_code: int, seq_num: int) -> Message:
    """Return an error message carrying a one-byte error code."""
    payload = _pack(struct.Struct("<B"), error_code)
    return Message.build(MessageType.ERROR, payload, seq_num)