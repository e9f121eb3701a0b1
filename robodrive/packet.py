"""Wire format for robot drive commands and telemetry responses.

A packet is a 5-byte header (packet count, command flags, length), an
optional body and a one-byte CRC.  The CRC is the number of set bits in
every byte that precedes it.
"""

from __future__ import annotations

import enum
import re

FORWARD = 1
BACKWARD = 2
LEFT = 3
RIGHT = 4

HEADER_SIZE = 5
RESPONSE_PACKET_SIZE = 6
PACKET_SIZE = 9
TELEMETRY_PACKET_SIZE = 15

_DRIVE_BIT = 0x80
_STATUS_BIT = 0x40
_SLEEP_BIT = 0x20
_ACK_BIT = 0x10
_PADDING_MASK = 0x0F

_NUMBER = r"\s*([+-]?\d+)"


class CommandType(enum.IntEnum):
    """Kind of command a packet carries."""

    DRIVE = 0
    SLEEP = 1
    RESPONSE = 2


class PacketError(ValueError):
    """Raised for malformed packets or body text."""


def parity_count(data: bytes) -> int:
    """Return the number of set bits in ``data``."""
    return sum(byte.bit_count() for byte in bytes(data))


def _scan_ints(text: str, count: int) -> list[int] | None:
    """Read ``count`` comma-separated integers from the start of ``text``.

    Whitespace may precede each number; the commas must follow the numbers
    directly.  Anything after the last number is ignored.
    """
    pattern = ",".join([_NUMBER] * count)
    match = re.match(pattern, text)
    if match is None:
        return None
    return [int(group) for group in match.groups()]


class Packet:
    """A drive command, sleep command or (telemetry) response packet."""

    def __init__(self) -> None:
        self._count = 0
        self._drive = False
        self._status = True
        self._sleep = False
        self._ack = False
        self._padding = 0
        self.pkt_length = RESPONSE_PACKET_SIZE
        self.crc = 0
        self._clear_body()

    def _clear_body(self) -> None:
        self.direction = 0
        self.duration = 0
        self.speed = 0
        self.last_pkt_counter = 0
        self.current_grade = 0
        self.hit_count = 0
        self.last_cmd = 0
        self.last_cmd_value = 0
        self.last_cmd_speed = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "Packet":
        """Parse a received 6-, 9- or 15-byte packet."""
        raw = bytes(data)
        size = len(raw)
        if size not in (RESPONSE_PACKET_SIZE, PACKET_SIZE, TELEMETRY_PACKET_SIZE):
            raise PacketError(f"unexpected packet size {size}")

        packet = cls()
        flags = raw[2]
        packet._count = int.from_bytes(raw[0:2], "little")
        packet._drive = bool(flags & _DRIVE_BIT)
        packet._status = bool(flags & _STATUS_BIT)
        packet._sleep = bool(flags & _SLEEP_BIT)
        packet._ack = bool(flags & _ACK_BIT)
        packet._padding = flags & _PADDING_MASK
        packet.pkt_length = int.from_bytes(raw[3:5], "little")

        if size == PACKET_SIZE:
            packet.direction, packet.duration, packet.speed = raw[5:8]
        elif size == TELEMETRY_PACKET_SIZE:
            packet.last_pkt_counter = int.from_bytes(raw[5:7], "little")
            packet.current_grade = int.from_bytes(raw[7:9], "little")
            packet.hit_count = int.from_bytes(raw[9:11], "little")
            packet.last_cmd, packet.last_cmd_value, packet.last_cmd_speed = raw[11:14]
        packet.crc = raw[size - 1]
        return packet

    def set_cmd(self, cmd: CommandType) -> None:
        """Set the command flag for ``cmd``, clearing the other flags and the body."""
        try:
            command = CommandType(cmd)
        except ValueError as exc:
            raise PacketError(f"invalid command type {cmd!r}") from exc
        self._drive = command is CommandType.DRIVE
        self._sleep = command is CommandType.SLEEP
        self._status = command is CommandType.RESPONSE
        self._ack = False
        self._clear_body()

    def set_body_data(self, text: str) -> None:
        """Fill the body from comma-separated text.

        Responses take six telemetry values; other packets take
        ``direction,duration,speed``.
        """
        if self._status:
            values = _scan_ints(text, 6)
            if values is None:
                raise PacketError(f"invalid telemetry input format: {text!r}")
            counter, grade, hits, last, value, speed = values
            self.last_pkt_counter = counter & 0xFFFF
            self.current_grade = grade & 0xFFFF
            self.hit_count = hits & 0xFFFF
            self.last_cmd = last & 0xFF
            self.last_cmd_value = value & 0xFF
            self.last_cmd_speed = speed & 0xFF
        else:
            values = _scan_ints(text, 3)
            if values is None:
                raise PacketError(f"invalid drive input format: {text!r}")
            direction, duration, speed = values
            self.direction = direction & 0xFF
            self.duration = duration & 0xFF
            self.speed = speed & 0xFF

    @property
    def cmd(self) -> CommandType:
        """The command the flags describe; DRIVE when no flag is set."""
        if self._drive:
            return CommandType.DRIVE
        if self._sleep:
            return CommandType.SLEEP
        if self._status:
            return CommandType.RESPONSE
        return CommandType.DRIVE

    @property
    def ack(self) -> bool:
        """Whether the acknowledgement flag is set."""
        return self._ack

    def _has_telemetry(self) -> bool:
        return any(
            (
                self.last_pkt_counter,
                self.current_grade,
                self.hit_count,
                self.last_cmd,
                self.last_cmd_value,
                self.last_cmd_speed,
            )
        )

    @property
    def length(self) -> int:
        """Size in bytes of the packet as it would be sent."""
        if self._status:
            return TELEMETRY_PACKET_SIZE if self._has_telemetry() else RESPONSE_PACKET_SIZE
        if self._drive:
            return PACKET_SIZE
        return RESPONSE_PACKET_SIZE

    @property
    def pkt_count(self) -> int:
        """The 16-bit packet counter."""
        return self._count

    @pkt_count.setter
    def pkt_count(self, count: int) -> None:
        self._count = count & 0xFFFF

    @property
    def body_data(self) -> str:
        """Comma-separated text of the body values."""
        if self._status:
            values = (
                self.last_pkt_counter,
                self.current_grade,
                self.hit_count,
                self.last_cmd,
                self.last_cmd_value,
                self.last_cmd_speed,
            )
        else:
            values = (self.direction, self.duration, self.speed)
        return ",".join(str(value) for value in values)

    def check_crc(self, data: bytes) -> bool:
        """Check the CRC byte of ``data`` against the bits before it."""
        raw = bytes(data)
        total = self.length
        if len(raw) < total:
            return False
        return parity_count(raw[: total - 1]) == raw[total - 1]

    def _flags_byte(self) -> int:
        return (
            (_DRIVE_BIT if self._drive else 0)
            | (_STATUS_BIT if self._status else 0)
            | (_SLEEP_BIT if self._sleep else 0)
            | (_ACK_BIT if self._ack else 0)
            | (self._padding & _PADDING_MASK)
        )

    def _content(self) -> bytes:
        """Header and body bytes, without the CRC."""
        header = (
            (self._count & 0xFFFF).to_bytes(2, "little")
            + bytes([self._flags_byte()])
            + (self.pkt_length & 0xFFFF).to_bytes(2, "little")
        )
        total = self.length
        if total == PACKET_SIZE:
            body = bytes([self.direction & 0xFF, self.duration & 0xFF, self.speed & 0xFF])
        elif total == TELEMETRY_PACKET_SIZE:
            body = (
                self.last_pkt_counter.to_bytes(2, "little")
                + self.current_grade.to_bytes(2, "little")
                + self.hit_count.to_bytes(2, "little")
                + bytes([self.last_cmd, self.last_cmd_value, self.last_cmd_speed])
            )
        else:
            body = b""
        return header + body

    def calc_crc(self) -> int:
        """Compute, store and return the CRC of the header and body."""
        self.crc = parity_count(self._content()) & 0xFF
        return self.crc

    def gen_packet(self) -> bytes:
        """Serialise the packet, updating its length field and CRC."""
        self.pkt_length = self.length
        self.calc_crc()
        return self._content() + bytes([self.crc])