"""Frame value type and wire encoding for the SkyTraq binary protocol.

Frame layout::

    +----------+---------+---------+------------------+----------+------------+
    | Preamble |  Size   |   ID    |     Payload      | Checksum | End marker |
    | 2 bytes  | 2 bytes | 1 byte  |  variable length |  1 byte  |  2 bytes   |
    +----------+---------+---------+------------------+----------+------------+

- Preamble: 0xA0 0xA1
- Size: big-endian length of (message ID + payload)
- Checksum: XOR of the message ID and every payload byte
- End marker: 0x0D 0x0A
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import FramingError

PREAMBLE = b"\xA0\xA1"
END_MARKER = b"\x0D\x0A"
HEADER_SIZE = 4  # preamble(2) + size(2)
TRAILER_SIZE = 3  # checksum(1) + end marker(2)
MAX_BODY_SIZE = 0xFFFF  # 16-bit size field covers ID + payload
MAX_PAYLOAD_SIZE = MAX_BODY_SIZE - 1

ACK_ID = 0x83
NACK_ID = 0x84


@dataclass(frozen=True)
class Frame:
    """A single protocol message: message ID plus payload."""

    id: int
    payload: bytes = b""

    @property
    def is_ack(self) -> bool:
        return self.id == ACK_ID

    @property
    def is_nack(self) -> bool:
        return self.id == NACK_ID

    @property
    def ack_message_id(self) -> int | None:
        """The message ID an ACK/NACK refers to, or None for other frames."""
        if self.id not in (ACK_ID, NACK_ID) or not self.payload:
            return None
        return self.payload[0]

    def __repr__(self) -> str:
        return (
            f"Frame(id=0x{self.id:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def checksum(message_id: int, payload: bytes) -> int:
    """XOR the message ID with every payload byte."""
    cs = message_id
    for b in payload:
        cs ^= b
    return cs


def build_header(message_id: int, payload: bytes) -> bytes:
    """Build the 5-byte frame header: preamble, size and message ID."""
    if not 0 <= message_id <= 0xFF:
        raise ValueError(f"Message ID must be 0-255, got {message_id}")
    if len(payload) > MAX_PAYLOAD_SIZE:
        raise ValueError(
            f"Payload must be at most {MAX_PAYLOAD_SIZE} bytes, got {len(payload)}"
        )
    return PREAMBLE + (len(payload) + 1).to_bytes(2, "big") + bytes([message_id])


def build_trailer(message_id: int, payload: bytes) -> bytes:
    """Build the 3-byte frame trailer: checksum and end marker."""
    return bytes([checksum(message_id, payload)]) + END_MARKER


def build_frame(message_id: int, payload: bytes = b"") -> bytes:
    """Build the complete wire representation of one frame.

    Args:
        message_id: Single-byte message ID.
        payload: Message-specific payload bytes.

    Returns:
        The framed bytes ready to write to the serial port.

    Raises:
        ValueError: If the ID is not a byte or the payload is too large for
            the 16-bit size field.
    """
    payload = bytes(payload)
    return (
        build_header(message_id, payload)
        + payload
        + build_trailer(message_id, payload)
    )


def parse_frame(data: bytes) -> Frame:
    """Parse one complete, aligned frame held in memory.

    Unlike the stream decoder this does not resynchronize: ``data`` must start
    with the preamble and contain exactly one frame.

    Raises:
        FramingError: If the preamble, size, end marker or checksum is wrong.
    """
    if len(data) < HEADER_SIZE + 1 + TRAILER_SIZE:
        raise FramingError(f"frame too short: {len(data)} bytes")

    if data[:2] != PREAMBLE:
        raise FramingError("missing frame preamble")

    body_size = int.from_bytes(data[2:4], "big")
    if body_size < 1:
        raise FramingError("frame has no message ID")
    if len(data) != HEADER_SIZE + body_size + TRAILER_SIZE:
        raise FramingError(
            f"frame size field says {body_size} bytes but "
            f"{len(data) - HEADER_SIZE - TRAILER_SIZE} were supplied"
        )

    body = data[HEADER_SIZE : HEADER_SIZE + body_size]
    trailer = data[HEADER_SIZE + body_size :]
    return validate_body(body, trailer)


def validate_body(body: bytes, trailer: bytes) -> Frame:
    """Check the end marker and checksum of a frame body and build the Frame."""
    if bytes(trailer[1:3]) != END_MARKER:
        raise FramingError("could not find end of frame marker")

    frame = Frame(id=body[0], payload=bytes(body[1:]))
    expected = checksum(frame.id, frame.payload)
    if expected != trailer[0]:
        raise FramingError(
            f"expected checksum 0x{expected:02X} but found 0x{trailer[0]:02X}"
        )
    return frame
