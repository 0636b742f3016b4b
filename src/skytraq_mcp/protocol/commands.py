"""Message ID constants and command builders.

Host-to-device commands use IDs below 0x80; the receiver answers with IDs
from 0x80 upward, plus ACK (0x83) / NACK (0x84) for every command it gets.
"""

from __future__ import annotations

from enum import IntEnum

from .framing import Frame


class MessageID(IntEnum):
    """Binary message identifiers."""

    SYSTEM_RESTART = 0x01
    QUERY_SOFTWARE_VERSION = 0x02
    QUERY_SOFTWARE_CRC = 0x03
    QUERY_POSITION_RATE = 0x10
    QUERY_POWER_MODE = 0x15
    GET_EPHEMERIS = 0x30

    SOFTWARE_VERSION = 0x80
    SOFTWARE_CRC = 0x81
    ACK = 0x83
    NACK = 0x84
    POSITION_RATE = 0x86
    NAVIGATION_DATA = 0xA8
    EPHEMERIS_DATA = 0xB1
    POWER_MODE = 0xB9


class StartMode(IntEnum):
    """Restart modes for the System Restart command."""

    HOT = 1
    WARM = 2
    COLD = 3


# Software type field of the version/CRC queries
SOFTWARE_TYPE_SYSTEM_CODE = 1

RESTART_PAYLOAD_SIZE = 14  # start mode + UTC(7) + lat(2) + lon(2) + alt(2)
MAX_EPHEMERIS_SV = 32


def build_command(message_id: int, payload: bytes = b"") -> Frame:
    """Build a command frame for any message ID."""
    if not 0 <= message_id <= 0xFF:
        raise ValueError(f"Message ID must be 0-255, got {message_id}")
    return Frame(id=int(message_id), payload=bytes(payload))


def build_query_software_version(software_type: int = SOFTWARE_TYPE_SYSTEM_CODE) -> Frame:
    """Build a Query Software Version command (0x02).

    The receiver acknowledges and then sends a Software Version (0x80) frame.
    """
    return build_command(MessageID.QUERY_SOFTWARE_VERSION, bytes([software_type]))


def build_query_software_crc(software_type: int = SOFTWARE_TYPE_SYSTEM_CODE) -> Frame:
    """Build a Query Software CRC command (0x03)."""
    return build_command(MessageID.QUERY_SOFTWARE_CRC, bytes([software_type]))


def build_query_position_rate() -> Frame:
    """Build a Query Position Update Rate command (0x10)."""
    return build_command(MessageID.QUERY_POSITION_RATE)


def build_query_power_mode() -> Frame:
    """Build a Query Power Mode command (0x15)."""
    return build_command(MessageID.QUERY_POWER_MODE)


def build_get_ephemeris(sv: int = 0) -> Frame:
    """Build a Get Ephemeris command (0x30).

    Args:
        sv: Satellite PRN 1-32, or 0 for every satellite.
    """
    if not 0 <= sv <= MAX_EPHEMERIS_SV:
        raise ValueError(f"SV must be 0-{MAX_EPHEMERIS_SV}, got {sv}")
    return build_command(MessageID.GET_EPHEMERIS, bytes([sv]))


def build_system_restart(start_mode: int = StartMode.HOT) -> Frame:
    """Build a System Restart command (0x01).

    The UTC and position hints are left zeroed so the receiver uses what it
    already knows.

    Args:
        start_mode: 1 (hot), 2 (warm) or 3 (cold).
    """
    if not StartMode.HOT <= start_mode <= StartMode.COLD:
        raise ValueError(f"Start mode must be 1-3, got {start_mode}")
    payload = bytes([start_mode]) + b"\x00" * (RESTART_PAYLOAD_SIZE - 1)
    return build_command(MessageID.SYSTEM_RESTART, payload)
