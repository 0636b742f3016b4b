"""Response parsing for receiver messages."""

from __future__ import annotations

from typing import Any, Callable

from ..errors import ConversionError
from ..models.navigation import NavigationSolution
from ..models.system import PositionRate, PowerMode
from ..models.version import SoftwareCRC, SoftwareVersion
from .commands import MessageID
from .framing import Frame


def _expect(frame: Frame, message_id: MessageID) -> None:
    if frame.id != message_id:
        raise ConversionError(
            f"expected message 0x{message_id:02X} but got 0x{frame.id:02X}"
        )


def parse_software_version(frame: Frame) -> SoftwareVersion:
    """Parse a Software Version (0x80) frame."""
    _expect(frame, MessageID.SOFTWARE_VERSION)
    return SoftwareVersion.from_bytes(frame.payload)


def parse_software_crc(frame: Frame) -> SoftwareCRC:
    """Parse a Software CRC (0x81) frame."""
    _expect(frame, MessageID.SOFTWARE_CRC)
    return SoftwareCRC.from_bytes(frame.payload)


def parse_position_rate(frame: Frame) -> PositionRate:
    """Parse a Position Update Rate (0x86) frame."""
    _expect(frame, MessageID.POSITION_RATE)
    return PositionRate.from_bytes(frame.payload)


def parse_navigation(frame: Frame) -> NavigationSolution:
    """Parse a Navigation Data (0xA8) frame."""
    _expect(frame, MessageID.NAVIGATION_DATA)
    return NavigationSolution.from_bytes(frame.payload)


def parse_power_mode(frame: Frame) -> PowerMode:
    """Parse a Power Mode (0xB9) frame."""
    _expect(frame, MessageID.POWER_MODE)
    return PowerMode.from_bytes(frame.payload)


PARSERS: dict[int, Callable[[Frame], Any]] = {
    MessageID.SOFTWARE_VERSION: parse_software_version,
    MessageID.SOFTWARE_CRC: parse_software_crc,
    MessageID.POSITION_RATE: parse_position_rate,
    MessageID.NAVIGATION_DATA: parse_navigation,
    MessageID.POWER_MODE: parse_power_mode,
}


def parse_response(frame: Frame):
    """Auto-dispatch a frame to the appropriate response parser.

    Returns the parsed model, or the raw Frame if no parser matches.

    Raises:
        ConversionError: If a parser matches but the payload is malformed.
    """
    parser = PARSERS.get(frame.id)
    if parser is None:
        return frame
    return parser(frame)
