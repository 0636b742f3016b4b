"""Tests for command builders."""

import pytest

from skytraq_mcp.protocol.commands import (
    MessageID,
    StartMode,
    build_command,
    build_get_ephemeris,
    build_query_position_rate,
    build_query_power_mode,
    build_query_software_crc,
    build_query_software_version,
    build_system_restart,
)
from skytraq_mcp.protocol.framing import build_frame, parse_frame


def test_message_id_values():
    """Reserved IDs of the binary protocol."""
    assert MessageID.SYSTEM_RESTART == 0x01
    assert MessageID.QUERY_SOFTWARE_VERSION == 0x02
    assert MessageID.QUERY_SOFTWARE_CRC == 0x03
    assert MessageID.GET_EPHEMERIS == 0x30
    assert MessageID.SOFTWARE_VERSION == 0x80
    assert MessageID.SOFTWARE_CRC == 0x81
    assert MessageID.ACK == 0x83
    assert MessageID.NACK == 0x84
    assert MessageID.POSITION_RATE == 0x86
    assert MessageID.NAVIGATION_DATA == 0xA8
    assert MessageID.EPHEMERIS_DATA == 0xB1
    assert MessageID.POWER_MODE == 0xB9


def test_build_query_software_version():
    frame = build_query_software_version()
    assert frame.id == MessageID.QUERY_SOFTWARE_VERSION
    assert frame.payload == b"\x01"


def test_build_query_software_crc():
    frame = build_query_software_crc(software_type=2)
    assert frame.id == MessageID.QUERY_SOFTWARE_CRC
    assert frame.payload == b"\x02"


def test_build_queries_without_payload():
    assert build_query_position_rate().payload == b""
    assert build_query_position_rate().id == 0x10
    assert build_query_power_mode().id == 0x15


def test_build_get_ephemeris():
    assert build_get_ephemeris().payload == b"\x00"
    assert build_get_ephemeris(32).payload == b"\x20"


def test_get_ephemeris_bounds():
    with pytest.raises(ValueError):
        build_get_ephemeris(33)
    with pytest.raises(ValueError):
        build_get_ephemeris(-1)


def test_build_system_restart():
    frame = build_system_restart(StartMode.COLD)
    assert frame.id == MessageID.SYSTEM_RESTART
    assert len(frame.payload) == 14
    assert frame.payload[0] == 3
    assert frame.payload[1:] == bytes(13)


def test_system_restart_bounds():
    with pytest.raises(ValueError):
        build_system_restart(0)
    with pytest.raises(ValueError):
        build_system_restart(4)


def test_build_command_roundtrips_on_the_wire():
    frame = build_command(0x30, b"\x05")
    assert parse_frame(build_frame(frame.id, frame.payload)) == frame


def test_build_command_invalid_id():
    with pytest.raises(ValueError):
        build_command(256)
