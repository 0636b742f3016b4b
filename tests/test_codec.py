"""Tests for the stream codec: writing, reading and resynchronization."""

import pytest

from conftest import VERSION_PAYLOAD
from skytraq_mcp.errors import FramingError, TransportError
from skytraq_mcp.protocol.framing import MAX_PAYLOAD_SIZE, Frame, build_frame


# ─── WRITING ─────────────────────────────────────────────────────────

def test_write_frame(codec, port):
    codec.write_frame(Frame(id=0x02, payload=b"\x01"))
    assert bytes(port.write_buf) == build_frame(0x02, b"\x01")
    assert len(port.write_buf) == 9


def test_write_frame_empty_payload(codec, port):
    codec.write_frame(Frame(id=0x10))
    assert bytes(port.write_buf) == build_frame(0x10)


def test_write_frame_truncated(codec, port):
    port.write_limit = 7
    with pytest.raises(TransportError):
        codec.write_frame(Frame(id=0x02, payload=b"\x01"))


def test_write_frame_transport_failure(codec, port):
    def fail(data):
        raise OSError("device unplugged")

    port.write = fail
    with pytest.raises(TransportError, match="device unplugged"):
        codec.write_frame(Frame(id=0x02, payload=b"\x01"))


# ─── READING ─────────────────────────────────────────────────────────

def test_read_frame(codec, port):
    port.feed_frame(0x80, VERSION_PAYLOAD)
    frame = codec.read_frame()
    assert frame.id == 0x80
    assert frame.payload == VERSION_PAYLOAD


def test_read_ack_scenario(codec, port):
    """ACK for message 0x02 with checksum 0x83 ^ 0x02 = 0x81."""
    port.feed(bytes([0xA0, 0xA1, 0x00, 0x02, 0x83, 0x02, 0x81, 0x0D, 0x0A]))
    assert codec.read_frame() == Frame(id=0x83, payload=b"\x02")


def test_read_split_bytes(codec, port):
    port.read_limit = 2
    port.feed_frame(0x80, VERSION_PAYLOAD)
    assert codec.read_frame().payload == VERSION_PAYLOAD


def test_read_one_byte_at_a_time(codec, port):
    port.read_limit = 1
    port.feed(b"\xff\xa0", build_frame(0x83, b"\x02"))
    assert codec.read_frame() == Frame(id=0x83, payload=b"\x02")


def test_read_wrong_checksum(codec, port):
    frame = bytearray(build_frame(0x80, VERSION_PAYLOAD))
    frame[-3] ^= 0x01
    port.feed(bytes(frame))
    with pytest.raises(FramingError):
        codec.read_frame()


def test_read_bad_end_marker(codec, port):
    frame = bytearray(build_frame(0x80, VERSION_PAYLOAD))
    frame[-2] = 0x00
    port.feed(bytes(frame))
    with pytest.raises(FramingError, match="end of frame marker"):
        codec.read_frame()


def test_read_empty_frame(codec, port):
    port.feed(bytes([0xA0, 0xA1, 0x00, 0x00, 0x00, 0x0D, 0x0A]))
    with pytest.raises(FramingError):
        codec.read_frame()


def test_recover_after_corrupt_frame(codec, port):
    bad = bytearray(build_frame(0x80, VERSION_PAYLOAD))
    bad[-3] ^= 0xFF
    port.feed(bytes(bad), build_frame(0x83, b"\x02"))
    with pytest.raises(FramingError):
        codec.read_frame()
    assert codec.read_frame() == Frame(id=0x83, payload=b"\x02")


def test_read_end_of_stream(codec, port):
    with pytest.raises(TransportError, match="end of stream"):
        codec.read_frame()


def test_read_truncated_frame(codec, port):
    port.feed(build_frame(0x80, VERSION_PAYLOAD)[:10])
    with pytest.raises(TransportError):
        codec.read_frame()


def test_read_transport_failure(codec, port):
    def fail(buffer):
        raise OSError("read error")

    port.readinto = fail
    with pytest.raises(TransportError, match="read error"):
        codec.read_frame()


def test_payload_does_not_alias_scratch_buffer(codec, port):
    port.feed_frame(0x80, VERSION_PAYLOAD)
    port.feed_frame(0x80, bytes(13))
    first = codec.read_frame()
    codec.read_frame()
    assert first.payload == VERSION_PAYLOAD


@pytest.mark.parametrize("message_id", [0x01, 0x83, 0xA8, 0xFF])
@pytest.mark.parametrize("length", [0, 1, 255, 256, MAX_PAYLOAD_SIZE])
def test_written_frame_reads_back(codec, port, message_id, length):
    frame = Frame(id=message_id, payload=bytes(i % 256 for i in range(length)))
    codec.write_frame(frame)
    port.feed(bytes(port.write_buf))
    assert codec.read_frame() == frame


# ─── RESYNCHRONIZATION ───────────────────────────────────────────────

@pytest.mark.parametrize("garbage_len", [0, 1, 2, 3, 5, 9])
def test_read_misaligned(codec, port, garbage_len):
    port.feed(b"\xff" * garbage_len, build_frame(0x83))
    frame = codec.read_frame()
    assert frame.id == 0x83
    assert frame.payload == b""


@pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 9])
def test_read_misaligned_first_markers(codec, port, count):
    port.feed(b"\xa0" * count, build_frame(0x83))
    assert codec.read_frame() == Frame(id=0x83)


@pytest.mark.parametrize(
    "garbage",
    [
        b"\xa0\x00",
        b"\x00\xa0\x55\xa0",
        b"\xa1\xa0\xa0\x0d\x0a",
        b"\x0d\x0a\xa0\xa1"[:3],
    ],
)
def test_read_mixed_garbage(codec, port, garbage):
    port.feed(garbage, build_frame(0xA8, b"\x01\x02"))
    assert codec.read_frame() == Frame(id=0xA8, payload=b"\x01\x02")


def test_consecutive_frames_after_garbage(codec, port):
    port.feed(b"\x12\x34\x56", build_frame(0x83, b"\x02"), build_frame(0x80, VERSION_PAYLOAD))
    assert codec.read_frame().id == 0x83
    assert codec.read_frame().id == 0x80
