"""Shared fixtures: an in-memory stand-in for a pyserial port."""

from __future__ import annotations

import io

import pytest

from skytraq_mcp.protocol.codec import FrameCodec
from skytraq_mcp.protocol.framing import build_frame


class MockSerialPort:
    """Reads come from ``read_buf``; writes land in ``write_buf``.

    ``read_limit`` caps how many bytes a single read returns and
    ``write_limit`` caps how many bytes are accepted in total. Frames
    staged with ``reply`` arrive once the input buffer is reset.
    """

    def __init__(self) -> None:
        self.read_buf = io.BytesIO()
        self.write_buf = bytearray()
        self.read_limit = 0
        self.write_limit = 0
        self.flushed = False
        self.input_reset = False
        self.replies: list[bytes] = []
        self.closed = False

    def feed(self, *chunks: bytes) -> None:
        pos = self.read_buf.tell()
        self.read_buf.seek(0, io.SEEK_END)
        for chunk in chunks:
            self.read_buf.write(chunk)
        self.read_buf.seek(pos)

    def feed_frame(self, message_id: int, payload: bytes = b"") -> None:
        self.feed(build_frame(message_id, payload))

    def readinto(self, buffer) -> int:
        view = memoryview(buffer)
        if self.read_limit and len(view) > self.read_limit:
            view = view[: self.read_limit]
        return self.read_buf.readinto(view)

    def write(self, data: bytes) -> int:
        if self.write_limit:
            space = max(self.write_limit - len(self.write_buf), 0)
            data = data[:space]
        self.write_buf += data
        return len(data)

    def flush(self) -> None:
        self.flushed = True

    def reset_input_buffer(self) -> None:
        """Drop unread input, then queue anything staged with ``reply``."""
        self.read_buf = io.BytesIO()
        self.input_reset = True
        self.feed(*self.replies)
        self.replies.clear()

    def reply(self, message_id: int, payload: bytes = b"") -> None:
        """Stage a frame that arrives after the next input reset."""
        self.replies.append(build_frame(message_id, payload))

    def close(self) -> None:
        if self.closed:
            raise OSError("already closed")
        self.closed = True


@pytest.fixture
def port() -> MockSerialPort:
    return MockSerialPort()


@pytest.fixture
def codec(port: MockSerialPort) -> FrameCodec:
    return FrameCodec(port)


# 13-byte Software Version payload: kernel 1.2.3, ODM 4.5.6, revision 2007-08-09
VERSION_PAYLOAD = bytes([0, 0, 1, 2, 3, 0, 4, 5, 6, 0, 7, 8, 9])


def make_nav_payload(
    fix: int = 2,
    satellites: int = 3,
    latitude: int = 1,
    longitude: int = 2,
    altitude: int = 3,
    hdop: int = 4,
    vx: int = 5,
    vy: int = 6,
    vz: int = 7,
) -> bytes:
    """Build a 58-byte Navigation Data payload."""
    data = bytearray(58)
    data[0] = fix
    data[2] = satellites
    data[8:12] = latitude.to_bytes(4, "big", signed=True)
    data[12:16] = longitude.to_bytes(4, "big", signed=True)
    data[20:24] = altitude.to_bytes(4, "big", signed=True)
    data[28:30] = hdop.to_bytes(2, "big")
    data[46:50] = vx.to_bytes(4, "big", signed=True)
    data[50:54] = vy.to_bytes(4, "big", signed=True)
    data[54:58] = vz.to_bytes(4, "big", signed=True)
    return bytes(data)
