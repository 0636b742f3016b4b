"""Stream encoder/decoder binding the frame format to a serial transport.

The receiver transmits continuously, so a read can start anywhere inside a
frame. ``FrameCodec.read_frame`` scans a 4-byte window for the preamble and
discards whatever precedes it before reading the frame body.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from ..errors import FramingError, TransportError
from .framing import (
    HEADER_SIZE,
    MAX_BODY_SIZE,
    PREAMBLE,
    TRAILER_SIZE,
    Frame,
    build_header,
    build_trailer,
    validate_body,
)

if TYPE_CHECKING:
    from ..transport.serial_connection import Transport

logger = logging.getLogger(__name__)

SCRATCH_SIZE = MAX_BODY_SIZE + TRAILER_SIZE


class _Scan(enum.Enum):
    SEEK_FIRST_MARKER = enum.auto()
    SEEK_SECOND_MARKER = enum.auto()
    HAVE_HEADER = enum.auto()


class FrameCodec:
    """Reads and writes frames on one transport.

    Not thread-safe: the scratch buffer is shared between reads, so all calls
    on a codec must come from a single thread.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._buf = bytearray(SCRATCH_SIZE)

    @property
    def transport(self) -> Transport:
        return self._transport

    # ─── WRITING ─────────────────────────────────────────────────────

    def write_frame(self, frame: Frame) -> None:
        """Write one frame as header, payload and trailer.

        Raises:
            ValueError: If the payload does not fit in a frame.
            TransportError: If any of the writes fails or is short.
        """
        header = build_header(frame.id, frame.payload)
        trailer = build_trailer(frame.id, frame.payload)

        logger.info("sending message ID 0x%02X with %s", frame.id, frame.payload.hex(" "))
        self._write_bytes(header)
        self._write_bytes(frame.payload)
        self._write_bytes(trailer)

    def _write_bytes(self, data: bytes) -> None:
        if not data:
            return
        try:
            written = self._transport.write(data)
        except OSError as e:
            raise TransportError(f"write failed: {e}") from e
        # pyserial returns the byte count; some file-like objects return None
        if written is not None and written != len(data):
            raise TransportError(
                f"did not write expected number of bytes: {written} of {len(data)}"
            )

    # ─── READING ─────────────────────────────────────────────────────

    def _read_exact(self, view: memoryview) -> None:
        """Fill ``view`` completely, looping over short reads."""
        target = len(view)
        pos = 0
        while pos < target:
            try:
                n = self._transport.readinto(view[pos:])
            except OSError as e:
                raise TransportError(f"unable to read data: {e}") from e
            if not n:
                raise TransportError("end of stream")
            pos += n
            if pos < target:
                logger.debug("incomplete read: wanted %d, have %d", target, pos)

    def _read_window(self) -> bytearray:
        window = bytearray(HEADER_SIZE)
        self._read_exact(memoryview(window))
        return window

    def _read_header(self) -> bytearray:
        """Scan the stream until a preamble is aligned at the window start."""
        window = self._read_window()
        cursor = 0
        state = _Scan.SEEK_FIRST_MARKER

        while state is not _Scan.HAVE_HEADER:
            if state is _Scan.SEEK_FIRST_MARKER:
                pos = window.find(PREAMBLE[0], cursor)
                if pos < 0:
                    window = self._read_window()
                    cursor = 0
                    continue
                if pos > 0:
                    logger.info("misaligned data received (offset %d)", pos)
                    refill = bytearray(pos)
                    self._read_exact(memoryview(refill))
                    window = window[pos:] + refill
                state = _Scan.SEEK_SECOND_MARKER
            else:
                if window[1] == PREAMBLE[1]:
                    state = _Scan.HAVE_HEADER
                else:
                    cursor = 1
                    state = _Scan.SEEK_FIRST_MARKER

        return window

    def read_frame(self) -> Frame:
        """Read the next complete, checksum-valid frame from the stream.

        Garbage before the preamble is dropped. A bad end marker or checksum
        rejects only this frame; calling again resumes on the following bytes.

        Raises:
            TransportError: If the transport fails or the stream ends.
            FramingError: If the located frame is corrupt.
        """
        header = self._read_header()
        size = int.from_bytes(header[2:4], "big")
        logger.debug("payload size: %d", size)

        view = memoryview(self._buf)[: size + TRAILER_SIZE]
        self._read_exact(view)

        if size == 0:
            raise FramingError("frame has no message ID")

        frame = validate_body(view[:size], view[size:])
        logger.debug("found frame %r", frame)
        return frame
