"""Serial connection to a SkyTraq GPS receiver.

The receiver talks the SkyTraq binary protocol over a UART at 230400 baud
by default. The port itself is opened through pyserial; anything that
behaves like a pyserial port (``readinto``/``write``/``flush``/``close``)
can be injected instead, which is how the tests drive the connection.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

import serial

from ..errors import ProtocolError, TransportError
from ..protocol.codec import FrameCodec
from ..protocol.commands import build_query_software_version
from ..protocol.framing import Frame
from ..protocol.reliable import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_IRRELEVANT,
    ReliableChannel,
)
from ..session import MessageHandlers, Session

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 230400
READ_TIMEOUT_S = 10.0
DEFAULT_RESPONSE_FRAMES = 10


class Transport(Protocol):
    """The duplex byte stream a connection runs on."""

    def readinto(self, buffer) -> int | None: ...

    def write(self, data: bytes) -> int | None: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


def open_serial_port(
    port: str,
    baudrate: int = DEFAULT_BAUDRATE,
    timeout: float = READ_TIMEOUT_S,
) -> Transport:
    """Open a serial port with pyserial.

    Raises:
        TransportError: If the port cannot be opened.
    """
    try:
        return serial.Serial(port, baudrate, timeout=timeout)
    except (serial.SerialException, ValueError) as e:
        raise TransportError(f"could not open serial port {port}: {e}") from e


class SkytraqConnection:
    """Manages one transport session with the receiver.

    Usage::

        conn = SkytraqConnection.connect("/dev/ttyUSB0")
        conn.write_frame(build_query_position_rate())
        frame = conn.read_frame()
        conn.close()
    """

    def __init__(
        self,
        transport: Transport,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_irrelevant: int = DEFAULT_MAX_IRRELEVANT,
        port_name: str = "",
    ) -> None:
        self._transport = transport
        self._codec = FrameCodec(transport)
        self._channel = ReliableChannel(self._codec, max_attempts, max_irrelevant)
        self._port_name = port_name
        self._connected = True

    @classmethod
    def connect(
        cls,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT_S,
        *,
        open_port: Callable[..., Transport] = open_serial_port,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_irrelevant: int = DEFAULT_MAX_IRRELEVANT,
    ) -> SkytraqConnection:
        """Open ``port`` and perform the startup handshake.

        Raises:
            TransportError: If the port cannot be opened or fails.
            RetriesExceededError: If the receiver never acknowledges.
        """
        transport = open_port(port, baudrate, timeout)
        conn = cls(
            transport,
            max_attempts=max_attempts,
            max_irrelevant=max_irrelevant,
            port_name=port,
        )
        try:
            conn.open()
        except Exception:
            conn.close()
            raise
        logger.info("Connected to receiver on %s at %d baud", port, baudrate)
        return conn

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def port_name(self) -> str:
        return self._port_name

    @property
    def codec(self) -> FrameCodec:
        return self._codec

    @property
    def channel(self) -> ReliableChannel:
        return self._channel

    def open(self) -> None:
        """Discard stale input and confirm the receiver answers commands.

        The receiver streams continuously, so anything buffered before the
        handshake is dropped first. It acknowledges the software version
        query and then sends a Software Version frame, which is left on the
        stream for the caller.
        """
        self._require_connected()
        # pyserial's flush() only drains output
        reset_input = getattr(self._transport, "reset_input_buffer", None)
        try:
            if reset_input is not None:
                reset_input()
            self._transport.flush()
        except OSError as e:
            raise TransportError(f"flush failed: {e}") from e
        self.write_frame(build_query_software_version())

    def close(self) -> None:
        """Close the transport. Safe to call more than once."""
        if not self._connected:
            return

        try:
            self._transport.close()
        except OSError as e:
            logger.warning("Error closing port: %s", e)
        finally:
            self._connected = False
            logger.info("Disconnected")

    def __enter__(self) -> SkytraqConnection:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_connected(self) -> None:
        if not self._connected:
            raise TransportError("Not connected to receiver")

    def write_frame(self, frame: Frame) -> int:
        """Send a frame and wait for its ACK. Returns the attempts used.

        The transport is closed if the link fails.
        """
        self._require_connected()
        try:
            return self._channel.send(frame)
        except TransportError:
            self.close()
            raise

    def read_frame(self) -> Frame:
        """Read the next frame from the receiver.

        The transport is closed if the link fails.
        """
        self._require_connected()
        try:
            return self._codec.read_frame()
        except TransportError:
            self.close()
            raise

    def request(
        self,
        frame: Frame,
        response_id: int,
        max_frames: int = DEFAULT_RESPONSE_FRAMES,
    ) -> Frame:
        """Send a query and return the response frame with ``response_id``.

        Frames of other kinds arriving in between are skipped.

        Raises:
            ProtocolError: If the response does not arrive within
                ``max_frames`` frames after the ACK.
        """
        self.write_frame(frame)
        for _ in range(max_frames):
            response = self.read_frame()
            if response.id == response_id:
                return response
            logger.debug("skipping frame 0x%02X while waiting for 0x%02X",
                         response.id, response_id)
        raise ProtocolError(
            f"no 0x{response_id:02X} response within {max_frames} frames"
        )

    def start(
        self,
        handlers: MessageHandlers,
        stop: threading.Event | None = None,
    ) -> None:
        """Run the receive loop until ``stop`` is set or reading fails.

        The transport is closed when the loop ends on a transport error; the
        caller is expected to reconnect.
        """
        self._require_connected()
        try:
            Session(self._codec).run(handlers, stop)
        except TransportError:
            self.close()
            raise
