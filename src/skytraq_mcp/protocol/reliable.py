"""Acknowledged delivery of command frames.

Every command sent to the receiver is answered with an ACK or NACK carrying
the command's message ID. The receiver keeps streaming telemetry meanwhile,
so unrelated frames are tolerated up to a bound before an attempt is given up.
"""

from __future__ import annotations

import logging

from ..errors import (
    FramingError,
    IrrelevantFramesError,
    NackError,
    ProtocolError,
    RetriesExceededError,
    TransportError,
)
from .codec import FrameCodec
from .framing import Frame

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MAX_IRRELEVANT = 5


class ReliableChannel:
    """Sends frames and waits for the matching acknowledgement.

    Usage::

        channel = ReliableChannel(FrameCodec(port))
        channel.send(build_query_software_version())
    """

    def __init__(
        self,
        codec: FrameCodec,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_irrelevant: int = DEFAULT_MAX_IRRELEVANT,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if max_irrelevant < 0:
            raise ValueError(f"max_irrelevant must not be negative, got {max_irrelevant}")
        self._codec = codec
        self._max_attempts = max_attempts
        self._max_irrelevant = max_irrelevant

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def max_irrelevant(self) -> int:
        return self._max_irrelevant

    def send(self, frame: Frame) -> int:
        """Write a frame and wait for its ACK, retrying on failure.

        A NACK, too many irrelevant frames, or a read/framing error while
        waiting fails the attempt and the frame is written again.

        Returns:
            The number of attempts it took.

        Raises:
            TransportError: If writing the frame fails. Not retried.
            RetriesExceededError: If no attempt was acknowledged.
        """
        last_error: Exception | None = None

        for attempt in range(1, self._max_attempts + 1):
            if last_error is not None:
                logger.error("attempt %d failed: %s", attempt - 1, last_error)

            self._codec.write_frame(frame)
            try:
                self.wait_for_ack(frame.id)
            except (ProtocolError, FramingError, TransportError) as e:
                last_error = e
                continue

            if attempt > 1:
                logger.warning(
                    "write frame successful after retry (retry count %d)", attempt - 1
                )
            return attempt

        raise RetriesExceededError(self._max_attempts, last_error) from last_error

    def wait_for_ack(self, message_id: int) -> None:
        """Read frames until the ACK or NACK for ``message_id`` arrives.

        The frame that pushes the irrelevant count over the bound is dropped.

        Raises:
            NackError: If the device rejected the message.
            IrrelevantFramesError: If too many unrelated frames arrived first.
            TransportError, FramingError: If reading a frame fails.
        """
        irrelevant = 0
        while True:
            frame = self._codec.read_frame()
            acked = frame.ack_message_id

            if frame.is_ack and acked == message_id:
                logger.debug("received expected ACK for message ID 0x%02X", message_id)
                return
            if frame.is_nack and acked == message_id:
                raise NackError(
                    f"received NACK for ID {acked} on attempt to send {message_id}"
                )

            if acked is not None:
                logger.warning(
                    "unexpected %s for message ID 0x%02X (irrelevant count %d)",
                    "ACK" if frame.is_ack else "NACK",
                    acked,
                    irrelevant,
                )
            else:
                logger.warning("ignoring non-ACK/NACK frame 0x%02X", frame.id)
            irrelevant += 1

            if irrelevant > self._max_irrelevant:
                raise IrrelevantFramesError(
                    "too many irrelevant messages while waiting for ACK/NACK "
                    f"for message ID {message_id}"
                )
