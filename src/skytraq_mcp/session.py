"""Receive loop dispatching decoded frames to typed handlers."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from .errors import ConversionError
from .models.navigation import NavigationSolution
from .models.system import PositionRate, PowerMode
from .models.version import SoftwareCRC, SoftwareVersion
from .protocol.codec import FrameCodec
from .protocol.commands import MessageID
from .protocol.framing import Frame
from .protocol.parser import PARSERS

logger = logging.getLogger(__name__)


@dataclass
class MessageHandlers:
    """Callbacks for each message kind. Unset kinds are not decoded."""

    software_version: Callable[[SoftwareVersion], None] | None = None
    software_crc: Callable[[SoftwareCRC], None] | None = None
    position_rate: Callable[[PositionRate], None] | None = None
    navigation: Callable[[NavigationSolution], None] | None = None
    power_mode: Callable[[PowerMode], None] | None = None
    unhandled: Callable[[Frame], None] | None = None

    def for_message(self, message_id: int) -> Callable[[Any], None] | None:
        return {
            MessageID.SOFTWARE_VERSION: self.software_version,
            MessageID.SOFTWARE_CRC: self.software_crc,
            MessageID.POSITION_RATE: self.position_rate,
            MessageID.NAVIGATION_DATA: self.navigation,
            MessageID.POWER_MODE: self.power_mode,
        }.get(message_id)


class Session:
    """Pulls frames off a codec and hands them to handlers.

    Handlers run on the reading thread, so a slow handler delays the next
    read.
    """

    def __init__(self, codec: FrameCodec) -> None:
        self._codec = codec

    def run(
        self,
        handlers: MessageHandlers,
        stop: threading.Event | None = None,
    ) -> None:
        """Dispatch frames until ``stop`` is set or an error occurs.

        ``stop`` is checked once per decoded frame; a blocked read is bounded
        by the transport's read timeout.

        Raises:
            TransportError, FramingError: From reading the next frame.
            ConversionError: If a handled frame has a malformed payload.
        """
        while True:
            frame = self._codec.read_frame()
            self.dispatch(frame, handlers)

            if stop is not None and stop.is_set():
                logger.info("session stopped")
                return

    def dispatch(self, frame: Frame, handlers: MessageHandlers) -> None:
        handler = handlers.for_message(frame.id)
        if handler is not None:
            try:
                message = PARSERS[frame.id](frame)
            except ConversionError as e:
                raise ConversionError(
                    f"error when converting message 0x{frame.id:02X}: {e}"
                ) from e
            handler(message)
        elif handlers.unhandled is not None:
            handlers.unhandled(frame)
