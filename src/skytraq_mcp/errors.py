"""Exception hierarchy for the SkyTraq link.

The classes double as built-in exceptions so callers that only know about
``ConnectionError`` or ``ValueError`` still catch the right failures.
"""

from __future__ import annotations


class SkytraqError(Exception):
    """Base class for every error raised by this package."""


class TransportError(SkytraqError, ConnectionError):
    """The underlying byte stream failed, was short-written, or ended."""


class FramingError(SkytraqError, ValueError):
    """A frame was located but its end marker or checksum is wrong."""


class ConversionError(SkytraqError, ValueError):
    """A valid frame whose payload does not match the expected layout."""


class ProtocolError(SkytraqError):
    """The device did not confirm a message the way the protocol requires."""


class NackError(ProtocolError):
    """The device answered with a NACK for the message being sent."""


class IrrelevantFramesError(ProtocolError):
    """Too many unrelated frames arrived while waiting for an ACK/NACK."""


class RetriesExceededError(ProtocolError):
    """Every send attempt failed; ``last_error`` holds the final cause."""

    def __init__(self, attempts: int, last_error: Exception | None) -> None:
        super().__init__(f"exceeded retries: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
