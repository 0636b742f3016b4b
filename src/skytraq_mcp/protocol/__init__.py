"""Protocol layer: framing, stream codec, acknowledged delivery, commands and parsing."""

from .framing import Frame, build_frame, parse_frame
from .codec import FrameCodec
from .reliable import ReliableChannel
from .commands import MessageID, build_command
