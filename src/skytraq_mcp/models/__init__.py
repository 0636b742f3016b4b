"""Typed views of receiver payloads."""

from .version import Version, SoftwareVersion, SoftwareCRC
from .navigation import FixMode, NavigationSolution
from .system import PositionRate, PowerMode
