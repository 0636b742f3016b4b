"""Software version and CRC models.

Software Version (0x80) payload, 13 bytes::

    +------+----------------+------+-------------+------+------------------+
    | Type | Kernel (x.y.z) | pad  | ODM (x.y.z) | pad  | Revision (YYMMDD)|
    | 0..1 |     2..4       |  5   |    6..8     |  9   |      10..12      |
    +------+----------------+------+-------------+------+------------------+
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import ConversionError

logger = logging.getLogger(__name__)

SOFTWARE_VERSION_SIZE = 13
SOFTWARE_CRC_SIZE = 3
REVISION_BASE_YEAR = 2000


def require_length(kind: str, data: bytes, expected: int) -> None:
    """Raise ConversionError unless ``data`` is exactly ``expected`` bytes."""
    if len(data) != expected:
        logger.error(
            "expecting %d bytes of %s data, received %d", expected, kind, len(data)
        )
        raise ConversionError(
            f"{kind} conversion requires {expected} bytes but received {len(data)}"
        )


@dataclass(frozen=True)
class Version:
    """A three-part version number."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class SoftwareVersion:
    """Kernel, ODM and revision versions reported by the receiver."""

    kernel: Version
    odm: Version
    revision: Version

    def __str__(self) -> str:
        return (
            f"GPS kernel version: {self.kernel} - ODM version: {self.odm} - "
            f"Revision: {self.revision}"
        )

    def to_dict(self) -> dict:
        return {
            "kernel": str(self.kernel),
            "odm": str(self.odm),
            "revision": str(self.revision),
        }

    @classmethod
    def from_bytes(cls, data: bytes) -> SoftwareVersion:
        require_length("software version", data, SOFTWARE_VERSION_SIZE)
        return cls(
            kernel=Version(data[2], data[3], data[4]),
            odm=Version(data[6], data[7], data[8]),
            revision=Version(REVISION_BASE_YEAR + data[10], data[11], data[12]),
        )


@dataclass(frozen=True)
class SoftwareCRC:
    """Software CRC (0x81) response."""

    software_type: int
    crc: int

    def to_dict(self) -> dict:
        return {"software_type": self.software_type, "crc": f"0x{self.crc:04X}"}

    @classmethod
    def from_bytes(cls, data: bytes) -> SoftwareCRC:
        require_length("software CRC", data, SOFTWARE_CRC_SIZE)
        return cls(software_type=data[0], crc=int.from_bytes(data[1:3], "big"))
