"""Navigation data model: decode the 58-byte Navigation Data (0xA8) payload.

Offsets (big-endian)::

    0       fix mode
    2       satellites in view
    8..12   latitude          (int32)
    12..16  longitude         (int32)
    20..24  altitude          (int32)
    28..30  HDOP              (uint16)
    46..50  ECEF velocity X   (int32)
    50..54  ECEF velocity Y   (int32)
    54..58  ECEF velocity Z   (int32)

Scaling of the values is left to the caller.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from .version import require_length

NAVIGATION_DATA_SIZE = 58


class FixMode(IntEnum):
    NONE = 0
    FIX_2D = 1
    FIX_3D = 2
    FIX_3D_DGNSS = 3


def _int32(data: bytes, offset: int) -> int:
    return struct.unpack_from(">i", data, offset)[0]


@dataclass(frozen=True)
class NavigationSolution:
    """A position/velocity fix as reported by the receiver."""

    fix: int
    satellite_count: int
    latitude: int
    longitude: int
    altitude: int
    hdop: int
    vx: int
    vy: int
    vz: int

    @property
    def has_fix(self) -> bool:
        return self.fix != FixMode.NONE

    def to_dict(self) -> dict:
        try:
            fix_name = FixMode(self.fix).name
        except ValueError:
            fix_name = f"UNKNOWN({self.fix})"
        return {
            "fix": fix_name,
            "satellite_count": self.satellite_count,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "hdop": self.hdop,
            "velocity": {"x": self.vx, "y": self.vy, "z": self.vz},
        }

    @classmethod
    def from_bytes(cls, data: bytes) -> NavigationSolution:
        require_length("navigation data", data, NAVIGATION_DATA_SIZE)
        return cls(
            fix=data[0],
            satellite_count=data[2],
            latitude=_int32(data, 8),
            longitude=_int32(data, 12),
            altitude=_int32(data, 20),
            hdop=int.from_bytes(data[28:30], "big"),
            vx=_int32(data, 46),
            vy=_int32(data, 50),
            vz=_int32(data, 54),
        )
