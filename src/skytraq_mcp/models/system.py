"""Receiver configuration models: position update rate and power mode."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..errors import ConversionError
from .version import require_length


class PowerModeKind(IntEnum):
    NORMAL = 0
    POWER_SAVE = 1


@dataclass(frozen=True)
class PositionRate:
    """Position update rate (0x86) in Hz."""

    rate_hz: int

    def to_dict(self) -> dict:
        return {"rate_hz": self.rate_hz}

    @classmethod
    def from_bytes(cls, data: bytes) -> PositionRate:
        # newer firmware appends extra fields after the rate
        if len(data) < 1:
            raise ConversionError("position rate conversion requires at least 1 byte")
        return cls(rate_hz=data[0])


@dataclass(frozen=True)
class PowerMode:
    """Power mode (0xB9) setting."""

    mode: int

    @property
    def power_save(self) -> bool:
        return self.mode == PowerModeKind.POWER_SAVE

    def to_dict(self) -> dict:
        return {"mode": self.mode, "power_save": self.power_save}

    @classmethod
    def from_bytes(cls, data: bytes) -> PowerMode:
        require_length("power mode", data, 1)
        return cls(mode=data[0])
