"""Settings for the Bollinger Band engine.

:class:`BandSettings` is an immutable value validated on construction, so the
engine itself can assume ``length >= 1`` and a known source field without any
clamping of its own.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Any, Mapping


class Source(str, Enum):
    """Candle field the indicator is computed from."""

    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"

    @classmethod
    def parse(cls, value: Source | str) -> Source:
        """Return the member for *value* (case-insensitive for strings).

        Raises:
            ValueError: If *value* names no known source field.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            member = _SOURCE_BY_NAME.get(value.strip().lower())
            if member is not None:
                return member
        available = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown source '{value}'. Available: {available}")


_SOURCE_BY_NAME: dict[str, Source] = {m.value: m for m in Source}


class MAType(str, Enum):
    """Moving average used for the basis line."""

    SMA = "SMA"

    @classmethod
    def parse(cls, value: MAType | str) -> MAType:
        """Return the member for *value*.

        Raises:
            ValueError: If *value* names no supported moving average.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().upper():
                    return member
        available = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown moving average type '{value}'. Available: {available}")


def _is_int(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class BandSettings:
    """Parameters for one Bollinger Band computation.

    Attributes:
        length: Window length in bars, at least 1.
        ma_type: Moving average for the basis line.
        std_dev_multiplier: Number of standard deviations between the basis
            and each band.  Must be finite and non-negative.
        offset: Bars to shift the output values by.  Positive values lag,
            negative values look ahead.  Timestamps are never shifted.
        source: Candle field the bands are computed from.
    """

    length: int = 20
    ma_type: MAType = MAType.SMA
    std_dev_multiplier: float = 2.0
    offset: int = 0
    source: Source = Source.CLOSE

    def __post_init__(self) -> None:
        if not _is_int(self.length) or self.length < 1:
            raise ValueError(f"length must be an integer >= 1, got {self.length!r}")
        if not _is_int(self.offset):
            raise ValueError(f"offset must be an integer, got {self.offset!r}")

        mult = self.std_dev_multiplier
        if isinstance(mult, bool) or not isinstance(mult, Real):
            raise ValueError(f"std_dev_multiplier must be a number, got {mult!r}")
        if not math.isfinite(mult) or mult < 0:
            raise ValueError(
                f"std_dev_multiplier must be finite and >= 0, got {mult!r}"
            )

        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(self, "length", int(self.length))
        object.__setattr__(self, "offset", int(self.offset))
        object.__setattr__(self, "std_dev_multiplier", float(mult))
        object.__setattr__(self, "source", Source.parse(self.source))
        object.__setattr__(self, "ma_type", MAType.parse(self.ma_type))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> BandSettings:
        """Build settings from a config mapping.

        Missing keys take their defaults.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        if not data:
            return cls()
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown band setting(s): {', '.join(unknown)}. "
                f"Available: {', '.join(sorted(known))}"
            )
        return cls(**dict(data))

    def replace(self, **changes: Any) -> BandSettings:
        """Return a copy with *changes* applied (and validated)."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "length": self.length,
            "ma_type": self.ma_type.value,
            "std_dev_multiplier": self.std_dev_multiplier,
            "offset": self.offset,
            "source": self.source.value,
        }


DEFAULT_SETTINGS = BandSettings()
