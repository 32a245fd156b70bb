"""
Simulation clock values.

``SimTime`` is an immutable count of nanoseconds since the simulation epoch.
Arithmetic never clamps: ``deadline - now`` may legitimately be negative.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000

_UNIT_NANOS = {
    "ns": 1,
    "us": _NANOS_PER_MICRO,
    "ms": _NANOS_PER_MILLI,
    "s": _NANOS_PER_SECOND,
}


@dataclass(frozen=True, order=True)
class SimTime:
    nanos: int = 0

    ZERO: ClassVar["SimTime"]

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def of_nanos(cls, nanos: int) -> "SimTime":
        return cls(int(nanos))

    @classmethod
    def of_micros(cls, micros: int) -> "SimTime":
        return cls(int(micros) * _NANOS_PER_MICRO)

    @classmethod
    def of_millis(cls, millis: int) -> "SimTime":
        return cls(int(millis) * _NANOS_PER_MILLI)

    @classmethod
    def of_seconds(cls, seconds: Union[int, float]) -> "SimTime":
        """Whole seconds are exact; fractional seconds round to the nearest ns."""
        if isinstance(seconds, int):
            return cls(seconds * _NANOS_PER_SECOND)
        return cls(int(round(seconds * _NANOS_PER_SECOND)))

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: "SimTime") -> "SimTime":
        if not isinstance(other, SimTime):
            return NotImplemented
        return SimTime(self.nanos + other.nanos)

    def __sub__(self, other: "SimTime") -> "SimTime":
        if not isinstance(other, SimTime):
            return NotImplemented
        return SimTime(self.nanos - other.nanos)

    def __mul__(self, factor: float) -> "SimTime":
        if isinstance(factor, SimTime):
            return NotImplemented
        return SimTime(int(self.nanos * factor))

    __rmul__ = __mul__

    def __truediv__(self, factor: float) -> "SimTime":
        if isinstance(factor, SimTime):
            return NotImplemented
        if factor == 0:
            raise ZeroDivisionError("cannot divide SimTime by zero")
        return SimTime(int(self.nanos / factor))

    def __neg__(self) -> "SimTime":
        return SimTime(-self.nanos)

    def __abs__(self) -> "SimTime":
        return SimTime(abs(self.nanos))

    # ------------------------------------------------------------------
    # Conversions and predicates
    # ------------------------------------------------------------------

    def to_nanos(self) -> int:
        return self.nanos

    def to_micros(self) -> int:
        return int(self.nanos / _NANOS_PER_MICRO)

    def to_millis(self) -> int:
        return int(self.nanos / _NANOS_PER_MILLI)

    def to_seconds(self) -> float:
        return self.nanos / _NANOS_PER_SECOND

    def is_zero(self) -> bool:
        return self.nanos == 0

    def is_positive(self) -> bool:
        return self.nanos > 0

    def is_negative(self) -> bool:
        return self.nanos < 0

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def format(self, unit: str) -> str:
        """Render as a truncated integer in ``unit`` (one of ns, us, ms, s)."""
        try:
            per_unit = _UNIT_NANOS[unit]
        except KeyError:
            raise ValueError(
                f"Unknown time unit '{unit}'. Valid options: {list(_UNIT_NANOS)}"
            ) from None
        return f"{int(self.nanos / per_unit)}{unit}"

    def __str__(self) -> str:
        n = self.nanos
        if n == 0:
            return "0s"
        magnitude = abs(n)
        if magnitude < _NANOS_PER_MICRO:
            return f"{n}ns"
        if magnitude < _NANOS_PER_MILLI:
            return f"{n / _NANOS_PER_MICRO:.3f}µs"
        if magnitude < _NANOS_PER_SECOND:
            return f"{n / _NANOS_PER_MILLI:.3f}ms"
        return f"{n / _NANOS_PER_SECOND:.3f}s"


SimTime.ZERO = SimTime(0)
