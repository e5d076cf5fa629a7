"""Value types shared across the projection engine and the renderer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence, Union


def _finite(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected number for '{field_name}'")
    out = float(value)
    if not math.isfinite(out):
        raise ValueError(f"Expected finite number for '{field_name}'")
    return out


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Geographic position in degrees."""

    lon: float
    lat: float

    @classmethod
    def of(cls, value: Coordinate | Sequence[float]) -> Coordinate:
        if isinstance(value, Coordinate):
            return value
        if len(value) < 2:
            raise ValueError("Coordinate needs (lon, lat)")
        return cls(lon=float(value[0]), lat=float(value[1]))

    def as_tuple(self) -> tuple[float, float]:
        return (self.lon, self.lat)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lon) and math.isfinite(self.lat)


@dataclass(frozen=True, slots=True)
class ProjectedPoint:
    """Output-plane position; `wrapped` reports an antimeridian crossing."""

    x: float
    y: float
    wrapped: bool = False

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: ProjectedPoint) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True, slots=True)
class Viewport:
    """Pixel rectangle the composite projection is fitted to."""

    x0: float
    y0: float
    x1: float
    y1: float

    def __post_init__(self) -> None:
        if not self.x1 > self.x0 or not self.y1 > self.y0:
            raise ValueError(
                f"Viewport must have positive extent, got ({self.x0}, {self.y0}, {self.x1}, {self.y1})"
            )

    @classmethod
    def of(cls, value: Viewport | Sequence[float]) -> Viewport:
        if isinstance(value, Viewport):
            return value
        if len(value) != 4:
            raise ValueError("Viewport needs (x0, y0, x1, y1)")
        return cls(
            x0=_finite(value[0], "viewport.x0"),
            y0=_finite(value[1], "viewport.y0"),
            x1=_finite(value[2], "viewport.x1"),
            y1=_finite(value[3], "viewport.y1"),
        )

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def smaller_dimension(self) -> float:
        """Half of the shorter side; the unit composite scales are normalised by."""
        return min(self.width, self.height) * 0.5

    @property
    def center(self) -> tuple[float, float]:
        return (self.x0 + self.width / 2.0, self.y0 + self.height / 2.0)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)


@dataclass(frozen=True, slots=True)
class MoveTo:
    point: ProjectedPoint


@dataclass(frozen=True, slots=True)
class LineTo:
    point: ProjectedPoint


@dataclass(frozen=True, slots=True)
class ClosePath:
    pass


PathInstruction = Union[MoveTo, LineTo, ClosePath]
