"""Linear cross-fade between two projections sharing one output plane."""

from __future__ import annotations

import math
from typing import Sequence

from .models import Coordinate, ProjectedPoint
from .projection import Projection


class BlendedProjection(Projection):
    """`(1 - alpha) * first + alpha * second`, on both forward and inverse outputs.

    The pair is fixed at construction; configuration setters are not
    supported because a blend only exists for the lifetime of one selection.
    The inverse is the blend of the two inverses, which is only an
    approximation of the true inverse of the blended forward map.
    """

    name = "blend"

    def __init__(self, first: Projection, second: Projection, alpha: float) -> None:
        super().__init__()
        weight = float(alpha)
        if not math.isfinite(weight) or weight < 0.0 or weight > 1.0:
            raise ValueError(f"Blend weight must lie in [0, 1], got {alpha!r}")
        self.first = first
        self.second = second
        self.alpha = weight

    def should_interpolate(self) -> bool:
        return self.first.should_interpolate() or self.second.should_interpolate()

    def validate_path(self, coordinates: Sequence[Coordinate | Sequence[float]]) -> bool:
        return self.first.validate_path(coordinates) and self.second.validate_path(coordinates)

    def forward(self, coordinate: Coordinate | Sequence[float]) -> ProjectedPoint:
        a = self.first.forward(coordinate)
        b = self.second.forward(coordinate)
        alpha = self.alpha
        return ProjectedPoint(
            x=(1.0 - alpha) * a.x + alpha * b.x,
            y=(1.0 - alpha) * a.y + alpha * b.y,
            wrapped=a.wrapped if alpha < 0.5 else b.wrapped,
        )

    def inverse(self, point: ProjectedPoint | Sequence[float]) -> Coordinate:
        a = self.first.inverse(point)
        b = self.second.inverse(point)
        alpha = self.alpha
        return Coordinate(
            lon=(1.0 - alpha) * a.lon + alpha * b.lon,
            lat=(1.0 - alpha) * a.lat + alpha * b.lat,
        )

    def frame(self, coordinate: Coordinate | Sequence[float]) -> tuple[float, float]:
        return (self.first if self.alpha < 0.5 else self.second).frame(coordinate)

    def scale(self, value: float | None = None):
        if value is None:
            return self.first.scale()
        raise TypeError("BlendedProjection is immutable; build a new blend instead")

    def translate(self, value: Sequence[float] | None = None):
        if value is None:
            return self.first.translate()
        raise TypeError("BlendedProjection is immutable; build a new blend instead")

    def rotate(self, value: Sequence[float] | None = None):
        if value is None:
            return self.first.rotate()
        raise TypeError("BlendedProjection is immutable; build a new blend instead")

    def center(self, value: Coordinate | Sequence[float] | None = None):
        if value is None:
            return self.first.center()
        raise TypeError("BlendedProjection is immutable; build a new blend instead")

    def origin(self, value: Coordinate | Sequence[float] | None = None):
        if value is None:
            return self.first.origin()
        raise TypeError("BlendedProjection is immutable; build a new blend instead")

    def __repr__(self) -> str:
        return f"BlendedProjection({self.first!r}, {self.second!r}, alpha={self.alpha:g})"
