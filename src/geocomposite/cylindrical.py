"""Cylindrical members of the composite family."""

from __future__ import annotations

import math

from .constants import NUMERIC
from .projection import Projection, safe_asin

_MERCATOR_MAX_PHI = math.radians(NUMERIC.mercator_max_lat_deg)


class CylindricalEqualAreaProjection(Projection):
    """Lambert cylindrical equal-area: x = lambda, y = sin(phi), at half scale."""

    name = "lambert_cylindrical"
    origin_tilts = False

    def __init__(self) -> None:
        super().__init__()
        self._refresh_center()

    def should_interpolate(self) -> bool:
        return False

    def raw_forward(self, lam: float, phi: float) -> tuple[float, float]:
        return (0.5 * lam, 0.5 * math.sin(phi))

    def raw_inverse(self, x: float, y: float) -> tuple[float, float]:
        return (2.0 * x, safe_asin(2.0 * y))


class MercatorProjection(Projection):
    """Spherical Mercator at half scale, latitude capped short of the poles."""

    name = "mercator"
    origin_tilts = False

    def __init__(self) -> None:
        super().__init__()
        self._refresh_center()

    def should_interpolate(self) -> bool:
        return False

    def raw_forward(self, lam: float, phi: float) -> tuple[float, float]:
        phi = max(-_MERCATOR_MAX_PHI, min(_MERCATOR_MAX_PHI, phi))
        return (0.5 * lam, 0.5 * math.log(math.tan(math.pi / 4.0 + phi / 2.0)))

    def raw_inverse(self, x: float, y: float) -> tuple[float, float]:
        # exp() overflows past ~709; the latitude has long saturated by then.
        exponent = max(-700.0, min(700.0, 2.0 * y)) if math.isfinite(y) else y
        return (2.0 * x, 2.0 * math.atan(math.exp(exponent)) - math.pi / 2.0)
