"""Generalized Hammer projection; B=2 is Hammer, B=1 is Lambert azimuthal equal-area."""

from __future__ import annotations

import math
from typing import Sequence

from .constants import NUMERIC, RIM
from .models import Coordinate
from .projection import NotInvertible, Projection, safe_asin, safe_atan2

_SQRT2 = math.sqrt(2.0)


class HammerProjection(Projection):
    """Hammer-family azimuthal projection with shape constant B in [1, 2]."""

    name = "hammer"
    origin_tilts = True

    def __init__(self, b: float = 2.0) -> None:
        super().__init__()
        self._b = 2.0
        self.b(b)

    def b(self, value: float | None = None):
        if value is None:
            return self._b
        shape = float(value)
        if not math.isfinite(shape) or shape < 1.0 or shape > 2.0:
            raise ValueError(f"Hammer shape constant B must lie in [1, 2], got {value!r}")
        self._b = shape
        self._refresh_center()
        return self

    @property
    def is_lambert(self) -> bool:
        return abs(self._b - 1.0) <= RIM.lambert_b_tolerance

    def raw_forward(self, lam: float, phi: float) -> tuple[float, float]:
        b = self._b
        cos_phi = math.cos(phi)
        nu = math.sqrt(max(1.0 + cos_phi * math.cos(lam / b), 0.0))
        if nu < NUMERIC.nu_floor:
            nu = NUMERIC.nu_floor
        x = b * _SQRT2 * cos_phi * math.sin(lam / b) / nu
        y = _SQRT2 * math.sin(phi) / nu
        return (0.5 * x, 0.5 * y)

    def raw_inverse(self, x: float, y: float) -> tuple[float, float]:
        wx = 2.0 * x / self._b
        wy = 2.0 * y
        radicand = 1.0 - 0.25 * (wx * wx + wy * wy)
        if radicand < 0.0:
            return (math.nan, math.nan)
        z = math.sqrt(radicand)
        denominator = 2.0 * z * z - 1.0
        if abs(denominator) < NUMERIC.singular_inverse_eps:
            raise NotInvertible(f"Hammer inverse is singular at ({x:.6g}, {y:.6g})")
        lam = self._b * safe_atan2(wx * z, denominator)
        phi = safe_asin(max(-1.0, min(1.0, z * wy)))
        return (lam, phi)

    def validate_path(self, coordinates: Sequence[Coordinate | Sequence[float]]) -> bool:
        """Reject a path whose every vertex hugs the antipode.

        Under Lambert azimuthal the antipode spreads over the whole outer rim,
        so a small polygon around it projects as a full-disk blob. The band
        test is an approximation; it does not detect rings that merely enclose
        the antipode.
        """
        if not self.is_lambert:
            return True
        for coordinate in coordinates:
            lam, phi = self.frame(coordinate)
            near_rim = (math.pi - abs(lam)) < RIM.lon_margin_rad and abs(phi) < RIM.lat_margin_rad
            if not near_rim:
                return True
        return False

    def __repr__(self) -> str:
        return super().__repr__()[:-1] + f", b={self._b:g})"


def lambert_azimuthal() -> HammerProjection:
    return HammerProjection(b=1.0)
