"""Spherical Albers equal-area conic projection."""

from __future__ import annotations

import math
from typing import Sequence

from .constants import NUMERIC
from .projection import Projection, safe_asin


def _sign(value: float) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


class AlbersConicProjection(Projection):
    """Albers conic with two standard parallels, at half scale.

    A cone whose constant `n` vanishes (parallels symmetric about the equator)
    is replaced by the cylindrical equal-area projection true at the first
    parallel, which is the limit the cone tends to.
    """

    name = "albers"
    origin_tilts = False

    def __init__(self, parallels: Sequence[float] = (29.5, 45.5)) -> None:
        super().__init__()
        self._parallels = (0.0, 0.0)
        self._n = 0.0
        self._c = 1.0
        self._rho0 = 0.0
        self._cos_phi1 = 1.0
        self._degenerate = True
        self.parallels(parallels)

    def parallels(self, value: Sequence[float] | None = None):
        if value is None:
            return self._parallels
        if len(value) != 2:
            raise ValueError("Expected two standard parallels")
        phi1_deg, phi2_deg = float(value[0]), float(value[1])
        for item in (phi1_deg, phi2_deg):
            if not math.isfinite(item) or abs(item) > 90.0:
                raise ValueError(f"Standard parallel must lie in [-90, 90], got {item!r}")
        self._parallels = (phi1_deg, phi2_deg)

        sin_phi1 = math.sin(math.radians(phi1_deg))
        n = (sin_phi1 + math.sin(math.radians(phi2_deg))) / 2.0
        self._cos_phi1 = max(math.cos(math.radians(phi1_deg)), NUMERIC.nu_floor)
        self._degenerate = abs(n) < NUMERIC.conic_degenerate_eps
        if not self._degenerate:
            self._n = n
            self._c = 1.0 + sin_phi1 * (2.0 * n - sin_phi1)
            self._rho0 = math.sqrt(self._c) / n
        self._refresh_center()
        return self

    @property
    def is_degenerate(self) -> bool:
        return self._degenerate

    def raw_forward(self, lam: float, phi: float) -> tuple[float, float]:
        if self._degenerate:
            return (0.5 * lam * self._cos_phi1, 0.5 * math.sin(phi) / self._cos_phi1)
        n = self._n
        rho = math.sqrt(max(self._c - 2.0 * n * math.sin(phi), 0.0)) / n
        return (0.5 * rho * math.sin(lam * n), 0.5 * (self._rho0 - rho * math.cos(lam * n)))

    def raw_inverse(self, x: float, y: float) -> tuple[float, float]:
        x, y = (2.0 * x, 2.0 * y)
        if self._degenerate:
            return (x / self._cos_phi1, safe_asin(y * self._cos_phi1))
        n = self._n
        r0y = self._rho0 - y
        lam = math.atan2(x, abs(r0y)) * _sign(r0y)
        if r0y * n < 0:
            lam -= math.pi * _sign(x) * _sign(r0y)
        phi = safe_asin((self._c - (x * x + r0y * r0y) * n * n) / (2.0 * n))
        return (lam / n, phi)

    def __repr__(self) -> str:
        return super().__repr__()[:-1] + f", parallels=({self._parallels[0]:g}, {self._parallels[1]:g}))"
