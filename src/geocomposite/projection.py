"""Projection contract shared by every concrete and composite projection.

A projection maps a geographic coordinate (degrees) onto the output plane in
four steps: rotate the sphere so the origin sits in the middle of the frame,
normalise the frame longitude into (-pi, pi], apply the unit-scale raw
transform, then scale and translate (y grows downward on screen).

Raw transforms work in radians and return y pointing up. Subclasses provide
`raw_forward` and `raw_inverse`; everything else lives here.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from .constants import NUMERIC
from .models import Coordinate, ProjectedPoint

_LOGGER = logging.getLogger("geocomposite.projection")

_TWO_PI = 2.0 * math.pi


class NotInvertible(ValueError):
    """Raised when the inverse transform is algebraically singular at a point."""


def normalize_longitude(lam: float) -> tuple[float, bool]:
    """Bring `lam` into (-pi, pi]; the flag toggles once per 2*pi step taken."""
    if not math.isfinite(lam) or -math.pi < lam <= math.pi:
        return (lam, False)
    turns = math.floor((math.pi - lam) / _TWO_PI)
    return (lam + turns * _TWO_PI, turns % 2 != 0)


def safe_asin(value: float) -> float:
    """asin that tolerates floating-point overshoot just beyond +-1."""
    magnitude = abs(value)
    if magnitude >= 1.0:
        if magnitude > NUMERIC.asin_one_tol:
            return math.nan
        return -math.pi / 2.0 if value < 0 else math.pi / 2.0
    return math.asin(value)


def safe_atan2(numerator: float, denominator: float) -> float:
    """atan2 that reads two vanishing arguments as angle zero."""
    eps = NUMERIC.atan2_zero_eps
    if abs(numerator) < eps and abs(denominator) < eps:
        return 0.0
    return math.atan2(numerator, denominator)


class SphereRotation:
    """Rotation about the polar axis, then about the frame's x and z axes.

    Angles are radians in the d3 sign convention: rotating by
    `(-lon0, -lat0, 0)` brings `(lon0, lat0)` to the frame origin.
    """

    __slots__ = ("dlam", "dphi", "dgamma", "_cos_phi", "_sin_phi", "_cos_gamma", "_sin_gamma")

    def __init__(self, dlam: float = 0.0, dphi: float = 0.0, dgamma: float = 0.0) -> None:
        self.dlam = dlam
        self.dphi = dphi
        self.dgamma = dgamma
        self._cos_phi = math.cos(dphi)
        self._sin_phi = math.sin(dphi)
        self._cos_gamma = math.cos(dgamma)
        self._sin_gamma = math.sin(dgamma)

    @property
    def tilts(self) -> bool:
        return self.dphi != 0.0 or self.dgamma != 0.0

    def forward(self, lam: float, phi: float) -> tuple[float, float, bool]:
        """Return the normalised frame coordinate and its wrap flag."""
        lam = lam + self.dlam
        if self.tilts:
            rotated_lam, phi = self._tilt(lam, phi)
            # Keep the frame longitude on the sheet nearest the input so the
            # wrap flag only flips where the frame's own cut is crossed.
            if math.isfinite(lam) and math.isfinite(rotated_lam):
                rotated_lam += _TWO_PI * round((lam - rotated_lam) / _TWO_PI)
            lam = rotated_lam
        lam, wrapped = normalize_longitude(lam)
        return (lam, phi, wrapped)

    def inverse(self, lam: float, phi: float) -> tuple[float, float]:
        if self.tilts:
            lam, phi = self._untilt(lam, phi)
        lam, _ = normalize_longitude(lam - self.dlam)
        return (lam, phi)

    def _tilt(self, lam: float, phi: float) -> tuple[float, float]:
        cos_phi = math.cos(phi)
        x = math.cos(lam) * cos_phi
        y = math.sin(lam) * cos_phi
        z = math.sin(phi)
        k = z * self._cos_phi + x * self._sin_phi
        return (
            math.atan2(y * self._cos_gamma - k * self._sin_gamma, x * self._cos_phi - z * self._sin_phi),
            safe_asin(k * self._cos_gamma + y * self._sin_gamma),
        )

    def _untilt(self, lam: float, phi: float) -> tuple[float, float]:
        cos_phi = math.cos(phi)
        x = math.cos(lam) * cos_phi
        y = math.sin(lam) * cos_phi
        z = math.sin(phi)
        k = z * self._cos_gamma - y * self._sin_gamma
        return (
            math.atan2(y * self._cos_gamma + z * self._sin_gamma, x * self._cos_phi + k * self._sin_phi),
            safe_asin(k * self._cos_phi - x * self._sin_phi),
        )


def _coerce_pair(value: Sequence[float], field_name: str) -> tuple[float, float]:
    if len(value) != 2:
        raise ValueError(f"Expected a pair for '{field_name}'")
    first, second = float(value[0]), float(value[1])
    if not (math.isfinite(first) and math.isfinite(second)):
        raise ValueError(f"Expected finite values for '{field_name}'")
    return (first, second)


class Projection:
    """Base projection: configuration API, rotation, scale and translate.

    Configuration methods follow the getter/setter convention: called without
    an argument they return the current value, called with one they update
    the projection and return it for chaining.
    """

    name = "projection"
    # Azimuthal projections re-centre by tilting the sphere; cylindrical and
    # conic ones only spin it and shift the frame centre instead.
    origin_tilts = True

    def __init__(self) -> None:
        self._scale = 500.0
        self._translate = (480.0, 250.0)
        self._rotation = SphereRotation()
        self._center = (0.0, 0.0)
        self._center_xy = (0.0, 0.0)

    # -- raw transform -----------------------------------------------------

    def raw_forward(self, lam: float, phi: float) -> tuple[float, float]:
        raise NotImplementedError

    def raw_inverse(self, x: float, y: float) -> tuple[float, float]:
        raise NotImplementedError

    # -- capabilities ------------------------------------------------------

    def projection_name(self) -> str:
        return self.name

    def should_interpolate(self) -> bool:
        """Whether straight source edges curve under this projection."""
        return True

    def validate_path(self, coordinates: Sequence[Coordinate | Sequence[float]]) -> bool:
        """Whether a closed path can be drawn without a distortion artefact."""
        return True

    # -- transform API -----------------------------------------------------

    def forward(self, coordinate: Coordinate | Sequence[float]) -> ProjectedPoint:
        coord = Coordinate.of(coordinate)
        lam, phi, wrapped = self._rotation.forward(math.radians(coord.lon), math.radians(coord.lat))
        x, y = self.raw_forward(lam, phi)
        return ProjectedPoint(
            x=self._translate[0] + self._scale * (x - self._center_xy[0]),
            y=self._translate[1] - self._scale * (y - self._center_xy[1]),
            wrapped=wrapped,
        )

    def inverse(self, point: ProjectedPoint | Sequence[float]) -> Coordinate:
        px, py = point.as_tuple() if isinstance(point, ProjectedPoint) else (point[0], point[1])
        x = (float(px) - self._translate[0]) / self._scale + self._center_xy[0]
        y = (self._translate[1] - float(py)) / self._scale + self._center_xy[1]
        lam, phi = self.raw_inverse(x, y)
        lam, phi = self._rotation.inverse(lam, phi)
        return Coordinate(lon=math.degrees(lam), lat=math.degrees(phi))

    def frame(self, coordinate: Coordinate | Sequence[float]) -> tuple[float, float]:
        """Rotated frame position of `coordinate` in radians."""
        coord = Coordinate.of(coordinate)
        lam, phi, _ = self._rotation.forward(math.radians(coord.lon), math.radians(coord.lat))
        return (lam, phi)

    # -- configuration API -------------------------------------------------

    def scale(self, value: float | None = None):
        if value is None:
            return self._scale
        scale = float(value)
        if not math.isfinite(scale) or scale <= 0:
            raise ValueError(f"scale must be a positive finite number, got {value!r}")
        self._scale = scale
        return self

    def translate(self, value: Sequence[float] | None = None):
        if value is None:
            return self._translate
        self._translate = _coerce_pair(value, "translate")
        return self

    def rotate(self, value: Sequence[float] | None = None):
        """Sphere rotation in degrees as `(lambda, phi, gamma)`."""
        if value is None:
            return (
                math.degrees(self._rotation.dlam),
                math.degrees(self._rotation.dphi),
                math.degrees(self._rotation.dgamma),
            )
        if len(value) not in (2, 3):
            raise ValueError("Expected two or three angles for 'rotate'")
        angles = [float(item) for item in value] + [0.0] * (3 - len(value))
        if not all(math.isfinite(item) for item in angles):
            raise ValueError("Expected finite angles for 'rotate'")
        self._rotation = SphereRotation(*(math.radians(item) for item in angles))
        return self

    def center(self, value: Coordinate | Sequence[float] | None = None):
        """Frame coordinate (degrees, after rotation) placed on `translate`."""
        if value is None:
            return Coordinate(lon=self._center[0], lat=self._center[1])
        coord = Coordinate.of(value)
        self._center = _coerce_pair(coord.as_tuple(), "center")
        self._refresh_center()
        return self

    def origin(self, value: Coordinate | Sequence[float] | None = None):
        """Geographic coordinate shown in the middle of the frame."""
        if value is None:
            dlam, dphi, _ = self.rotate()
            lat = -dphi if self.origin_tilts else self._center[1]
            return Coordinate(lon=-dlam, lat=lat)
        coord = Coordinate.of(value)
        if self.origin_tilts:
            self.rotate((-coord.lon, -coord.lat))
            self.center((0.0, 0.0))
        else:
            self.rotate((-coord.lon, 0.0))
            self.center((0.0, coord.lat))
        return self

    def _refresh_center(self) -> None:
        """Recompute the raw offset of the centre; call after raw parameters change."""
        lam, phi = (math.radians(self._center[0]), math.radians(self._center[1]))
        x, y = self.raw_forward(lam, phi)
        if not (math.isfinite(x) and math.isfinite(y)):
            _LOGGER.debug("%s: centre %s projects off the plane, using (0, 0)", self.name, self._center)
            x, y = (0.0, 0.0)
        self._center_xy = (x, y)

    def __repr__(self) -> str:
        origin = self.origin()
        return (
            f"{type(self).__name__}(origin=({origin.lon:g}, {origin.lat:g}), "
            f"scale={self._scale:g}, translate=({self._translate[0]:g}, {self._translate[1]:g}))"
        )
