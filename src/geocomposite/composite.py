"""Adaptive composite projection.

Picks one member of the projection family from the current zoom level and
the latitude of the view origin, cross-fading over transition bands so that
zooming and panning animate without jumps:

    whole globe    Hammer, then a Hammer morphing into Lambert azimuthal
    continents     Lambert azimuthal
    regions        Lambert cylindrical near the equator, Albers conic at mid
                   latitudes, Lambert azimuthal near the poles
    local          blend into Mercator, then Mercator

Zoom is the pixel scale divided by half of the viewport's shorter side.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from .azimuthal import HammerProjection
from .blend import BlendedProjection
from .conic import AlbersConicProjection
from .constants import DEFAULT_VIEWPORT, REGIMES
from .cylindrical import CylindricalEqualAreaProjection, MercatorProjection
from .models import Coordinate, ProjectedPoint, Viewport
from .projection import NotInvertible, Projection

_LOGGER = logging.getLogger("geocomposite.composite")


class UnhandledRegime(RuntimeError):
    """Raised when a zoom/latitude pair falls outside every declared band."""


class Regime(Enum):
    HAMMER = "Hammer"
    MODIFIED_HAMMER = "Modified Hammer"
    LAMBERT_AZIMUTHAL = "Lambert azimuthal"
    LAMBERT_CYLINDRICAL = "Lambert cylindrical"
    ALBERS_ADJUSTED = "Albers conic with adjusted standard parallels"
    ALBERS = "Albers conic"
    MERCATOR_BLEND = "Interpolation with Mercator"
    MERCATOR = "Mercator"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Selection:
    """One immutable selector outcome: the regime tag and its projection."""

    regime: Regime
    projection: Projection
    zoom: float
    alpha: float | None = None


@dataclass(frozen=True, slots=True)
class _SelectionContext:
    origin: Coordinate
    scale: float
    viewport: Viewport
    translate: tuple[float, float]
    previous: Projection | None

    @property
    def zoom(self) -> float:
        return self.scale / self.viewport.smaller_dimension


def _configure(projection: Projection, ctx: _SelectionContext) -> Projection:
    return projection.scale(ctx.scale).translate(ctx.translate).origin(ctx.origin)


def _hammer(ctx: _SelectionContext, b: float) -> Projection:
    return _configure(HammerProjection(b=b), ctx)


def _lambert_cylindrical(ctx: _SelectionContext) -> Projection:
    return _configure(CylindricalEqualAreaProjection(), ctx)


def _mercator(ctx: _SelectionContext) -> Projection:
    return _configure(MercatorProjection(), ctx)


def _sample_latitude(projection: Projection, point: tuple[float, float]) -> float:
    try:
        return projection.inverse(point).lat
    except NotInvertible:
        return math.nan


def _visible_latitudes(ctx: _SelectionContext) -> tuple[float, float]:
    """Latitudes at the top-centre and bottom-centre pixels of the viewport.

    Sampled from the previously active projection, so the outcome depends on
    the order of re-selections. Falls back to a Lambert cylindrical fitted to
    the current view when the previous projection has no answer.
    """
    vp = ctx.viewport
    cx = vp.center[0]
    top_px, bottom_px = (cx, vp.y0), (cx, vp.y1)
    if ctx.previous is not None:
        top = _sample_latitude(ctx.previous, top_px)
        bottom = _sample_latitude(ctx.previous, bottom_px)
        if math.isfinite(top) and math.isfinite(bottom):
            return (top, bottom)
        _LOGGER.debug("Previous projection cannot sample the viewport; using cylindrical fallback.")
    fallback = _lambert_cylindrical(ctx)
    top = _sample_latitude(fallback, top_px)
    bottom = _sample_latitude(fallback, bottom_px)
    return (top if math.isfinite(top) else 90.0, bottom if math.isfinite(bottom) else -90.0)


def _albers(
    ctx: _SelectionContext,
    alpha: float | None = None,
    dest_parallel: float = 0.0,
) -> Projection:
    top, bottom = _visible_latitudes(ctx)
    inset = REGIMES.parallel_inset_ratio * (top - bottom)
    top_parallel = top - inset
    bottom_parallel = bottom + inset
    if alpha is not None:
        top_parallel = (1.0 - alpha) * top_parallel + alpha * dest_parallel
        bottom_parallel = (1.0 - alpha) * bottom_parallel + alpha * dest_parallel
    parallels = (
        max(-90.0, min(90.0, bottom_parallel)),
        max(-90.0, min(90.0, top_parallel)),
    )
    return _configure(AlbersConicProjection(parallels=parallels), ctx)


def _regional_selection(ctx: _SelectionContext, lat: float) -> Selection:
    """Regime of the 6-13 zoom band, also the first side of the Mercator blend."""
    p = REGIMES
    zoom = ctx.zoom
    if lat <= p.cylindrical_max_lat:
        return Selection(Regime.LAMBERT_CYLINDRICAL, _lambert_cylindrical(ctx), zoom)
    if lat >= p.azimuthal_min_lat:
        return Selection(Regime.LAMBERT_AZIMUTHAL, _hammer(ctx, p.lambert_b), zoom)
    if lat < p.adjusted_conic_max_lat:
        alpha = (p.adjusted_conic_max_lat - lat) / (p.adjusted_conic_max_lat - p.cylindrical_max_lat)
        return Selection(Regime.ALBERS_ADJUSTED, _albers(ctx, alpha, 0.0), zoom, alpha)
    if lat > p.polar_conic_min_lat:
        alpha = (lat - p.polar_conic_min_lat) / (p.azimuthal_min_lat - p.polar_conic_min_lat)
        pole = 90.0 if ctx.origin.lat > 0 else -90.0
        return Selection(Regime.ALBERS_ADJUSTED, _albers(ctx, alpha, pole), zoom, alpha)
    return Selection(Regime.ALBERS, _albers(ctx), zoom)


def select_projection(
    *,
    origin: Coordinate,
    scale: float,
    viewport: Viewport,
    translate: tuple[float, float],
    previous: Projection | None = None,
) -> Selection:
    """Build the projection for one (origin, scale) pair."""
    ctx = _SelectionContext(
        origin=origin,
        scale=scale,
        viewport=viewport,
        translate=translate,
        previous=previous,
    )
    p = REGIMES
    zoom = ctx.zoom
    lat = abs(origin.lat)
    if not math.isfinite(zoom) or not math.isfinite(lat) or zoom <= 0:
        raise UnhandledRegime(f"No projection regime for zoom={zoom!r}, latitude={origin.lat!r}")

    if zoom <= p.hammer_max_scale:
        return Selection(Regime.HAMMER, _hammer(ctx, p.hammer_b), zoom)
    if zoom <= p.modified_hammer_max_scale:
        t = (zoom - p.hammer_max_scale) / (p.modified_hammer_max_scale - p.hammer_max_scale)
        b = p.hammer_b + t * (p.lambert_b - p.hammer_b)
        return Selection(Regime.MODIFIED_HAMMER, _hammer(ctx, b), zoom, t)
    if zoom <= p.azimuthal_max_scale:
        return Selection(Regime.LAMBERT_AZIMUTHAL, _hammer(ctx, p.lambert_b), zoom)
    if zoom <= p.transitional_max_scale and lat < p.transitional_max_lat:
        lat2 = (zoom - p.azimuthal_max_scale) * p.transitional_lat_rate
        if lat < lat2:
            return Selection(Regime.LAMBERT_CYLINDRICAL, _lambert_cylindrical(ctx), zoom)
        alpha = (p.transitional_max_lat - lat) / (p.transitional_max_lat - lat2)
        return Selection(Regime.ALBERS_ADJUSTED, _albers(ctx, alpha, 0.0), zoom, alpha)
    if zoom <= p.conic_max_scale:
        return _regional_selection(ctx, lat)
    if zoom < p.mercator_min_scale:
        alpha = (zoom - p.conic_max_scale) / (p.mercator_min_scale - p.conic_max_scale)
        regional = _regional_selection(ctx, lat)
        blend = BlendedProjection(regional.projection, _mercator(ctx), alpha)
        return Selection(Regime.MERCATOR_BLEND, blend, zoom, alpha)
    if zoom >= p.mercator_min_scale:
        return Selection(Regime.MERCATOR, _mercator(ctx), zoom)
    raise UnhandledRegime(f"No projection regime for zoom={zoom!r}, latitude={origin.lat!r}")


class CompositeProjection(Projection):
    """Projection facade that swaps its concrete projection as the view changes.

    Every mutation of origin, scale, translate or viewport re-runs the
    selector synchronously and replaces the held `Selection`. Instances are
    not thread-safe; serialise mutation and reads or use one per thread.
    """

    name = "composite"

    def __init__(
        self,
        viewport: Viewport | Sequence[float] | None = None,
        *,
        origin: Coordinate | Sequence[float] = (0.0, 0.0),
        scale: float = 100.0,
        translate: Sequence[float] | None = None,
    ) -> None:
        super().__init__()
        self._viewport = Viewport.of(viewport if viewport is not None else DEFAULT_VIEWPORT)
        self._origin = Coordinate.of(origin)
        self._translate_explicit = translate is not None
        self._translate = self._viewport.center
        self._selection: Selection | None = None
        super().scale(scale)
        if translate is not None:
            super().translate(translate)
        self._reselect()

    # -- selection ---------------------------------------------------------

    @property
    def selection(self) -> Selection:
        assert self._selection is not None
        return self._selection

    @property
    def active(self) -> Projection:
        return self.selection.projection

    @property
    def regime(self) -> Regime:
        return self.selection.regime

    @property
    def zoom(self) -> float:
        return self._scale / self._viewport.smaller_dimension

    def projection_name(self) -> str:
        return self.selection.regime.label

    def _reselect(self) -> None:
        previous = self._selection
        self._selection = select_projection(
            origin=self._origin,
            scale=self._scale,
            viewport=self._viewport,
            translate=self._translate,
            previous=previous.projection if previous is not None else None,
        )
        if previous is None or previous.regime is not self._selection.regime:
            _LOGGER.debug(
                "Regime %s at zoom %.3f, origin (%.3f, %.3f)",
                self._selection.regime.label,
                self._selection.zoom,
                self._origin.lon,
                self._origin.lat,
            )

    # -- transform API -----------------------------------------------------

    def forward(self, coordinate: Coordinate | Sequence[float]) -> ProjectedPoint:
        return self.active.forward(coordinate)

    def inverse(self, point: ProjectedPoint | Sequence[float]) -> Coordinate:
        return self.active.inverse(point)

    def frame(self, coordinate: Coordinate | Sequence[float]) -> tuple[float, float]:
        return self.active.frame(coordinate)

    def should_interpolate(self) -> bool:
        return self.active.should_interpolate()

    def validate_path(self, coordinates: Sequence[Coordinate | Sequence[float]]) -> bool:
        return self.active.validate_path(coordinates)

    # -- configuration API -------------------------------------------------

    def origin(self, value: Coordinate | Sequence[float] | None = None):
        if value is None:
            return self._origin
        coord = Coordinate.of(value)
        if not coord.is_finite:
            raise ValueError(f"origin must be finite, got {value!r}")
        self._origin = coord
        self._reselect()
        return self

    def scale(self, value: float | None = None):
        if value is None:
            return self._scale
        super().scale(value)
        self._reselect()
        return self

    def translate(self, value: Sequence[float] | None = None):
        if value is None:
            return self._translate
        super().translate(value)
        self._translate_explicit = True
        self._reselect()
        return self

    def rotate(self, value: Sequence[float] | None = None):
        """d3-style rotation; setting `(lambda, phi)` moves the origin to `(-lambda, -phi)`.

        The composite keeps north up, so a third angle must be zero.
        """
        if value is None:
            return (-self._origin.lon, -self._origin.lat, 0.0)
        if len(value) not in (2, 3):
            raise ValueError("Expected two or three angles for 'rotate'")
        if len(value) == 3 and float(value[2]) != 0.0:
            raise ValueError(f"The composite does not support a gamma rotation, got {value[2]!r}")
        return self.origin((-float(value[0]), -float(value[1])))

    def center(self, value: Coordinate | Sequence[float] | None = None):
        if value is None:
            return self.active.center()
        raise TypeError("The composite derives its centre from the origin; set origin instead")

    def viewport(self, value: Viewport | Sequence[float] | None = None):
        if value is None:
            return self._viewport
        self._viewport = Viewport.of(value)
        if not self._translate_explicit:
            self._translate = self._viewport.center
        self._reselect()
        return self

    def __repr__(self) -> str:
        return (
            f"CompositeProjection(regime={self.projection_name()!r}, zoom={self.zoom:g}, "
            f"origin=({self._origin.lon:g}, {self._origin.lat:g}))"
        )


@dataclass(frozen=True, slots=True)
class RegimeSample:
    zoom: float
    regime: Regime
    point: ProjectedPoint | None


def regime_sweep(
    zooms: Iterable[float],
    *,
    origin: Coordinate | Sequence[float] = (0.0, 0.0),
    viewport: Viewport | Sequence[float] | None = None,
    probe: Coordinate | Sequence[float] | None = None,
) -> list[RegimeSample]:
    """Zoom one composite through `zooms`, recording the regime at each step."""
    composite = CompositeProjection(viewport, origin=origin)
    unit = composite.viewport().smaller_dimension
    samples: list[RegimeSample] = []
    for zoom in zooms:
        composite.scale(zoom * unit)
        point = composite.forward(probe) if probe is not None else None
        samples.append(RegimeSample(zoom=zoom, regime=composite.regime, point=point))
    return samples
