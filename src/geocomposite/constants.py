"""Numeric tolerances and selector thresholds shared by the projection engine."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class _NumericPolicy:
    """Floating-point guards used by the raw transforms."""

    # Substituted for a vanishing Hammer denominator at the antipode.
    nu_floor: float
    # Below this |2z^2 - 1| the Hammer inverse is singular.
    singular_inverse_eps: float
    # Both atan2 arguments under this magnitude read as angle zero.
    atan2_zero_eps: float
    # asin arguments up to this magnitude clamp to +-pi/2.
    asin_one_tol: float
    # Albers cones flatter than this fall back to cylindrical equal-area.
    conic_degenerate_eps: float
    # Mercator latitude cap, keeps ln(tan) finite at the poles.
    mercator_max_lat_deg: float


@dataclass(frozen=True, slots=True)
class _RimPolicy:
    """Rim band used by the Lambert azimuthal path screen."""

    lambert_b_tolerance: float
    lon_margin_rad: float
    lat_margin_rad: float


@dataclass(frozen=True, slots=True)
class _RegimePolicy:
    """Scale and latitude thresholds of the composite selector.

    The latitude thresholds and the parallel inset are empirically tuned and
    have no closed-form derivation; calibrate against cartographic references
    before relying on them for fidelity-critical output.
    """

    hammer_max_scale: float
    modified_hammer_max_scale: float
    azimuthal_max_scale: float
    transitional_max_scale: float
    conic_max_scale: float
    mercator_min_scale: float
    hammer_b: float
    lambert_b: float
    transitional_max_lat: float
    transitional_lat_rate: float
    cylindrical_max_lat: float
    adjusted_conic_max_lat: float
    polar_conic_min_lat: float
    azimuthal_min_lat: float
    parallel_inset_ratio: float


@dataclass(frozen=True, slots=True)
class _RendererPolicy:
    tolerance_px: float
    max_depth: int
    magnitude_margin: float
    point_radius_px: float
    marker_sides: int


NUMERIC = _NumericPolicy(
    nu_floor=1e-12,
    singular_inverse_eps=1e-10,
    atan2_zero_eps=1e-50,
    asin_one_tol=1.0 + 1e-14,
    conic_degenerate_eps=1e-6,
    mercator_max_lat_deg=math.degrees(math.atan(math.sinh(math.pi))),
)
RIM = _RimPolicy(
    lambert_b_tolerance=0.05,
    lon_margin_rad=math.pi / 4.0,
    lat_margin_rad=math.pi / 12.0,
)
REGIMES = _RegimePolicy(
    hammer_max_scale=1.5,
    modified_hammer_max_scale=2.0,
    azimuthal_max_scale=4.0,
    transitional_max_scale=6.0,
    conic_max_scale=13.0,
    mercator_min_scale=15.0,
    hammer_b=2.0,
    lambert_b=1.0,
    transitional_max_lat=22.0,
    transitional_lat_rate=7.5,
    cylindrical_max_lat=15.0,
    adjusted_conic_max_lat=22.0,
    polar_conic_min_lat=60.0,
    azimuthal_min_lat=75.0,
    parallel_inset_ratio=0.15,
)
RENDERER = _RendererPolicy(
    tolerance_px=25.0,
    max_depth=20,
    magnitude_margin=2.0,
    point_radius_px=4.5,
    marker_sides=16,
)

DEFAULT_VIEWPORT = (0.0, 0.0, 960.0, 500.0)
