from __future__ import annotations

import math

import pytest

from geocomposite.azimuthal import HammerProjection
from geocomposite.blend import BlendedProjection
from geocomposite.composite import (
    CompositeProjection,
    Regime,
    UnhandledRegime,
    regime_sweep,
    select_projection,
)
from geocomposite.conic import AlbersConicProjection
from geocomposite.cylindrical import CylindricalEqualAreaProjection, MercatorProjection
from geocomposite.models import Coordinate, Viewport

UNIT = 250.0  # half of the default 960x500 viewport's shorter side


def _at(zoom: float, origin: tuple[float, float] = (0.0, 0.0)) -> CompositeProjection:
    return CompositeProjection(origin=origin, scale=zoom * UNIT)


@pytest.mark.parametrize(
    ("zoom", "lat", "regime"),
    [
        (1.0, 0.0, Regime.HAMMER),
        (1.5, 40.0, Regime.HAMMER),
        (1.75, 0.0, Regime.MODIFIED_HAMMER),
        (2.0, 0.0, Regime.MODIFIED_HAMMER),
        (3.0, 50.0, Regime.LAMBERT_AZIMUTHAL),
        (5.0, 0.0, Regime.LAMBERT_CYLINDRICAL),
        (5.0, 10.0, Regime.ALBERS_ADJUSTED),
        (5.0, 40.0, Regime.ALBERS),
        (10.0, 10.0, Regime.LAMBERT_CYLINDRICAL),
        (10.0, 18.0, Regime.ALBERS_ADJUSTED),
        (10.0, 40.0, Regime.ALBERS),
        (10.0, -40.0, Regime.ALBERS),
        (10.0, 65.0, Regime.ALBERS_ADJUSTED),
        (10.0, 80.0, Regime.LAMBERT_AZIMUTHAL),
        (14.0, 40.0, Regime.MERCATOR_BLEND),
        (15.0, 0.0, Regime.MERCATOR),
        (20.0, 70.0, Regime.MERCATOR),
    ],
)
def test_regime_table(zoom: float, lat: float, regime: Regime) -> None:
    assert _at(zoom, (0.0, lat)).regime is regime


def test_modified_hammer_interpolates_shape_constant() -> None:
    active = _at(1.75).active
    assert isinstance(active, HammerProjection)
    assert active.b() == pytest.approx(1.5)


def test_lambert_azimuthal_is_unit_hammer() -> None:
    active = _at(3.0).active
    assert isinstance(active, HammerProjection)
    assert active.b() == 1.0


@pytest.mark.parametrize(
    ("zoom", "lat", "alpha"),
    [(5.0, 10.0, 12.0 / 14.5), (10.0, 18.0, 4.0 / 7.0), (10.0, 65.0, 1.0 / 3.0), (14.0, 0.0, 0.5)],
)
def test_transition_weights(zoom: float, lat: float, alpha: float) -> None:
    assert _at(zoom, (0.0, lat)).selection.alpha == pytest.approx(alpha)


def test_albers_parallels_bracket_the_view() -> None:
    active = _at(10.0, (0.0, 40.0)).active
    assert isinstance(active, AlbersConicProjection)
    lower, upper = active.parallels()
    assert 26.0 < lower < 40.0 < upper < 58.0


def test_polar_adjusted_parallels_move_toward_the_pole() -> None:
    plain = _at(10.0, (0.0, 59.0)).active
    adjusted = _at(10.0, (0.0, 70.0)).active
    assert isinstance(plain, AlbersConicProjection)
    assert isinstance(adjusted, AlbersConicProjection)
    assert adjusted.parallels()[0] > plain.parallels()[0]


def test_mercator_blend_mixes_regional_and_mercator() -> None:
    active = _at(14.0).active
    assert isinstance(active, BlendedProjection)
    assert isinstance(active.first, CylindricalEqualAreaProjection)
    assert isinstance(active.second, MercatorProjection)


@pytest.mark.parametrize("zoom", [1.0, 1.75, 3.0, 5.0, 10.0, 14.0, 20.0])
@pytest.mark.parametrize("origin", [(10.0, 40.0), (-60.0, 10.0), (100.0, 80.0), (0.0, -65.0)])
def test_origin_projects_to_translate(zoom: float, origin: tuple[float, float]) -> None:
    composite = _at(zoom, origin)
    point = composite.forward(origin)
    assert point.x == pytest.approx(480.0, abs=1e-6)
    assert point.y == pytest.approx(250.0, abs=1e-6)


@pytest.mark.parametrize("boundary", [1.5, 2.0, 13.0, 15.0])
def test_no_jump_across_band_boundaries(boundary: float) -> None:
    probe = (30.0, 45.0)
    below = _at(boundary - 1e-9).forward(probe)
    above = _at(boundary + 1e-9).forward(probe)
    assert below.distance_to(above) < 1e-3


def test_sweep_from_globe_to_street_level() -> None:
    zooms = [1.0 + 0.5 * idx for idx in range(39)]
    samples = regime_sweep(zooms, origin=(0.0, 0.0), probe=(30.0, 45.0))
    regimes: list[Regime] = []
    for sample in samples:
        assert sample.point is not None and sample.point.is_finite
        if not regimes or regimes[-1] is not sample.regime:
            regimes.append(sample.regime)
    assert regimes == [
        Regime.HAMMER,
        Regime.MODIFIED_HAMMER,
        Regime.LAMBERT_AZIMUTHAL,
        Regime.LAMBERT_CYLINDRICAL,
        Regime.MERCATOR_BLEND,
        Regime.MERCATOR,
    ]
    assert [sample.regime.label for sample in samples][-1] == "Mercator"


def test_sweep_at_mid_latitude_passes_through_albers() -> None:
    samples = regime_sweep([3.0, 5.0, 8.0, 10.0, 12.0], origin=(10.0, 45.0), probe=(12.0, 44.0))
    assert samples[0].regime is Regime.LAMBERT_AZIMUTHAL
    assert {sample.regime for sample in samples[1:]} == {Regime.ALBERS}
    assert all(sample.point is not None and sample.point.is_finite for sample in samples)


@pytest.mark.parametrize(
    ("scale", "lat"),
    [(math.nan, 0.0), (0.0, 0.0), (-10.0, 0.0), (500.0, math.nan)],
)
def test_unhandled_inputs_raise(scale: float, lat: float, viewport: Viewport) -> None:
    with pytest.raises(UnhandledRegime):
        select_projection(
            origin=Coordinate(0.0, lat),
            scale=scale,
            viewport=viewport,
            translate=viewport.center,
        )


def test_configuration_chains_and_reselects() -> None:
    composite = CompositeProjection()
    assert composite.scale(10 * UNIT) is composite
    assert composite.origin((10.0, 40.0)) is composite
    assert composite.regime is Regime.ALBERS
    assert composite.origin() == Coordinate(10.0, 40.0)
    assert composite.rotate() == (-10.0, -40.0, 0.0)
    assert composite.rotate((30.0, -40.0)) is composite
    assert composite.origin() == Coordinate(-30.0, 40.0)
    assert composite.translate() == (480.0, 250.0)
    assert composite.projection_name() == "Albers conic"


def test_center_is_read_only() -> None:
    composite = CompositeProjection()
    with pytest.raises(TypeError):
        composite.center((1.0, 2.0))


def test_viewport_change_recenters_and_rescales_zoom() -> None:
    composite = CompositeProjection(scale=500.0)
    assert composite.zoom == pytest.approx(2.0)
    composite.viewport((0, 0, 400, 400))
    assert composite.translate() == (200.0, 200.0)
    assert composite.zoom == pytest.approx(2.5)
    assert composite.regime is Regime.LAMBERT_AZIMUTHAL


def test_explicit_translate_survives_viewport_change() -> None:
    composite = CompositeProjection(scale=250.0, translate=(100.0, 100.0))
    composite.viewport((0, 0, 400, 400))
    assert composite.translate() == (100.0, 100.0)


def test_inverse_delegates_to_active(viewport: Viewport) -> None:
    composite = CompositeProjection(viewport, origin=(20.0, 10.0), scale=3 * UNIT)
    coord = composite.inverse(composite.forward((25.0, 12.0)))
    assert coord.lon == pytest.approx(25.0, abs=1e-7)
    assert coord.lat == pytest.approx(12.0, abs=1e-7)


@pytest.mark.parametrize("zoom", [13.25, 14.0, 14.75])
@pytest.mark.parametrize("origin", [(0.0, 0.0), (10.0, 40.0), (-30.0, 70.0)])
def test_composite_forward_inside_mercator_band_is_the_blend(zoom: float, origin: tuple[float, float]) -> None:
    composite = _at(zoom, origin)
    selection = composite.selection
    assert selection.regime is Regime.MERCATOR_BLEND
    blend = selection.projection
    assert isinstance(blend, BlendedProjection)
    alpha = (zoom - 13.0) / 2.0
    assert selection.alpha == pytest.approx(alpha)
    for lon, lat in [(origin[0] + 0.5, origin[1] - 0.3), (origin[0] - 0.7, origin[1] + 0.4)]:
        a = blend.first.forward((lon, lat))
        b = blend.second.forward((lon, lat))
        point = composite.forward((lon, lat))
        assert point.x == pytest.approx((1 - alpha) * a.x + alpha * b.x)
        assert point.y == pytest.approx((1 - alpha) * a.y + alpha * b.y)


def test_rotate_rejects_a_gamma_angle() -> None:
    composite = CompositeProjection()
    assert composite.rotate((10.0, -20.0, 0.0)) is composite
    assert composite.origin() == Coordinate(-10.0, 20.0)
    with pytest.raises(ValueError):
        composite.rotate((10.0, -20.0, 5.0))
    assert composite.origin() == Coordinate(-10.0, 20.0)
