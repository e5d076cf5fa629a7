from __future__ import annotations

import math

import pytest

from geocomposite.azimuthal import HammerProjection, lambert_azimuthal
from geocomposite.projection import NotInvertible

POINTS = [(10.0, 20.0), (-120.0, -40.0), (150.0, 60.0), (-30.0, -75.0)]


@pytest.mark.parametrize("b", [1.0, 1.5, 2.0])
@pytest.mark.parametrize("point", POINTS)
def test_inverse_recovers_forward(b: float, point: tuple[float, float]) -> None:
    projection = HammerProjection(b=b).scale(150).translate((480, 250))
    back = projection.inverse(projection.forward(point))
    assert back.lon == pytest.approx(point[0], abs=1e-7)
    assert back.lat == pytest.approx(point[1], abs=1e-7)


def test_inverse_recovers_forward_with_tilted_origin() -> None:
    projection = lambert_azimuthal().origin((20.0, 30.0))
    for point in [(25.0, 35.0), (-10.0, 5.0), (80.0, 60.0)]:
        back = projection.inverse(projection.forward(point))
        assert back.lon == pytest.approx(point[0], abs=1e-7)
        assert back.lat == pytest.approx(point[1], abs=1e-7)


def test_hammer_extent_matches_known_half_width() -> None:
    projection = HammerProjection(b=2.0).scale(1.0).translate((0.0, 0.0))
    # Full Hammer is 2*sqrt(2) wide at unit radius; output is half-unit.
    assert projection.forward((180.0, 0.0)).x == pytest.approx(math.sqrt(2.0))


def test_inverse_is_singular_at_the_pole(lambert: HammerProjection) -> None:
    with pytest.raises(NotInvertible):
        lambert.inverse(lambert.forward((0.0, 90.0)))


def test_inverse_outside_the_disk_is_nan(hammer: HammerProjection) -> None:
    coord = hammer.inverse((480.0 + 2000.0, 250.0))
    assert math.isnan(coord.lon)
    assert math.isnan(coord.lat)


def test_antipode_projects_finite(lambert: HammerProjection) -> None:
    assert lambert.forward((180.0, 0.0)).is_finite


def test_shape_constant_is_validated() -> None:
    with pytest.raises(ValueError):
        HammerProjection(b=0.5)
    with pytest.raises(ValueError):
        HammerProjection(b=2.5)
    projection = HammerProjection()
    assert projection.b(1.25) is projection
    assert projection.b() == 1.25


def test_rim_ring_is_rejected_only_under_lambert(lambert: HammerProjection, hammer: HammerProjection) -> None:
    ring = [(170, 5), (-170, 5), (-170, -5), (170, -5), (170, 5)]
    assert lambert.validate_path(ring) is False
    assert hammer.validate_path(ring) is True


def test_ring_with_one_vertex_away_from_rim_is_accepted(lambert: HammerProjection) -> None:
    ring = [(100, 5), (-170, 5), (-170, -5), (170, -5), (100, 5)]
    assert lambert.validate_path(ring) is True


def test_lambert_tolerance_band() -> None:
    assert HammerProjection(b=1.04).is_lambert
    assert not HammerProjection(b=1.2).is_lambert
