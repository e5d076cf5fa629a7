from __future__ import annotations

import math

import pytest

from geocomposite.azimuthal import HammerProjection
from geocomposite.cylindrical import CylindricalEqualAreaProjection
from geocomposite.projection import SphereRotation, normalize_longitude, safe_asin, safe_atan2


def test_normalize_longitude_inside_range_is_untouched() -> None:
    assert normalize_longitude(0.25) == (0.25, False)
    assert normalize_longitude(math.pi) == (math.pi, False)


@pytest.mark.parametrize(
    ("lam", "expected", "wrapped"),
    [
        (1.5 * math.pi, -0.5 * math.pi, True),
        (-1.5 * math.pi, 0.5 * math.pi, True),
        (4.0 * math.pi + 0.1, 0.1, False),
    ],
)
def test_normalize_longitude_flag_toggles_per_turn(lam: float, expected: float, wrapped: bool) -> None:
    value, flag = normalize_longitude(lam)
    assert value == pytest.approx(expected)
    assert flag is wrapped


def test_safe_asin_clamps_overshoot_only() -> None:
    assert safe_asin(1.0 + 1e-15) == math.pi / 2
    assert safe_asin(-1.0 - 1e-15) == -math.pi / 2
    assert safe_asin(0.5) == pytest.approx(math.asin(0.5))
    assert math.isnan(safe_asin(1.1))


def test_safe_atan2_reads_vanishing_arguments_as_zero() -> None:
    assert safe_atan2(0.0, 0.0) == 0.0
    assert safe_atan2(1e-60, -1e-60) == 0.0
    assert safe_atan2(0.0, -1.0) == pytest.approx(math.pi)


def test_rotation_brings_origin_to_frame_center() -> None:
    rotation = SphereRotation(math.radians(-30.0), math.radians(-45.0))
    lam, phi, wrapped = rotation.forward(math.radians(30.0), math.radians(45.0))
    assert lam == pytest.approx(0.0, abs=1e-12)
    assert phi == pytest.approx(0.0, abs=1e-12)
    assert wrapped is False


@pytest.mark.parametrize("point", [(10.0, 20.0), (-120.0, -35.0), (170.0, 60.0)])
def test_rotation_inverse_undoes_forward(point: tuple[float, float]) -> None:
    rotation = SphereRotation(math.radians(-20.0), math.radians(-35.0), math.radians(10.0))
    lam, phi, _ = rotation.forward(math.radians(point[0]), math.radians(point[1]))
    back_lam, back_phi = rotation.inverse(lam, phi)
    assert math.degrees(back_lam) == pytest.approx(point[0], abs=1e-9)
    assert math.degrees(back_phi) == pytest.approx(point[1], abs=1e-9)


def test_configuration_methods_chain_and_read_back() -> None:
    projection = HammerProjection()
    assert projection.scale(200) is projection
    assert projection.translate((100, 50)) is projection
    assert projection.rotate((10, 20)) is projection
    assert projection.scale() == 200.0
    assert projection.translate() == (100.0, 50.0)
    assert projection.rotate() == pytest.approx((10.0, 20.0, 0.0))


def test_invalid_configuration_is_rejected() -> None:
    projection = HammerProjection()
    with pytest.raises(ValueError):
        projection.scale(0)
    with pytest.raises(ValueError):
        projection.scale(math.nan)
    with pytest.raises(ValueError):
        projection.translate((1.0,))
    with pytest.raises(ValueError):
        projection.rotate((1.0,))


@pytest.mark.parametrize("projection_cls", [HammerProjection, CylindricalEqualAreaProjection])
def test_origin_lands_on_translate(projection_cls: type) -> None:
    projection = projection_cls().scale(300).translate((400, 300)).origin((30.0, 45.0))
    point = projection.forward((30.0, 45.0))
    assert point.x == pytest.approx(400.0, abs=1e-9)
    assert point.y == pytest.approx(300.0, abs=1e-9)
    assert projection.origin().as_tuple() == pytest.approx((30.0, 45.0))


def test_screen_y_grows_downward(hammer: HammerProjection) -> None:
    north = hammer.forward((0.0, 30.0))
    south = hammer.forward((0.0, -30.0))
    assert north.y < 250.0 < south.y
