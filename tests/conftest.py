from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest

from geocomposite.azimuthal import HammerProjection
from geocomposite.cylindrical import CylindricalEqualAreaProjection
from geocomposite.models import Viewport


@pytest.fixture
def viewport() -> Viewport:
    return Viewport(0.0, 0.0, 960.0, 500.0)


@pytest.fixture
def hammer() -> HammerProjection:
    return HammerProjection(b=2.0)


@pytest.fixture
def lambert() -> HammerProjection:
    return HammerProjection(b=1.0)


@pytest.fixture
def unit_cylindrical() -> CylindricalEqualAreaProjection:
    """Raw half-unit output with y flipped: x = lambda / 2, y = -sin(phi) / 2."""
    return CylindricalEqualAreaProjection().scale(1.0).translate((0.0, 0.0))


@pytest.fixture
def feature_collection() -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": "square",
                "properties": {"name": "Square"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[0, 0], [20, 0], [20, 20], [0, 20], [0, 0]]],
                },
            },
            {
                "type": "Feature",
                "properties": {"name": "Track"},
                "geometry": {"type": "LineString", "coordinates": [[-40, 10], [40, 30]]},
            },
            {
                "type": "Feature",
                "properties": {"name": "Capital"},
                "geometry": {"type": "Point", "coordinates": [12.5, 41.9]},
            },
        ],
    }


@pytest.fixture
def write_geojson(tmp_path: Path) -> Callable[[Mapping[str, Any], str], Path]:
    def _write(payload: Mapping[str, Any], name: str = "input.geojson") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
