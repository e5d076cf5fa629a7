from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from geocomposite.io_geo import load_geometry


def test_geojson_is_read_directly(write_geojson: Callable[..., Path], feature_collection: dict[str, Any]) -> None:
    loaded = load_geometry(write_geojson(feature_collection))
    assert loaded["type"] == "FeatureCollection"
    assert len(loaded["features"]) == 3


def test_non_geojson_json_is_rejected(write_geojson: Callable[..., Path]) -> None:
    with pytest.raises(ValueError):
        load_geometry(write_geojson({"hello": "world"}, "other.json"))


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_geometry(tmp_path / "absent.geojson")


def test_other_formats_go_through_geopandas(tmp_path: Path) -> None:
    gpd = pytest.importorskip("geopandas")
    from shapely.geometry import Point

    frame = gpd.GeoDataFrame({"name": ["a"]}, geometry=[Point(1.0, 2.0)], crs="EPSG:4326")
    path = tmp_path / "points.gpkg"
    frame.to_file(path, driver="GPKG")
    loaded = load_geometry(path)
    assert loaded["type"] == "FeatureCollection"
    assert loaded["features"][0]["geometry"]["type"] == "Point"
