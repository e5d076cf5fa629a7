"""Geometry loading for the CLI: GeoJSON directly, everything else via GeoPandas."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, cast

LOGGER = logging.getLogger("geocomposite.io_geo")

_GEOJSON_SUFFIXES = {".json", ".geojson"}
_GEOJSON_TYPES = {
    "FeatureCollection",
    "Feature",
    "GeometryCollection",
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
}


def load_geometry(path: str | Path) -> Mapping[str, Any]:
    """Return a GeoJSON mapping in lon/lat degrees for `path`."""
    src = Path(path)
    if not src.exists():
        raise FileNotFoundError(f"Geometry file not found: {src}")
    if src.suffix.lower() in _GEOJSON_SUFFIXES:
        with src.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, Mapping) or raw.get("type") not in _GEOJSON_TYPES:
            raise ValueError(f"{src} is not a GeoJSON object")
        return cast(Mapping[str, Any], raw)
    return _load_with_geopandas(src)


def _load_with_geopandas(src: Path) -> Mapping[str, Any]:
    gpd = _require_geopandas()
    frame = gpd.read_file(src)
    if frame.crs is not None and frame.crs.to_epsg() != 4326:
        LOGGER.info("Reprojecting %s from %s to EPSG:4326", src.name, frame.crs)
        frame = frame.to_crs(epsg=4326)
    LOGGER.debug("Loaded %d features from %s", len(frame), src)
    return cast(Mapping[str, Any], frame.__geo_interface__)


def _require_geopandas() -> Any:
    try:
        import geopandas as gpd
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("geopandas is required to read non-GeoJSON geometry files") from exc
    return gpd
