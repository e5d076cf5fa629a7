"""Geometry dispatch into the path renderer, plus projected area and centroid."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry import mapping as shapely_mapping
from shapely.geometry.base import BaseGeometry

from .constants import RENDERER
from .models import ClosePath, Coordinate, LineTo, MoveTo, PathInstruction, ProjectedPoint
from .path import DegenerateGeometry, PathRenderer, RenderStats
from .projection import Projection

_LOGGER = logging.getLogger("geocomposite.geometry")

_MIN_RING_VERTICES = 4


@dataclass(slots=True)
class RenderReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)
    stats: RenderStats = field(default_factory=RenderStats)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)

    def count(self, key: str, amount: int = 1) -> None:
        self.summary[key] = self.summary.get(key, 0) + amount


@dataclass(frozen=True, slots=True)
class RenderedFeature:
    """Instructions for one top-level feature, with its properties."""

    instructions: tuple[PathInstruction, ...]
    properties: Mapping[str, Any] = field(default_factory=dict)
    feature_id: str | None = None


def as_geojson(obj: Any) -> Mapping[str, Any]:
    """Return a GeoJSON-like mapping for a mapping, shapely geometry or `__geo_interface__`."""
    if isinstance(obj, BaseGeometry):
        return shapely_mapping(obj)
    if isinstance(obj, Mapping):
        return obj
    geo_interface = getattr(obj, "__geo_interface__", None)
    if isinstance(geo_interface, Mapping):
        return geo_interface
    raise ValueError(f"Unsupported geometry object of type {type(obj).__name__}")


def marker_instructions(
    center: ProjectedPoint,
    radius: float,
    sides: int = RENDERER.marker_sides,
) -> list[PathInstruction]:
    """Closed regular polygon approximating a circle around `center`."""
    out: list[PathInstruction] = []
    for idx in range(sides):
        angle = 2.0 * math.pi * idx / sides
        point = ProjectedPoint(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))
        out.append(MoveTo(point) if idx == 0 else LineTo(point))
    out.append(ClosePath())
    return out


class GeometryDispatcher:
    """Route GeoJSON-style geometry trees into a `PathRenderer`.

    Degenerate lines and rings are recorded in the report and skipped; their
    siblings still render. Polygon rings with fewer than four vertices (three
    distinct points plus closure) are ignored quietly.
    """

    def __init__(
        self,
        projection: Projection,
        *,
        tolerance_px: float = RENDERER.tolerance_px,
        max_depth: int = RENDERER.max_depth,
        magnitude_margin: float = RENDERER.magnitude_margin,
        point_radius_px: float = RENDERER.point_radius_px,
    ) -> None:
        if not math.isfinite(point_radius_px) or point_radius_px < 0:
            raise ValueError(f"point_radius_px must be non-negative, got {point_radius_px!r}")
        self.projection = projection
        self.renderer = PathRenderer(
            projection,
            tolerance_px=tolerance_px,
            max_depth=max_depth,
            magnitude_margin=magnitude_margin,
        )
        self.point_radius_px = float(point_radius_px)

    # -- rendering ---------------------------------------------------------

    def render(self, obj: Any, report: RenderReport | None = None) -> list[PathInstruction]:
        """Flatten a whole geometry tree into one instruction list."""
        report = report if report is not None else RenderReport()
        self._note_projection(report)
        out: list[PathInstruction] = []
        self._dispatch(as_geojson(obj), out, report)
        return out

    def render_features(self, obj: Any, report: RenderReport | None = None) -> list[RenderedFeature]:
        """Render each top-level feature separately, keeping its properties."""
        report = report if report is not None else RenderReport()
        self._note_projection(report)
        features: list[RenderedFeature] = []
        for feature in _iter_features(as_geojson(obj)):
            out: list[PathInstruction] = []
            geometry = feature.get("geometry")
            if geometry is not None:
                self._dispatch(as_geojson(geometry), out, report)
            report.count("features")
            if not out:
                continue
            raw_id = feature.get("id")
            features.append(
                RenderedFeature(
                    instructions=tuple(out),
                    properties=dict(feature.get("properties") or {}),
                    feature_id=None if raw_id is None else str(raw_id),
                )
            )
        return features

    def _note_projection(self, report: RenderReport) -> None:
        msg = f"Projected with {self.projection.projection_name()}"
        if msg not in report.infos:
            report.add_info(msg)

    def _dispatch(self, geo: Mapping[str, Any], out: list[PathInstruction], report: RenderReport) -> None:
        geom_type = geo.get("type")
        if geom_type == "FeatureCollection":
            for feature in geo.get("features") or []:
                self._dispatch(as_geojson(feature), out, report)
        elif geom_type == "Feature":
            geometry = geo.get("geometry")
            if geometry is not None:
                self._dispatch(as_geojson(geometry), out, report)
        elif geom_type == "GeometryCollection":
            for geometry in geo.get("geometries") or []:
                self._dispatch(as_geojson(geometry), out, report)
        elif geom_type == "Point":
            self._point(geo.get("coordinates"), out, report)
        elif geom_type == "MultiPoint":
            for position in geo.get("coordinates") or []:
                self._point(position, out, report)
        elif geom_type == "LineString":
            self._line(geo.get("coordinates") or [], False, out, report)
        elif geom_type == "MultiLineString":
            for line in geo.get("coordinates") or []:
                self._line(line, False, out, report)
        elif geom_type == "Polygon":
            self._polygon(geo.get("coordinates") or [], out, report)
        elif geom_type == "MultiPolygon":
            for polygon in geo.get("coordinates") or []:
                self._polygon(polygon, out, report)
        else:
            report.add_warning(f"Skipped unsupported geometry type {geom_type!r}")

    def _point(self, position: Any, out: list[PathInstruction], report: RenderReport) -> None:
        if not position or len(position) < 2:
            report.add_error(f"Point without a (lon, lat) position: {position!r}")
            return
        center = self.projection.forward(position)
        if not center.is_finite:
            report.add_warning(f"Point {tuple(position[:2])} projects off the plane; skipped")
            return
        out.extend(marker_instructions(center, self.point_radius_px))
        report.count("points")

    def _line(
        self,
        coordinates: Sequence[Sequence[float]],
        closed: bool,
        out: list[PathInstruction],
        report: RenderReport,
    ) -> None:
        try:
            instructions = self.renderer.render(coordinates, closed)
        except DegenerateGeometry as exc:
            report.add_error(str(exc))
            _LOGGER.warning("Skipped degenerate geometry: %s", exc)
            return
        report.stats.merge(self.renderer.stats)
        report.count("rings" if closed else "lines")
        if self.renderer.stats.suppressed:
            report.count("suppressed_rings")
        out.extend(instructions)

    def _polygon(
        self,
        rings: Sequence[Sequence[Sequence[float]]],
        out: list[PathInstruction],
        report: RenderReport,
    ) -> None:
        for ring in rings:
            if len(ring) < _MIN_RING_VERTICES:
                _LOGGER.debug("Ignoring ring with %d vertices", len(ring))
                report.count("ignored_rings")
                continue
            self._line(ring, True, out, report)

    # -- measures ----------------------------------------------------------

    def projected_area(self, obj: Any) -> float:
        """Planar area of all polygons in `obj`, holes subtracted."""
        return float(sum(polygon.area for polygon in self._projected_polygons(as_geojson(obj))))

    def projected_centroid(self, obj: Any) -> ProjectedPoint | None:
        """Area-weighted planar centroid of the polygons in `obj`."""
        polygons = [polygon for polygon in self._projected_polygons(as_geojson(obj)) if polygon.area > 0]
        if not polygons:
            return None
        centroid = MultiPolygon(polygons).centroid if len(polygons) > 1 else polygons[0].centroid
        return ProjectedPoint(float(centroid.x), float(centroid.y))

    def _projected_polygons(self, geo: Mapping[str, Any]) -> Iterator[Polygon]:
        geom_type = geo.get("type")
        if geom_type == "FeatureCollection":
            for feature in geo.get("features") or []:
                yield from self._projected_polygons(as_geojson(feature))
        elif geom_type == "Feature":
            geometry = geo.get("geometry")
            if geometry is not None:
                yield from self._projected_polygons(as_geojson(geometry))
        elif geom_type == "GeometryCollection":
            for geometry in geo.get("geometries") or []:
                yield from self._projected_polygons(as_geojson(geometry))
        elif geom_type == "Polygon":
            polygon = self._project_polygon(geo.get("coordinates") or [])
            if polygon is not None:
                yield polygon
        elif geom_type == "MultiPolygon":
            for rings in geo.get("coordinates") or []:
                polygon = self._project_polygon(rings)
                if polygon is not None:
                    yield polygon

    def _project_polygon(self, rings: Sequence[Sequence[Sequence[float]]]) -> Polygon | None:
        projected: list[list[tuple[float, float]]] = []
        for ring in rings:
            if len(ring) < _MIN_RING_VERTICES:
                continue
            points = [self.projection.forward(Coordinate.of(position)) for position in ring]
            if not all(point.is_finite for point in points):
                _LOGGER.debug("Ring projects off the plane; left out of area/centroid")
                continue
            projected.append([point.as_tuple() for point in points])
        if not projected:
            return None
        return Polygon(projected[0], projected[1:])


def _iter_features(geo: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    geom_type = geo.get("type")
    if geom_type == "FeatureCollection":
        for feature in geo.get("features") or []:
            yield from _iter_features(as_geojson(feature))
    elif geom_type == "Feature":
        yield geo
    else:
        yield {"type": "Feature", "geometry": geo, "properties": {}}


def format_render_lines(report: RenderReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    counts = ", ".join(f"{key}={value}" for key, value in sorted(report.summary.items()))
    if counts:
        lines.append(f"[INFO] Rendered {counts}")
    stats = report.stats
    lines.append(
        f"[INFO] Subdivision: edges={stats.edges} leaves={stats.leaves} "
        f"wraps={stats.wraps} suppressed={stats.suppressed} depth={stats.max_depth}"
    )
    if report.ok:
        lines.append("[OK] Rendering completed with no errors.")
    return lines
